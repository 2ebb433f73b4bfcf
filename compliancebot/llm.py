"""Generative-AI answers for the compliance assistant.

The workflow only needs one capability from a model: turn a prompt into text.
``GeminiAnswerer`` provides it on top of the Google Generative AI client.

Installation:
    pip install compliancebot[gemini]

Example:
    from compliancebot.llm import GeminiAnswerer

    answerer = GeminiAnswerer(api_key="...", model_name="models/gemini-2.0-flash-lite")
    print(answerer.answer("What is KYC?"))
"""

import logging
from typing import Any, Optional

from .exceptions import ExternalServiceError

logger = logging.getLogger("compliancebot.llm")

DEFAULT_MODEL = "models/gemini-2.0-flash-lite"


def _check_gemini_installed() -> None:
    """Check if the google-generativeai package is installed."""
    try:
        import google.generativeai  # noqa: F401
    except ImportError:
        raise ImportError(
            "GeminiAnswerer requires the 'google-generativeai' package. "
            "Install it with: pip install compliancebot[gemini]"
        ) from None


class Answerer:
    """Interface for the AnswerQuestion capability."""

    def answer(self, prompt: str) -> str:
        raise NotImplementedError


class GeminiAnswerer(Answerer):
    """Answers prompts with a Gemini GenerativeModel.

    A pre-built model may be passed in; otherwise one is created from
    ``api_key`` and ``model_name``. Every failure, timeouts included, is
    raised as ExternalServiceError.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: str = DEFAULT_MODEL,
        timeout: float = 30.0,
        model: Any = None,
    ):
        self.model_name = model_name
        self.timeout = timeout
        if model is None:
            _check_gemini_installed()
            import google.generativeai as genai

            genai.configure(api_key=api_key)
            model = genai.GenerativeModel(model_name)
        self._model = model

    @property
    def model(self) -> Any:
        """The wrapped GenerativeModel."""
        return self._model

    def answer(self, prompt: str) -> str:
        try:
            response = self._model.generate_content(
                prompt, request_options={"timeout": self.timeout}
            )
            text = response.text
        except Exception as e:
            logger.error("Gemini API error: %s", e)
            raise ExternalServiceError(
                "Failed to generate AI response. Please try again later.",
                service="ai",
            ) from e
        return text or ""

"""
Tests for the Gemini answerer.
"""

from unittest.mock import MagicMock, PropertyMock

import pytest

from compliancebot.exceptions import ExternalServiceError
from compliancebot.llm import DEFAULT_MODEL, GeminiAnswerer


@pytest.fixture
def model():
    mock = MagicMock()
    mock.generate_content.return_value = MagicMock(text="KYC is Know Your Customer.")
    return mock


class TestGeminiAnswerer:
    def test_defaults(self, model):
        answerer = GeminiAnswerer(model=model)
        assert answerer.model_name == DEFAULT_MODEL
        assert answerer.timeout == 30.0
        assert answerer.model is model

    def test_answer(self, model):
        answerer = GeminiAnswerer(model=model, timeout=5.0)
        assert answerer.answer("What is KYC?") == "KYC is Know Your Customer."
        model.generate_content.assert_called_once_with(
            "What is KYC?", request_options={"timeout": 5.0}
        )

    def test_empty_text(self, model):
        model.generate_content.return_value = MagicMock(text=None)
        assert GeminiAnswerer(model=model).answer("hi") == ""

    def test_failure_is_external_service_error(self, model):
        model.generate_content.side_effect = RuntimeError("deadline exceeded")
        with pytest.raises(ExternalServiceError) as exc:
            GeminiAnswerer(model=model).answer("hi")
        assert exc.value.service == "ai"
        assert exc.value.status_code == 502

    def test_blocked_response_is_external_service_error(self, model):
        response = MagicMock()
        type(response).text = PropertyMock(side_effect=ValueError("blocked"))
        model.generate_content.return_value = response
        with pytest.raises(ExternalServiceError):
            GeminiAnswerer(model=model).answer("hi")

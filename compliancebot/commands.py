"""
compliancebot - Chat command grammar.

Inbound text is parsed into a typed Intent by an ordered list of matchers;
the first matcher that returns an Intent wins:

    1. ""  / "help"                 -> Greet
    2. "ask ..."                    -> AskAI
    3. "... Document Submission: ..."  -> SubmitDocument   (case-sensitive)
    4. "... approve ..." / "reject" -> ReviewDocument
    5. "list pending"               -> ListPending
    6. "view reports"               -> ViewReports
    7. "status <hash>"              -> QueryStatus
    8. anything else                -> Unrecognized

Keywords, prefixes and token positions are the wire protocol between the
messaging transport and the workflow and must stay stable.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, ClassVar, Optional, Union

from .exceptions import AuthorizationError
from .models import Role, canonical
from .roles import RoleResolver

SUBMISSION_MARKER = "Document Submission:"

_DOCUMENT_HASH = re.compile(r"(0x)?[0-9a-fA-F]{64}")

# Submission line keys accepted for each document field.
_SUBMISSION_KEYS = {
    "document_name": ("name", "document_name"),
    "document_hash": ("hash", "document_hash"),
    "ipfs_cid": ("ipfs_cid", "ipfs"),
}


@dataclass(frozen=True)
class Greet:
    required_role: ClassVar[Optional[Role]] = None


@dataclass(frozen=True)
class AskAI:
    question: str
    document_hash: Optional[str] = None

    required_role: ClassVar[Optional[Role]] = None


@dataclass(frozen=True)
class SubmitDocument:
    fields: dict = field(default_factory=dict)

    required_role: ClassVar[Optional[Role]] = None


@dataclass(frozen=True)
class ReviewDocument:
    command: str
    document_hash: str = ""
    reason: str = ""

    required_role: ClassVar[Optional[Role]] = Role.COMPLIANCE_OFFICER
    unauthorized_message: ClassVar[str] = (
        "Only compliance officers can approve/reject documents."
    )


@dataclass(frozen=True)
class ListPending:
    required_role: ClassVar[Optional[Role]] = Role.COMPLIANCE_OFFICER
    unauthorized_message: ClassVar[str] = (
        "Only compliance officers can view pending documents."
    )


@dataclass(frozen=True)
class ViewReports:
    required_role: ClassVar[Optional[Role]] = Role.MANAGER
    unauthorized_message: ClassVar[str] = "Only managers can view compliance reports."


@dataclass(frozen=True)
class QueryStatus:
    document_hash: str = ""

    required_role: ClassVar[Optional[Role]] = None


@dataclass(frozen=True)
class Unrecognized:
    text: str = ""

    required_role: ClassVar[Optional[Role]] = None


Intent = Union[
    Greet,
    AskAI,
    SubmitDocument,
    ReviewDocument,
    ListPending,
    ViewReports,
    QueryStatus,
    Unrecognized,
]


def extract_document_hash(text: str) -> Optional[str]:
    """Best-effort search for a 64-hex-digit hash anywhere in the text."""
    match = _DOCUMENT_HASH.search(text)
    return canonical(match.group(0)) if match else None


def parse_submission(text: str) -> dict[str, str]:
    """Parse "key: value" lines into document fields.

    Keys are lower-cased with spaces turned into underscores; values keep
    everything after the first colon.
    """
    parsed: dict[str, str] = {}
    for line in text.splitlines():
        if ":" not in line:
            continue
        key, _, value = line.partition(":")
        key = "_".join(key.strip().lower().split())
        if key:
            parsed[key] = value.strip()

    fields = {}
    for name, aliases in _SUBMISSION_KEYS.items():
        fields[name] = next((parsed[a] for a in aliases if parsed.get(a)), "")
    return fields


# ==================== Matchers ====================


def _match_greet(text: str, lowered: str) -> Optional[Intent]:
    if text == "" or lowered == "help":
        return Greet()
    return None


def _match_ask(text: str, lowered: str) -> Optional[Intent]:
    if lowered.startswith("ask"):
        return AskAI(question=text[3:].strip(), document_hash=extract_document_hash(text))
    return None


def _match_submission(text: str, lowered: str) -> Optional[Intent]:
    if SUBMISSION_MARKER in text:
        return SubmitDocument(fields=parse_submission(text))
    return None


def _match_review(text: str, lowered: str) -> Optional[Intent]:
    if "approve" in lowered or "reject" in lowered:
        tokens = text.split()
        return ReviewDocument(
            command=tokens[0].lower(),
            document_hash=canonical(tokens[1]) if len(tokens) > 1 else "",
            reason=" ".join(tokens[2:]),
        )
    return None


def _match_list_pending(text: str, lowered: str) -> Optional[Intent]:
    return ListPending() if lowered == "list pending" else None


def _match_view_reports(text: str, lowered: str) -> Optional[Intent]:
    return ViewReports() if lowered == "view reports" else None


def _match_status(text: str, lowered: str) -> Optional[Intent]:
    if lowered.startswith("status "):
        tokens = text.split()
        return QueryStatus(document_hash=canonical(tokens[1]) if len(tokens) > 1 else "")
    return None


Matcher = Callable[[str, str], Optional[Intent]]

MATCHERS: tuple[Matcher, ...] = (
    _match_greet,
    _match_ask,
    _match_submission,
    _match_review,
    _match_list_pending,
    _match_view_reports,
    _match_status,
)


class CommandRouter:
    """Parses inbound text into intents and enforces per-intent roles."""

    def __init__(self, roles: RoleResolver, matchers: tuple[Matcher, ...] = MATCHERS):
        self.roles = roles
        self._matchers = matchers

    def parse(self, text: Optional[str]) -> Intent:
        text = (text or "").strip()
        lowered = text.lower()
        for matcher in self._matchers:
            intent = matcher(text, lowered)
            if intent is not None:
                return intent
        return Unrecognized(text=text)

    def authorize(self, intent: Intent, role: Role) -> None:
        required = intent.required_role
        if required is not None and role != required:
            raise AuthorizationError(
                getattr(intent, "unauthorized_message", "Unauthorized"),
                details={"required_role": required.value, "role": role.value},
            )

    def route(self, text: Optional[str], sender: str) -> Intent:
        """Parse ``text`` and check that ``sender`` may run the resulting intent.

        Raises:
            AuthorizationError: If the sender's role does not permit the intent.
        """
        intent = self.parse(text)
        self.authorize(intent, self.roles.resolve(sender))
        return intent

"""
compliancebot - Chat-driven document compliance workflow.

Routes free-text commands from customers, compliance officers and managers
into document submission, review, attestation and reporting.
"""

from .assistant import ComplianceAssistant, build_prompt_context
from .attestation import AttestationRecorder, HttpAttestationRecorder
from .commands import (
    AskAI,
    CommandRouter,
    Greet,
    Intent,
    ListPending,
    QueryStatus,
    ReviewDocument,
    SubmitDocument,
    Unrecognized,
    ViewReports,
)
from .dispatcher import CommandDispatcher
from .exceptions import (
    AlreadyProcessedError,
    AuthorizationError,
    ComplianceBotError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from .llm import Answerer, GeminiAnswerer
from .models import (
    AttestationReceipt,
    ComplianceStatus,
    Document,
    OutboundMessage,
    Report,
    ReviewOutcome,
    Role,
)
from .reports import ReportAggregator
from .roles import RoleResolver
from .workflow import ComplianceWorkflowEngine

__version__ = "0.1.0"

__all__ = [
    "ComplianceWorkflowEngine",
    "CommandRouter",
    "CommandDispatcher",
    "RoleResolver",
    "ReportAggregator",
    "ComplianceAssistant",
    "build_prompt_context",
    "AttestationRecorder",
    "HttpAttestationRecorder",
    "Answerer",
    "GeminiAnswerer",
    "Intent",
    "Greet",
    "AskAI",
    "SubmitDocument",
    "ReviewDocument",
    "ListPending",
    "ViewReports",
    "QueryStatus",
    "Unrecognized",
    "ComplianceStatus",
    "Role",
    "Document",
    "AttestationReceipt",
    "Report",
    "ReviewOutcome",
    "OutboundMessage",
    "ComplianceBotError",
    "ValidationError",
    "NotFoundError",
    "AuthorizationError",
    "AlreadyProcessedError",
    "ConflictError",
    "ExternalServiceError",
    "StoreError",
]

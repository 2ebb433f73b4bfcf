"""
compliancebot - Custom exceptions for the compliance workflow.
"""

from typing import Any, Optional


class ComplianceBotError(Exception):
    """Base exception for all compliance workflow errors."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}


class ValidationError(ComplianceBotError):
    """Raised when a required field is missing or malformed."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.field = field


class NotFoundError(ComplianceBotError):
    """Raised when no document exists for a hash."""

    status_code = 404


class AuthorizationError(ComplianceBotError):
    """Raised when the actor's role does not permit the operation."""

    status_code = 403


class AlreadyProcessedError(ComplianceBotError):
    """Raised when a document has already left pending_approval."""

    status_code = 409


class ConflictError(AlreadyProcessedError):
    """Raised when a compare-and-swap write loses against a concurrent writer."""

    def __init__(self, message: str, current_version: Optional[int] = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.current_version = current_version


class ExternalServiceError(ComplianceBotError):
    """Raised when the attestation signer or the AI model fails or times out."""

    status_code = 502

    def __init__(self, message: str, service: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.service = service


class StoreError(ComplianceBotError):
    """Raised when the document store is unavailable."""

    status_code = 503

"""
compliancebot - Data models for documents, roles, attestations and reports.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class ComplianceStatus(str, Enum):
    """Status of a document in the review workflow."""

    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not ComplianceStatus.PENDING_APPROVAL


class Role(str, Enum):
    """Role of a chat participant, derived from their address."""

    CUSTOMER = "customer"
    COMPLIANCE_OFFICER = "compliance_officer"
    MANAGER = "manager"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ")


# Wire names of the fields a Document carries.
DOCUMENT_FIELDS = (
    "document_hash",
    "document_name",
    "ipfs_cid",
    "submitter",
    "attestor",
    "compliance_status",
    "rejection_reason",
    "created_at",
    "updated_at",
    "attestationId",
    "txHash",
    "indexingValue",
)

ATTESTATION_FIELDS = ("attestationId", "txHash", "indexingValue")


def canonical(value: Optional[str]) -> str:
    """Normalise an address or document hash for storage and comparison."""
    return (value or "").strip().lower()


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class AttestationReceipt:
    """Receipt returned by the attestation signer."""

    attestation_id: str
    tx_hash: str
    indexing_value: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "attestationId": self.attestation_id,
            "txHash": self.tx_hash,
            "indexingValue": self.indexing_value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AttestationReceipt":
        return cls(
            attestation_id=str(data["attestationId"]),
            tx_hash=str(data["txHash"]),
            indexing_value=str(data.get("indexingValue") or ""),
        )


@dataclass
class Document:
    """
    A submitted document and its compliance decision.

    The document hash is the sole identity. Attestation fields are either
    all set or all empty.
    """

    document_hash: str
    document_name: str = ""
    ipfs_cid: str = ""
    submitter: str = ""
    attestor: str = ""
    compliance_status: ComplianceStatus = ComplianceStatus.PENDING_APPROVAL
    rejection_reason: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    attestation: Optional[AttestationReceipt] = None
    version: int = 1

    @property
    def is_attested(self) -> bool:
        return self.attestation is not None

    @property
    def is_pending(self) -> bool:
        return self.compliance_status == ComplianceStatus.PENDING_APPROVAL

    def to_dict(self) -> dict[str, Any]:
        result = {
            "document_hash": self.document_hash,
            "document_name": self.document_name,
            "ipfs_cid": self.ipfs_cid,
            "submitter": self.submitter,
            "attestor": self.attestor,
            "compliance_status": self.compliance_status.value,
            "rejection_reason": self.rejection_reason,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if self.attestation:
            result.update(self.attestation.to_dict())
        return result

    def snapshot(self) -> dict[str, Any]:
        """Subset of fields cached for prompt assembly."""
        return {
            "document_hash": self.document_hash,
            "document_name": self.document_name,
            "ipfs_cid": self.ipfs_cid,
            "submitter": self.submitter,
            "compliance_status": self.compliance_status.value,
        }


@dataclass
class Report:
    """Status counts and rates over a set of documents."""

    total: int = 0
    approved_count: int = 0
    rejected_count: int = 0
    pending_count: int = 0
    approval_rate_percent: int = 0
    rejection_rate_percent: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "approvedCount": self.approved_count,
            "rejectedCount": self.rejected_count,
            "pendingCount": self.pending_count,
            "approvalRatePercent": self.approval_rate_percent,
            "rejectionRatePercent": self.rejection_rate_percent,
        }


@dataclass
class OutboundMessage:
    """A reply or notification addressed to one chat participant."""

    recipient: str
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"recipient": self.recipient, "text": self.text}


@dataclass
class ReviewOutcome:
    """
    Result of a review or attestation retry.

    The status change is committed even when attestation_error is set; in that
    case the document carries no attestation fields.
    """

    document: Document
    attestation_error: Optional[Exception] = None

    @property
    def attested(self) -> bool:
        return self.attestation_error is None and self.document.is_attested

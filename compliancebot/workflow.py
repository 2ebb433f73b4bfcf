"""
compliancebot - Compliance workflow engine.

Documents move through a single transition:

    pending_approval -> approved
    pending_approval -> rejected

``review`` is the only transition function. The decision write is a
compare-and-swap on the record version and happens before the attestation
call, so two concurrent reviews of one document cannot both succeed and the
loser never reaches the signer. Attestation failure leaves the decision in
place; the caller gets it back on the ReviewOutcome and may retry with
``retry_attestation``.

Example:
    ```python
    engine = ComplianceWorkflowEngine(store, roles, recorder, cache)
    engine.submit({"document_hash": "ab..", "ipfs_cid": "Qm..", "submitter": "0x.."})
    outcome = engine.review("ab..", officer, "rejected", reason="bad scan")
    if outcome.attestation_error:
        ...
    ```
"""

import logging
from typing import Any, Optional

from .attestation import AttestationRecorder, UnconfiguredAttestationRecorder
from .exceptions import (
    AlreadyProcessedError,
    AuthorizationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)
from .models import (
    ATTESTATION_FIELDS,
    DOCUMENT_FIELDS,
    ComplianceStatus,
    Document,
    ReviewOutcome,
    Role,
    canonical,
    utcnow_iso,
)
from .roles import RoleResolver

logger = logging.getLogger("compliancebot.workflow")

DECISIONS = {
    "approve": ComplianceStatus.APPROVED,
    "approved": ComplianceStatus.APPROVED,
    "reject": ComplianceStatus.REJECTED,
    "rejected": ComplianceStatus.REJECTED,
}


def parse_decision(decision: Any) -> ComplianceStatus:
    if isinstance(decision, ComplianceStatus):
        status = decision
    else:
        status = DECISIONS.get(canonical(decision))
    if status is None or not status.is_terminal:
        raise ValidationError(
            f"Invalid decision '{decision}'; expected approved or rejected",
            field="compliance_status",
        )
    return status


def _require(fields: dict[str, Any], name: str) -> str:
    value = fields.get(name)
    value = value.strip() if isinstance(value, str) else ""
    if not value:
        raise ValidationError(f"Field '{name}' is required", field=name)
    return value


class ComplianceWorkflowEngine:
    """Validates and applies document status transitions."""

    def __init__(
        self,
        store: Any,
        roles: RoleResolver,
        recorder: Optional[AttestationRecorder] = None,
        cache: Any = None,
    ):
        self.store = store
        self.roles = roles
        self.recorder = recorder or UnconfiguredAttestationRecorder()
        self.cache = cache

    # ==================== Queries ====================

    def get(self, document_hash: str) -> Document:
        document = self.store.get(canonical(document_hash))
        if document is None:
            raise NotFoundError(f"No document found with hash: {document_hash}")
        return document

    def list_documents(self, status: Optional[Any] = None) -> list[Document]:
        if status is None or status == "":
            return self.store.list_all()
        try:
            status = ComplianceStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown status '{status}'", field="status") from None
        return self.store.list_by_status(status)

    def list_by_submitter(self, address: str) -> list[Document]:
        return self.store.list_by_submitter(canonical(address))

    # ==================== Submission ====================

    def submit(self, fields: dict[str, Any]) -> Document:
        """Create a document in pending_approval.

        Raises:
            ValidationError: If document_hash or ipfs_cid is missing.
            AlreadyProcessedError: If the hash has already been submitted.
        """
        document_hash = canonical(_require(fields, "document_hash"))
        ipfs_cid = _require(fields, "ipfs_cid")

        now = utcnow_iso()
        record = {
            "document_name": (fields.get("document_name") or "").strip(),
            "ipfs_cid": ipfs_cid,
            "submitter": canonical(fields.get("submitter")),
            "attestor": "",
            "compliance_status": ComplianceStatus.PENDING_APPROVAL,
            "rejection_reason": "",
            "created_at": fields.get("created_at") or now,
            "updated_at": now,
        }

        document = self.store.put(document_hash, record, expected_version=0)
        if document is None:
            raise AlreadyProcessedError(
                f"Document {document_hash} has already been submitted"
            )
        logger.info(
            "Document %s submitted by %s", document_hash, document.submitter or "unknown"
        )

        if self.cache is not None:
            self.cache.cache_snapshot(document_hash, document.snapshot())
        return document

    # ==================== Review ====================

    def _require_officer(self, actor: str) -> str:
        actor = canonical(actor)
        if self.roles.resolve(actor) != Role.COMPLIANCE_OFFICER:
            raise AuthorizationError(
                "Only compliance officers can approve/reject documents."
            )
        return actor

    def review(
        self,
        document_hash: str,
        actor: str,
        decision: Any,
        reason: Optional[str] = None,
    ) -> ReviewOutcome:
        """Approve or reject a pending document and attest the decision.

        Raises:
            AuthorizationError: If the actor is not the compliance officer.
            NotFoundError: If the document does not exist.
            AlreadyProcessedError: If the document is no longer pending, or a
                concurrent review won the race (ConflictError).
            ValidationError: On an unknown decision or a rejection without
                a reason.
        """
        actor = self._require_officer(actor)
        document = self.get(document_hash)

        if not document.is_pending:
            raise AlreadyProcessedError(
                f'"{document.document_name}" has already been '
                f"{document.compliance_status.value}."
            )

        status = parse_decision(decision)
        reason = (reason or "").strip()
        if status == ComplianceStatus.REJECTED and not reason:
            raise ValidationError("A rejection reason is required", field="rejection_reason")

        decided = self.store.put(
            document.document_hash,
            {
                "compliance_status": status,
                "attestor": actor,
                "rejection_reason": reason if status == ComplianceStatus.REJECTED else "",
                "updated_at": utcnow_iso(),
            },
            expected_version=document.version,
        )
        if decided is None:
            raise ConflictError(
                f'"{document.document_name}" was reviewed concurrently.',
                current_version=document.version,
            )
        logger.info(
            "Document %s %s by %s", decided.document_hash, status.value, actor
        )
        return self._attest(decided)

    def retry_attestation(self, document_hash: str, actor: str) -> ReviewOutcome:
        """Re-invoke the signer for a reviewed document that has no receipt."""
        self._require_officer(actor)
        document = self.get(document_hash)
        if document.is_pending:
            raise ValidationError(
                f'"{document.document_name}" has not been reviewed yet',
                field="compliance_status",
            )
        if document.is_attested:
            raise AlreadyProcessedError(
                f'"{document.document_name}" already has an attestation'
            )
        return self._attest(document)

    def _attest(self, document: Document) -> ReviewOutcome:
        try:
            receipt = self.recorder.record(document)
        except ExternalServiceError as e:
            logger.warning(
                "Document %s marked %s but attestation failed: %s",
                document.document_hash,
                document.compliance_status.value,
                e.message,
            )
            return ReviewOutcome(document=document, attestation_error=e)

        attested = self.store.put(
            document.document_hash,
            receipt.to_dict(),
            expected_version=document.version,
        )
        if attested is None:
            raise ConflictError(
                f'"{document.document_name}" was attested concurrently.',
                current_version=document.version,
            )
        return ReviewOutcome(document=attested)

    # ==================== Merge update ====================

    def update(self, document_hash: str, fields: dict[str, Any]) -> Document:
        """Merge fields into an existing document without breaking its invariants.

        Status and attestor are owned by ``review``; an update may repeat the
        stored values but never change them.
        """
        document = self.get(document_hash)
        fields = dict(fields)

        unknown = sorted(set(fields) - set(DOCUMENT_FIELDS))
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(unknown)}")

        for name, value in fields.items():
            if value is not None and not isinstance(value, str):
                raise ValidationError(f"Field '{name}' must be a string", field=name)

        if "document_hash" in fields:
            if canonical(fields.pop("document_hash")) != document.document_hash:
                raise ValidationError(
                    "document_hash cannot be changed", field="document_hash"
                )

        if "ipfs_cid" in fields and not (fields["ipfs_cid"] or "").strip():
            raise ValidationError("Field 'ipfs_cid' is required", field="ipfs_cid")

        if "submitter" in fields:
            fields["submitter"] = canonical(fields["submitter"])

        if "attestor" in fields:
            if canonical(fields.pop("attestor")) != document.attestor:
                raise ValidationError(
                    "attestor is set by a review decision; use POST /record",
                    field="attestor",
                )

        status = document.compliance_status
        if "compliance_status" in fields:
            try:
                new_status = ComplianceStatus(fields.pop("compliance_status"))
            except ValueError:
                raise ValidationError(
                    "Unknown status", field="compliance_status"
                ) from None
            if new_status != status:
                if status.is_terminal:
                    raise AlreadyProcessedError(
                        f'"{document.document_name}" has already been {status.value}.'
                    )
                raise ValidationError(
                    "Status changes require a review decision; use POST /record",
                    field="compliance_status",
                )

        reason = fields.get("rejection_reason", document.rejection_reason)
        if status == ComplianceStatus.REJECTED and not (reason or "").strip():
            raise ValidationError("A rejection reason is required", field="rejection_reason")
        if status != ComplianceStatus.REJECTED and (reason or "").strip():
            raise ValidationError(
                "Only rejected documents carry a rejection reason",
                field="rejection_reason",
            )

        given = [name for name in ATTESTATION_FIELDS if fields.get(name)]
        if given:
            if document.is_attested:
                raise AlreadyProcessedError(
                    f'"{document.document_name}" already has an attestation'
                )
            if not status.is_terminal:
                raise ValidationError("Pending documents cannot carry an attestation")
            if len(given) != len(ATTESTATION_FIELDS):
                raise ValidationError(
                    "attestationId, txHash and indexingValue must be provided together"
                )
        for name in ATTESTATION_FIELDS:
            if name in fields and not fields[name]:
                fields.pop(name)

        fields["updated_at"] = utcnow_iso()
        updated = self.store.put(
            document.document_hash, fields, expected_version=document.version
        )
        if updated is None:
            raise ConflictError(
                f'"{document.document_name}" was modified concurrently.',
                current_version=document.version,
            )
        return updated

    def flush(self) -> None:
        self.store.flush()

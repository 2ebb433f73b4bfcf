"""Attestation recording for compliance decisions.

An attestation binds a document's decision to an immutable ledger entry.
The signer itself runs as a separate service; this module talks to it over
HTTP and turns every failure into ExternalServiceError.

Example:
    from compliancebot.attestation import HttpAttestationRecorder

    recorder = HttpAttestationRecorder(
        base_url="http://signer:4000",
        api_key="...",
        indexing_value="0xsigner",
    )
    receipt = recorder.record(document)
    print(receipt.attestation_id, receipt.tx_hash)
"""

import logging
from typing import Any, Optional

import httpx

from .exceptions import ExternalServiceError
from .models import AttestationReceipt, Document, canonical

logger = logging.getLogger("compliancebot.attestation")

DEFAULT_SCHEMA_ID = "0x65a"


class AttestationRecorder:
    """Interface for recording a reviewed document to a ledger.

    Implementations return an AttestationReceipt or raise
    ExternalServiceError.
    """

    def record(self, document: Document) -> AttestationReceipt:
        raise NotImplementedError


class HttpAttestationRecorder(AttestationRecorder):
    """Records attestations through an HTTP signer service."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        schema_id: str = DEFAULT_SCHEMA_ID,
        indexing_value: str = "",
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.schema_id = schema_id
        self.indexing_value = canonical(indexing_value)
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def _payload(self, document: Document) -> dict[str, Any]:
        return {
            "schemaId": self.schema_id,
            "data": {
                "document_name": document.document_name,
                "document_hash": document.document_hash,
                "ipfs_cid": document.ipfs_cid,
                "attestor": document.attestor,
                "submitter": document.submitter,
                "compliance_status": document.compliance_status.value,
            },
            "indexingValue": self.indexing_value,
        }

    def record(self, document: Document) -> AttestationReceipt:
        try:
            response = self._client.post("/attestations", json=self._payload(document))
        except httpx.TimeoutException as e:
            raise ExternalServiceError(
                f"Attestation signer timed out: {e}", service="attestation"
            ) from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(
                f"Attestation signer unreachable: {e}", service="attestation"
            ) from e

        if response.status_code >= 400:
            raise ExternalServiceError(
                f"Attestation signer failed with status {response.status_code}",
                service="attestation",
                details={"body": response.text[:500]},
            )

        try:
            data = response.json()
            receipt = AttestationReceipt.from_dict(data)
        except (ValueError, KeyError, TypeError) as e:
            raise ExternalServiceError(
                f"Attestation signer returned an invalid receipt: {e}",
                service="attestation",
            ) from e

        if not receipt.indexing_value:
            receipt.indexing_value = self.indexing_value

        logger.info(
            "Recorded attestation %s for document %s (tx %s)",
            receipt.attestation_id,
            document.document_hash,
            receipt.tx_hash,
        )
        return receipt

    def close(self) -> None:
        self._client.close()


class UnconfiguredAttestationRecorder(AttestationRecorder):
    """Stand-in used when no signer URL is configured; every call fails."""

    def record(self, document: Document) -> AttestationReceipt:
        raise ExternalServiceError(
            "Attestation signer is not configured", service="attestation"
        )

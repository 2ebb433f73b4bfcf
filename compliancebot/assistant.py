"""
compliancebot - Prompt assembly for AI questions about the document set.
"""

import logging
import re
from typing import Any, Iterable, Optional

from .exceptions import ValidationError
from .llm import Answerer
from .models import ComplianceStatus, Document, Role, canonical
from .roles import RoleResolver

logger = logging.getLogger("compliancebot.assistant")

_CUSTOMER_DOCUMENTS = re.compile(r"documents from customer (0x[a-f0-9]{40})")

SYSTEM_PREAMBLE = """You are a compliance assistant for a document attestation system. The user is a {role}.
{context}
Your capabilities:
- Answer questions about document status and compliance
- Explain compliance requirements
- Guide users through document submission process
- Provide information about approved/rejected documents
- Answer document-related statistics and filtering queries

Be concise, professional, and focus on compliance aspects."""


def _document_summary(fields: dict[str, Any]) -> str:
    lines = [
        "Document Context:",
        f"Name: {fields.get('document_name') or 'N/A'}",
        f"Hash: {fields.get('document_hash')}",
        f"Status: {fields.get('compliance_status') or 'N/A'}",
        f"IPFS: {fields.get('ipfs_cid') or 'N/A'}",
    ]
    if fields.get("rejection_reason"):
        lines.append(f"Rejection Reason: {fields['rejection_reason']}")
    return "\n".join(lines) + "\n\n"


def build_prompt_context(
    question: str,
    role: Role,
    document_hash: Optional[str],
    documents: Iterable[Document],
    cache: Any = None,
) -> str:
    """Collect the context sentences appended to the system preamble.

    The document summary prefers the live record and falls back to the
    cached snapshot.
    """
    documents = list(documents)
    context = ""

    if document_hash:
        document_hash = canonical(document_hash)
        live = next((d for d in documents if d.document_hash == document_hash), None)
        if live is not None:
            context += _document_summary(live.to_dict())
        elif cache is not None:
            snapshot = cache.get_snapshot(document_hash)
            if snapshot and snapshot.get("document_hash"):
                context += _document_summary(snapshot)

    lowered = question.lower()

    if "approval rate" in lowered:
        approved = [d for d in documents if d.compliance_status == ComplianceStatus.APPROVED]
        total = len(documents)
        percentage = f"{len(approved) / total * 100:.2f}" if total else "0"
        context += (
            f"Approval rate this month is {percentage}%. "
            f"{len(approved)} of {total} documents were approved.\n\n"
        )

    match = _CUSTOMER_DOCUMENTS.search(lowered)
    if match:
        customer = match.group(1)
        from_customer = [d for d in documents if canonical(d.submitter) == customer]
        if from_customer:
            context += f"Found {len(from_customer)} documents from customer {customer}:\n"
            for idx, doc in enumerate(from_customer, start=1):
                context += (
                    f"{idx}. Name: {doc.document_name}, Hash: {doc.document_hash}, "
                    f"Status: {doc.compliance_status.value}\n"
                )
        else:
            context += f"No documents found from customer {customer}.\n"

    return context


class ComplianceAssistant:
    """Answers free-text questions with document-aware context."""

    def __init__(
        self,
        answerer: Answerer,
        store: Any,
        roles: RoleResolver,
        cache: Any = None,
    ):
        self._answerer = answerer
        self._store = store
        self._roles = roles
        self._cache = cache

    def build_prompt(
        self, question: str, sender: str, document_hash: Optional[str] = None
    ) -> str:
        role = self._roles.resolve(sender)
        context = build_prompt_context(
            question, role, document_hash, self._store.list_all(), cache=self._cache
        )
        preamble = SYSTEM_PREAMBLE.format(role=role.display_name, context=context)
        return f"{preamble}\n\nUser Question: {question}"

    def ask(self, question: str, sender: str, document_hash: Optional[str] = None) -> str:
        """Return the model's answer verbatim; raises ExternalServiceError on failure."""
        question = (question or "").strip()
        if not question:
            raise ValidationError("A question is required", field="prompt")
        prompt = self.build_prompt(question, sender, document_hash)
        logger.debug("Sending %d-character prompt to the answerer", len(prompt))
        return self._answerer.answer(prompt)

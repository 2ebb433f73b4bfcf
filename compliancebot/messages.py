"""
compliancebot - Chat reply and notification text.
"""

from dataclasses import dataclass
from typing import Iterable

from .models import ComplianceStatus, Document, Report, Role
from .reports import DocumentGroups

RULE = "─────────────────────────"

STATUS_EMOJI = {
    ComplianceStatus.APPROVED: "✅",
    ComplianceStatus.REJECTED: "❌",
    ComplianceStatus.PENDING_APPROVAL: "⏳",
}

GREETINGS = {
    Role.CUSTOMER: (
        "👋 Welcome to ComplianceBot! 👋\n\n"
        "📄 I help manage document compliance processes.\n\n"
        "COMMANDS:\n"
        '🔍 Check status: "status <document-hash>"\n'
        "📤 Submit documents for review\n"
        '❓ Ask AI: "ask <your question>"\n'
        '   Example: "ask what documents I need for KYC compliance"\n\n'
        'Need help? Type "help"'
    ),
    Role.COMPLIANCE_OFFICER: (
        "👮 Welcome Compliance Officer! 👮\n\n"
        "I assist with document review and compliance approval.\n\n"
        "COMMANDS:\n"
        '✅ Approve: "approve <document-hash>"\n'
        '❌ Reject: "reject <document-hash> <reason>"\n'
        '📋 Pending: "list pending"\n'
        '❓ Ask AI: "ask <your question>"\n'
        '   Example: "ask about compliance requirements for AML"\n\n'
        'Type "help" for assistance'
    ),
    Role.MANAGER: (
        "👔 Welcome Manager! 👔\n\n"
        "Access compliance reports and oversight tools.\n\n"
        "COMMANDS:\n"
        '📊 Reports: "view reports"\n'
        '❓ Ask AI: "ask <your question>"\n'
        '   Example: "ask for compliance metrics summary"\n\n'
        'Type "help" for assistance'
    ),
}

HELP = {
    Role.CUSTOMER: (
        "⚠️ Invalid Command\n\n"
        "Available commands:\n"
        "🔍 status <document-hash>\n"
        "📤 Submit documents for review\n"
        "❓ ask <question>\n\n"
        'Type "help" for assistance'
    ),
    Role.COMPLIANCE_OFFICER: (
        "⚠️ Invalid Command\n\n"
        "OFFICER COMMANDS:\n"
        "✅ approve <document-hash>\n"
        "❌ reject <document-hash> <reason>\n"
        "📋 list pending\n"
        "❓ ask <question>\n\n"
        'Type "help" for assistance'
    ),
    Role.MANAGER: (
        "⚠️ Invalid Command\n\n"
        "MANAGER COMMANDS:\n"
        "📊 view reports\n"
        "❓ ask <question>\n\n"
        'Type "help" for assistance'
    ),
}

ASK_USAGE = (
    "Please provide a question after 'ask'. "
    "Example: 'ask what documents need for compliance'"
)

AI_UNAVAILABLE = (
    "⚠️ AI Service Unavailable\n\n"
    "Could not process your question at this time.\n"
    "Please try again later."
)

REVIEW_USAGE = (
    "❌ Invalid Review Command\n\n"
    "Usage:\n"
    "✅ approve <hash>\n"
    "❌ reject <hash> <reason>"
)

MISSING_REASON = (
    "❌ Missing Reason\n\n"
    "Please provide a rejection reason:\n"
    "reject <hash> <reason>"
)

SUBMISSION_ERROR = (
    "❌ Submission Error\n\n"
    "Document hash and IPFS CID are required fields.\n"
    "Please include all required information."
)

SERVICE_UNAVAILABLE = (
    "⚠️ Service Unavailable\n\n"
    "The document store could not be reached.\n"
    "Please try again later."
)

NO_PENDING = "📭 No pending documents for review."

EMPTY_REPORT = "📊 COMPLIANCE REPORT\n\nNo documents have been submitted yet."


@dataclass
class Links:
    """Base URLs used to render content and blockchain links."""

    ipfs_gateway: str = "https://ipfs.infura.io/ipfs/"
    attestation_explorer: str = "https://testnet-scan.sign.global/attestation/onchain_evm_534351_"
    tx_explorer: str = "https://sepolia.scrollscan.com/tx/"

    def ipfs(self, doc: Document) -> str:
        return f"{self.ipfs_gateway}{doc.ipfs_cid}"

    def attestation(self, doc: Document) -> str:
        return f"{self.attestation_explorer}{doc.attestation.attestation_id}"

    def tx(self, doc: Document) -> str:
        return f"{self.tx_explorer}{doc.attestation.tx_hash}"


def unauthorized(message: str) -> str:
    return f"⛔ Unauthorized\n\n{message}"


def not_found(document_hash: str) -> str:
    return (
        "❌ Document Not Found\n\n"
        f"No document found with hash: {document_hash}\n"
        "Please verify the hash and try again."
    )


def already_processed(message: str) -> str:
    return f"⚠️ Document Already Processed\n\n{message}"


def processing_error(message: str) -> str:
    return (
        "⚠️ Processing Error\n\n"
        "Could not complete your request:\n"
        f"{message}\n\n"
        "Please try again later."
    )


def blockchain_record(doc: Document, links: Links, indent: str = "") -> str:
    if not doc.is_attested:
        return ""
    return (
        f"\n{indent}⛓️ Blockchain Record:\n"
        f"{indent}- Sign Protocol: {links.attestation(doc)}\n"
        f"{indent}- Scrollscan: {links.tx(doc)}"
    )


def document_status(doc: Document, links: Links) -> str:
    status = doc.compliance_status
    message = (
        "📄 DOCUMENT STATUS\n"
        "────────────────\n"
        f"📛 Name: {doc.document_name}\n"
        f"🔗 Hash: {doc.document_hash}\n"
        f"{STATUS_EMOJI.get(status, '📊')} Status: {status.value.upper()}\n\n"
        f"🔍 View: {links.ipfs(doc)}\n"
    )
    if status == ComplianceStatus.REJECTED and doc.rejection_reason:
        message += f"\n❗ Rejection Reason: {doc.rejection_reason}\n"
    if doc.is_attested:
        message += (
            "\n⛓️ Blockchain Attestation:\n"
            f"   - Sign Protocol: {links.attestation(doc)}\n"
            f"   - Scrollscan: {links.tx(doc)}\n"
        )
    return message


def new_submission(doc: Document, links: Links) -> str:
    return (
        "📤 NEW DOCUMENT SUBMISSION\n"
        f"{RULE}\n"
        f"📛 {doc.document_name}\n"
        f"🔗 {doc.document_hash}\n"
        f"👤 {doc.submitter}\n\n"
        f"🔍 {links.ipfs(doc)}\n\n"
        "TO APPROVE/REJECT:\n"
        f"✅ approve {doc.document_hash}\n"
        f"❌ reject {doc.document_hash} <reason>"
    )


def submission_received(doc: Document) -> str:
    return (
        "📬 Submission Received\n\n"
        f'Your document "{doc.document_name}" is under review.\n'
        "You'll be notified once processed.\n\n"
        "Track status with:\n"
        f"status {doc.document_hash}"
    )


def decision_notice(doc: Document, links: Links) -> str:
    if doc.compliance_status == ComplianceStatus.APPROVED:
        message = (
            "✅ APPROVAL CONFIRMED\n\n"
            f"Document: {doc.document_name}\n"
            "Status: APPROVED\n"
        )
        if doc.is_attested:
            message += "\nBlockchain verified and recorded."
    else:
        message = (
            "❌ REJECTION NOTICE\n\n"
            f"Document: {doc.document_name}\n"
            "Status: REJECTED\n"
            f"Reason: {doc.rejection_reason}\n\n"
            "Please address issues and resubmit."
        )
    return message + blockchain_record(doc, links)


def decision_summary(doc: Document, links: Links) -> str:
    status = doc.compliance_status
    message = (
        f"📄 DOCUMENT {status.value.upper()}\n"
        f"{RULE}\n"
        f"📛 {doc.document_name}\n"
        f"🔗 {doc.document_hash}\n"
        f"👤 Submitter: {doc.submitter}\n"
        f"👮 Officer: {doc.attestor}\n"
    )
    if status == ComplianceStatus.REJECTED:
        message += f"❗ Reason: {doc.rejection_reason}\n"
    message += f"🔍 {links.ipfs(doc)}\n"
    return message + blockchain_record(doc, links)


def action_completed(doc: Document, links: Links) -> str:
    return (
        "✔️ Action Completed\n\n"
        f'Document "{doc.document_name}" has been {doc.compliance_status.value}.\n'
        "All parties have been notified."
        + blockchain_record(doc, links)
    )


def attestation_failed(doc: Document, error: Exception) -> str:
    return (
        "⚠️ Blockchain Error\n\n"
        f"Document marked as {doc.compliance_status.value} but blockchain recording failed:\n"
        f"{getattr(error, 'message', str(error))}"
    )


def pending_list(documents: list[Document], links: Links) -> str:
    if not documents:
        return NO_PENDING
    message = f"📋 PENDING DOCUMENTS ({len(documents)})\n{RULE}\n"
    for index, doc in enumerate(documents, start=1):
        message += (
            f"{index}. {doc.document_name}\n"
            f"   🔗 {doc.document_hash}\n"
            f"   👤 {doc.submitter}\n"
            f"   🔍 {links.ipfs(doc)}\n\n"
        )
    return message + "\nTO APPROVE/REJECT:\n✅ approve <hash>\n❌ reject <hash> <reason>"


def _report_section(
    title: str, documents: Iterable[Document], links: Links, rejected: bool = False
) -> str:
    section = f"{title}\n{RULE}\n"
    for index, doc in enumerate(documents, start=1):
        section += (
            f"{index}. {doc.document_name}\n"
            f"   🔗 {doc.document_hash}\n"
            f"   👤 {doc.submitter}\n"
            f"   📅 {doc.updated_at or 'N/A'}\n"
        )
        if rejected:
            section += f"   ❗ {doc.rejection_reason or 'No reason provided'}\n"
        section += f"   🔍 {links.ipfs(doc)}\n"
        if doc.is_attested:
            section += (
                "   ⛓️ Blockchain Proof:\n"
                f"      - Sign Protocol: {links.attestation(doc)}\n"
                f"      - Scrollscan: {links.tx(doc)}\n"
            )
        section += "\n"
    return section


def compliance_report(report: Report, groups: DocumentGroups, links: Links) -> str:
    if report.total == 0:
        return EMPTY_REPORT

    message = (
        "📊 COMPLIANCE REPORT 📊\n\n"
        f"📋 Total Documents: {report.total}\n"
        f"✅ Approved: {report.approved_count}\n"
        f"❌ Rejected: {report.rejected_count}\n"
        f"⏳ Pending: {report.pending_count}\n\n"
    )
    if groups.approved:
        message += _report_section("✅ APPROVED DOCUMENTS ✅", groups.approved, links)
    if groups.rejected:
        message += _report_section(
            "❌ REJECTED DOCUMENTS ❌", groups.rejected, links, rejected=True
        )
    if groups.pending:
        message += f"⏳ PENDING DOCUMENTS ⏳\n{RULE}\n"
        for index, doc in enumerate(groups.pending, start=1):
            message += (
                f"{index}. {doc.document_name}\n"
                f"   🔗 {doc.document_hash}\n"
                f"   👤 {doc.submitter}\n"
                f"   📅 {doc.created_at or 'N/A'}\n"
                f"   🔍 {links.ipfs(doc)}\n\n"
            )

    return message + (
        "📌 SUMMARY\n"
        "──────────\n"
        f"• Total Documents: {report.total}\n"
        f"• Compliance Rate: {report.approval_rate_percent}%\n"
        f"• Rejection Rate: {report.rejection_rate_percent}%\n"
        f"• Pending Approval: {report.pending_count}"
    )

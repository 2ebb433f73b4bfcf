"""Tests for compliancebot data models."""

from compliancebot.models import (
    AttestationReceipt,
    ComplianceStatus,
    Document,
    Report,
    Role,
    canonical,
)

HASH = "ab" * 32


class TestComplianceStatus:
    def test_values(self):
        assert ComplianceStatus.PENDING_APPROVAL.value == "pending_approval"
        assert ComplianceStatus.APPROVED.value == "approved"
        assert ComplianceStatus.REJECTED.value == "rejected"

    def test_terminal_states(self):
        assert not ComplianceStatus.PENDING_APPROVAL.is_terminal
        assert ComplianceStatus.APPROVED.is_terminal
        assert ComplianceStatus.REJECTED.is_terminal


class TestRole:
    def test_display_name(self):
        assert Role.COMPLIANCE_OFFICER.display_name == "compliance officer"
        assert Role.CUSTOMER.display_name == "customer"


class TestCanonical:
    def test_lowercases_and_strips(self):
        assert canonical("  0xABcd ") == "0xabcd"

    def test_none_is_empty(self):
        assert canonical(None) == ""


class TestDocument:
    def test_defaults(self):
        doc = Document(document_hash=HASH)
        assert doc.compliance_status == ComplianceStatus.PENDING_APPROVAL
        assert doc.is_pending
        assert not doc.is_attested
        assert doc.version == 1

    def test_to_dict_omits_missing_attestation(self):
        data = Document(document_hash=HASH, document_name="Passport").to_dict()
        assert data["document_hash"] == HASH
        assert data["compliance_status"] == "pending_approval"
        assert "attestationId" not in data
        assert "txHash" not in data

    def test_to_dict_includes_attestation(self):
        doc = Document(
            document_hash=HASH,
            compliance_status=ComplianceStatus.APPROVED,
            attestation=AttestationReceipt("0x1", "0xtx", "0xsigner"),
        )
        data = doc.to_dict()
        assert data["attestationId"] == "0x1"
        assert data["txHash"] == "0xtx"
        assert data["indexingValue"] == "0xsigner"

    def test_snapshot_subset(self):
        doc = Document(document_hash=HASH, document_name="Passport", ipfs_cid="Qm1")
        snapshot = doc.snapshot()
        assert snapshot["document_name"] == "Passport"
        assert "rejection_reason" not in snapshot


class TestReport:
    def test_to_dict_keys(self):
        data = Report(total=1, pending_count=1).to_dict()
        assert data == {
            "total": 1,
            "approvedCount": 0,
            "rejectedCount": 0,
            "pendingCount": 1,
            "approvalRatePercent": 0,
            "rejectionRatePercent": 0,
        }

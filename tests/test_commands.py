"""
Tests for chat command parsing and role gating.
"""

import pytest

from compliancebot.commands import (
    AskAI,
    CommandRouter,
    Greet,
    ListPending,
    QueryStatus,
    ReviewDocument,
    SubmitDocument,
    Unrecognized,
    ViewReports,
    extract_document_hash,
    parse_submission,
)
from compliancebot.exceptions import AuthorizationError
from compliancebot.models import Role
from compliancebot.roles import RoleResolver

OFFICER = "0x" + "a1" * 20
MANAGER = "0x" + "b2" * 20
CUSTOMER = "0x" + "c3" * 20
HASH = "ab" * 32


@pytest.fixture
def router():
    return CommandRouter(RoleResolver(officer_address=OFFICER, manager_address=MANAGER))


class TestParse:
    @pytest.mark.parametrize("text", ["", "   ", None, "help", "HELP", "  Help  "])
    def test_greet(self, router, text):
        assert isinstance(router.parse(text), Greet)

    def test_ask(self, router):
        intent = router.parse("ask what is KYC")
        assert intent == AskAI(question="what is KYC", document_hash=None)

    def test_ask_is_case_insensitive_prefix(self, router):
        intent = router.parse("ASK about AML")
        assert isinstance(intent, AskAI)
        assert intent.question == "about AML"

    def test_ask_extracts_hash_anywhere(self, router):
        intent = router.parse(f"ask why was 0x{HASH.upper()} rejected?")
        assert intent.document_hash == "0x" + HASH

    def test_ask_without_question(self, router):
        assert router.parse("ask") == AskAI(question="")

    def test_ask_beats_review_keywords(self, router):
        intent = router.parse("ask how do I approve a document")
        assert isinstance(intent, AskAI)

    def test_submission(self, router):
        text = (
            "Document Submission:\n"
            "Name: Passport\n"
            f"Hash: {HASH}\n"
            "IPFS CID: QmPassport"
        )
        intent = router.parse(text)
        assert isinstance(intent, SubmitDocument)
        assert intent.fields == {
            "document_name": "Passport",
            "document_hash": HASH,
            "ipfs_cid": "QmPassport",
        }

    def test_submission_marker_is_case_sensitive(self, router):
        intent = router.parse("document submission:\nName: x")
        assert isinstance(intent, Unrecognized)

    def test_submission_beats_review_keywords(self, router):
        intent = router.parse("Document Submission:\nName: Approved vendors list")
        assert isinstance(intent, SubmitDocument)

    def test_approve(self, router):
        intent = router.parse(f"approve {HASH}")
        assert intent == ReviewDocument(command="approve", document_hash=HASH, reason="")

    def test_reject_with_reason(self, router):
        intent = router.parse(f"Reject {HASH.upper()} bad   scan quality")
        assert intent == ReviewDocument(
            command="reject", document_hash=HASH, reason="bad scan quality"
        )

    def test_review_keyword_anywhere(self, router):
        intent = router.parse(f"please approve {HASH}")
        assert isinstance(intent, ReviewDocument)
        assert intent.command == "please"
        assert intent.document_hash == "approve"

    def test_review_without_hash(self, router):
        assert router.parse("approve") == ReviewDocument(command="approve")

    def test_list_pending(self, router):
        assert isinstance(router.parse("List Pending"), ListPending)

    def test_view_reports(self, router):
        assert isinstance(router.parse("view reports"), ViewReports)

    def test_status(self, router):
        assert router.parse(f"status {HASH.upper()}") == QueryStatus(document_hash=HASH)

    def test_status_requires_argument_separator(self, router):
        assert isinstance(router.parse("status"), Unrecognized)

    def test_unrecognized(self, router):
        intent = router.parse("  what can you do  ")
        assert intent == Unrecognized(text="what can you do")

    def test_list_pending_must_be_exact(self, router):
        assert isinstance(router.parse("list pending please"), Unrecognized)


class TestHelpers:
    def test_extract_hash_without_prefix(self):
        assert extract_document_hash(f"see {HASH} please") == HASH

    def test_extract_hash_missing(self):
        assert extract_document_hash("no hash here 0x1234") is None

    def test_parse_submission_aliases(self):
        fields = parse_submission(
            "Document Submission:\n"
            "Document Name: Utility bill\n"
            f"Document Hash: {HASH}\n"
            "IPFS: QmBill"
        )
        assert fields == {
            "document_name": "Utility bill",
            "document_hash": HASH,
            "ipfs_cid": "QmBill",
        }

    def test_parse_submission_keeps_colons_in_value(self):
        fields = parse_submission("Name: Contract: v2\nIPFS CID: ipfs://Qm")
        assert fields["document_name"] == "Contract: v2"
        assert fields["ipfs_cid"] == "ipfs://Qm"

    def test_parse_submission_missing_fields(self):
        fields = parse_submission("Document Submission:\nName: Passport")
        assert fields["document_hash"] == ""
        assert fields["ipfs_cid"] == ""


class TestAuthorization:
    @pytest.mark.parametrize(
        "text",
        [f"approve {HASH}", f"reject {HASH} bad scan", "list pending"],
    )
    def test_officer_commands(self, router, text):
        assert router.route(text, OFFICER) == router.parse(text)
        for sender in (CUSTOMER, MANAGER):
            with pytest.raises(AuthorizationError):
                router.route(text, sender)

    def test_reports_are_manager_only(self, router):
        assert isinstance(router.route("view reports", MANAGER.upper()), ViewReports)
        for sender in (CUSTOMER, OFFICER):
            with pytest.raises(AuthorizationError) as exc:
                router.route("view reports", sender)
            assert exc.value.message == "Only managers can view compliance reports."

    def test_review_message(self, router):
        with pytest.raises(AuthorizationError) as exc:
            router.route(f"reject {HASH} bad scan", CUSTOMER)
        assert exc.value.message == "Only compliance officers can approve/reject documents."
        assert exc.value.details == {"required_role": "compliance_officer", "role": "customer"}

    @pytest.mark.parametrize("text", ["help", "ask what is KYC", f"status {HASH}", "hello"])
    def test_open_commands(self, router, text):
        for sender in (CUSTOMER, OFFICER, MANAGER):
            router.route(text, sender)

    def test_authorize_by_role(self, router):
        router.authorize(ListPending(), Role.COMPLIANCE_OFFICER)
        with pytest.raises(AuthorizationError):
            router.authorize(ListPending(), Role.MANAGER)

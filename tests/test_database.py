"""
Unit tests for the document store and AI context cache.
"""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from compliancebot.exceptions import StoreError
from compliancebot.models import ComplianceStatus
from compliancebot.server.database import AIContextCache, Database, DocumentStore

HASH = "ab" * 32
OTHER_HASH = "cd" * 32
SUBMITTER = "0x" + "c3" * 20


def _operational_error():
    return OperationalError("SELECT 1", {}, Exception("database is locked"))


@pytest.fixture
def db():
    database = Database("sqlite://")
    database.create_tables()
    return database


@pytest.fixture
def store(db):
    return DocumentStore(db)


class TestDocumentStore:
    """Tests for DocumentStore operations."""

    def test_get_missing(self, store):
        assert store.get(HASH) is None

    def test_put_inserts(self, store):
        doc = store.put(HASH, {"document_name": "Passport", "ipfs_cid": "Qm1"})
        assert doc.document_hash == HASH
        assert doc.document_name == "Passport"
        assert doc.version == 1

    def test_put_merges_fields(self, store):
        store.put(HASH, {"document_name": "Passport", "ipfs_cid": "Qm1"})
        doc = store.put(HASH, {"attestor": "0xofficer"})
        assert doc.document_name == "Passport"
        assert doc.ipfs_cid == "Qm1"
        assert doc.attestor == "0xofficer"
        assert doc.version == 2

    def test_put_stores_attestation_fields(self, store):
        store.put(HASH, {"ipfs_cid": "Qm1", "compliance_status": ComplianceStatus.APPROVED})
        doc = store.put(HASH, {"attestationId": "0x1", "txHash": "0xtx", "indexingValue": "0xs"})
        assert doc.attestation.attestation_id == "0x1"
        assert doc.attestation.tx_hash == "0xtx"
        assert doc.attestation.indexing_value == "0xs"

    def test_put_ignores_unknown_fields(self, store):
        doc = store.put(HASH, {"ipfs_cid": "Qm1", "colour": "blue"})
        assert doc.ipfs_cid == "Qm1"

    def test_hash_is_canonical(self, store):
        store.put(HASH.upper(), {"ipfs_cid": "Qm1"})
        assert store.get(HASH) is not None
        assert store.get(HASH.upper()).document_hash == HASH

    def test_expected_version_zero_requires_absence(self, store):
        assert store.put(HASH, {"ipfs_cid": "Qm1"}, expected_version=0) is not None
        assert store.put(HASH, {"ipfs_cid": "Qm2"}, expected_version=0) is None
        assert store.get(HASH).ipfs_cid == "Qm1"

    def test_expected_version_match(self, store):
        store.put(HASH, {"ipfs_cid": "Qm1"})
        doc = store.put(HASH, {"ipfs_cid": "Qm2"}, expected_version=1)
        assert doc.ipfs_cid == "Qm2"
        assert doc.version == 2

    def test_expected_version_conflict(self, store):
        store.put(HASH, {"ipfs_cid": "Qm1"})
        store.put(HASH, {"ipfs_cid": "Qm2"})
        assert store.put(HASH, {"ipfs_cid": "Qm3"}, expected_version=1) is None
        assert store.get(HASH).ipfs_cid == "Qm2"

    def test_expected_version_on_missing_document(self, store):
        assert store.put(HASH, {"ipfs_cid": "Qm1"}, expected_version=3) is None
        assert store.get(HASH) is None

    def test_repeated_get_is_stable(self, store):
        store.put(HASH, {"ipfs_cid": "Qm1", "document_name": "Passport"})
        assert store.get(HASH) == store.get(HASH)

    def test_list_all(self, store):
        store.put(HASH, {"ipfs_cid": "Qm1"})
        store.put(OTHER_HASH, {"ipfs_cid": "Qm2"})
        hashes = {d.document_hash for d in store.list_all()}
        assert hashes == {HASH, OTHER_HASH}

    def test_list_by_status(self, store):
        store.put(HASH, {"ipfs_cid": "Qm1", "compliance_status": "pending_approval"})
        store.put(OTHER_HASH, {"ipfs_cid": "Qm2", "compliance_status": "approved"})
        pending = store.list_by_status(ComplianceStatus.PENDING_APPROVAL)
        assert [d.document_hash for d in pending] == [HASH]
        approved = store.list_by_status("approved")
        assert [d.document_hash for d in approved] == [OTHER_HASH]

    def test_list_by_submitter_ignores_case(self, store):
        store.put(HASH, {"ipfs_cid": "Qm1", "submitter": SUBMITTER})
        store.put(OTHER_HASH, {"ipfs_cid": "Qm2", "submitter": "0xsomeoneelse"})
        docs = store.list_by_submitter(SUBMITTER.upper())
        assert [d.document_hash for d in docs] == [HASH]

    def test_flush(self, store):
        store.put(HASH, {"ipfs_cid": "Qm1"})
        store.flush()
        assert store.list_all() == []

    def test_ping(self, store):
        store.ping()

    def test_storage_failure_raises_store_error(self, db, store):
        with patch.object(db, "get_document", side_effect=_operational_error()):
            with pytest.raises(StoreError):
                store.get(HASH)

    def test_ping_failure_raises_store_error(self, db, store):
        with patch.object(db, "ping", side_effect=_operational_error()):
            with pytest.raises(StoreError):
                store.ping()


class TestAIContextCache:
    """Tests for the AI context snapshot cache."""

    def test_snapshot_round_trip(self, db):
        cache = AIContextCache(db)
        assert cache.cache_snapshot(HASH, {"document_hash": HASH, "document_name": "A"})
        assert cache.get_snapshot(HASH)["document_name"] == "A"

    def test_snapshot_overwrites(self, db):
        cache = AIContextCache(db)
        cache.cache_snapshot(HASH, {"document_hash": HASH, "document_name": "A", "extra": 1})
        cache.cache_snapshot(HASH, {"document_hash": HASH, "document_name": "B"})
        assert cache.get_snapshot(HASH) == {"document_hash": HASH, "document_name": "B"}

    def test_missing_snapshot(self, db):
        assert AIContextCache(db).get_snapshot(HASH) is None

    def test_cache_failure_is_swallowed(self, db):
        cache = AIContextCache(db)
        with patch.object(db, "set_ai_context", side_effect=_operational_error()):
            assert cache.cache_snapshot(HASH, {"document_hash": HASH}) is False

    def test_store_snapshot_failure_raises(self, db):
        cache = AIContextCache(db)
        with patch.object(db, "set_ai_context", side_effect=_operational_error()):
            with pytest.raises(StoreError):
                cache.store_snapshot(HASH, {"document_hash": HASH})

    def test_flush_clears_snapshots(self, db):
        cache = AIContextCache(db)
        cache.cache_snapshot(HASH, {"document_hash": HASH})
        DocumentStore(db).flush()
        assert cache.get_snapshot(HASH) is None

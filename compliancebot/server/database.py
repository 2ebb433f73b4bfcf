"""
Database layer for the compliance server using SQLAlchemy.
Supports SQLite (default) and PostgreSQL.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    create_engine,
    text,
)
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from ..exceptions import StoreError
from ..models import (
    AttestationReceipt,
    ComplianceStatus,
    Document,
    canonical,
)

logger = logging.getLogger("compliancebot.database")

Base = declarative_base()

# Wire field name -> column name, for fields whose names differ.
_COLUMN_NAMES = {
    "attestationId": "attestation_id",
    "txHash": "tx_hash",
    "indexingValue": "indexing_value",
}

_WRITABLE_COLUMNS = {
    "document_name",
    "ipfs_cid",
    "submitter",
    "attestor",
    "compliance_status",
    "rejection_reason",
    "created_at",
    "updated_at",
    "attestation_id",
    "tx_hash",
    "indexing_value",
}


class DocumentModel(Base):
    __tablename__ = "documents"

    document_hash = Column(String(130), primary_key=True)
    document_name = Column(Text, default="")
    ipfs_cid = Column(String(255), default="")
    submitter = Column(String(255), default="")
    attestor = Column(String(255), default="")
    compliance_status = Column(
        String(50), default=ComplianceStatus.PENDING_APPROVAL.value
    )
    rejection_reason = Column(Text, default="")
    created_at = Column(String(40), nullable=True)
    updated_at = Column(String(40), nullable=True)
    attestation_id = Column(String(255), nullable=True)
    tx_hash = Column(String(255), nullable=True)
    indexing_value = Column(String(255), nullable=True)
    version = Column(Integer, default=1, nullable=False)

    __table_args__ = (Index("idx_documents_submitter", "submitter"),)


class AIContextModel(Base):
    __tablename__ = "ai_context"

    document_hash = Column(String(130), primary_key=True)
    snapshot = Column(JSON, default=dict)
    cached_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Database:
    """Database interface for the compliance server."""

    def __init__(self, database_url: str):
        self.database_url = database_url

        connect_args = {}
        if database_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False

        self.engine = create_engine(
            database_url,
            connect_args=connect_args,
            poolclass=StaticPool if database_url.startswith("sqlite") else None,
        )
        self.SessionLocal = sessionmaker(bind=self.engine)

    def create_tables(self):
        """Create all tables."""
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        """Get a new database session."""
        return self.SessionLocal()

    def ping(self, session: Session) -> None:
        session.execute(text("SELECT 1"))

    def get_document(
        self, session: Session, document_hash: str
    ) -> Optional[DocumentModel]:
        return (
            session.query(DocumentModel)
            .filter(DocumentModel.document_hash == document_hash)
            .first()
        )

    def list_documents(self, session: Session) -> List[DocumentModel]:
        return session.query(DocumentModel).all()

    def upsert_document(
        self,
        session: Session,
        document_hash: str,
        values: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> Optional[DocumentModel]:
        """Merge column values into a document, inserting it when absent.

        With ``expected_version`` the write only happens when the stored
        version matches; ``0`` means the document must not exist yet.
        Returns None when that check fails.
        """
        existing = self.get_document(session, document_hash)

        if existing is None:
            if expected_version not in (None, 0):
                return None
            document = DocumentModel(document_hash=document_hash, version=1, **values)
            session.add(document)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                return None
            session.refresh(document)
            return document

        if expected_version == 0:
            return None

        query = session.query(DocumentModel).filter(
            DocumentModel.document_hash == document_hash
        )
        if expected_version is not None:
            query = query.filter(DocumentModel.version == expected_version)

        updates = dict(values)
        updates["version"] = DocumentModel.version + 1
        updated_rows = query.update(updates, synchronize_session=False)
        session.commit()
        if updated_rows == 0:
            return None

        session.refresh(existing)
        return existing

    def delete_all(self, session: Session) -> None:
        session.query(DocumentModel).delete()
        session.query(AIContextModel).delete()
        session.commit()

    def get_ai_context(
        self, session: Session, document_hash: str
    ) -> Optional[AIContextModel]:
        return (
            session.query(AIContextModel)
            .filter(AIContextModel.document_hash == document_hash)
            .first()
        )

    def set_ai_context(
        self, session: Session, document_hash: str, snapshot: Dict[str, Any]
    ) -> AIContextModel:
        entry = self.get_ai_context(session, document_hash)
        if entry is None:
            entry = AIContextModel(document_hash=document_hash)
            session.add(entry)
        entry.snapshot = dict(snapshot)
        entry.cached_at = datetime.utcnow()
        session.commit()
        session.refresh(entry)
        return entry


def _to_document(model: DocumentModel) -> Document:
    attestation = None
    if model.attestation_id and model.tx_hash:
        attestation = AttestationReceipt(
            attestation_id=model.attestation_id,
            tx_hash=model.tx_hash,
            indexing_value=model.indexing_value or "",
        )
    return Document(
        document_hash=model.document_hash,
        document_name=model.document_name or "",
        ipfs_cid=model.ipfs_cid or "",
        submitter=model.submitter or "",
        attestor=model.attestor or "",
        compliance_status=ComplianceStatus(
            model.compliance_status or ComplianceStatus.PENDING_APPROVAL.value
        ),
        rejection_reason=model.rejection_reason or "",
        created_at=model.created_at,
        updated_at=model.updated_at,
        attestation=attestation,
        version=model.version,
    )


def _to_columns(fields: Dict[str, Any]) -> Dict[str, Any]:
    values = {}
    for key, value in fields.items():
        column = _COLUMN_NAMES.get(key, key)
        if column not in _WRITABLE_COLUMNS:
            continue
        if isinstance(value, ComplianceStatus):
            value = value.value
        values[column] = value
    return values


class DocumentStore:
    """Key-value document persistence keyed by document hash.

    ``put`` merges the given fields into the stored record (field-level
    upsert). Listing is a full scan; there is no secondary index. Any
    storage failure surfaces as StoreError and is not retried.
    """

    def __init__(self, db: Database):
        self._db = db

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self._db.get_session()
        try:
            yield session
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("Document store failure: %s", e)
            raise StoreError(f"Document store unavailable: {e}") from e
        finally:
            session.close()

    def get(self, document_hash: str) -> Optional[Document]:
        with self._session() as session:
            model = self._db.get_document(session, canonical(document_hash))
            return _to_document(model) if model else None

    def put(
        self,
        document_hash: str,
        fields: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> Optional[Document]:
        """Merge ``fields`` into the document; None on a version mismatch."""
        with self._session() as session:
            model = self._db.upsert_document(
                session,
                canonical(document_hash),
                _to_columns(fields),
                expected_version=expected_version,
            )
            return _to_document(model) if model else None

    def list_all(self) -> List[Document]:
        with self._session() as session:
            return [_to_document(m) for m in self._db.list_documents(session)]

    def list_by_status(self, status: ComplianceStatus) -> List[Document]:
        status = ComplianceStatus(status)
        return [d for d in self.list_all() if d.compliance_status == status]

    def list_by_submitter(self, address: str) -> List[Document]:
        address = canonical(address)
        return [d for d in self.list_all() if canonical(d.submitter) == address]

    def flush(self) -> None:
        with self._session() as session:
            self._db.delete_all(session)
        logger.warning("Document store flushed")

    def ping(self) -> None:
        with self._session() as session:
            self._db.ping(session)


class AIContextCache:
    """Denormalised document snapshots used only to enrich AI prompts.

    Never consulted for workflow decisions. ``cache_snapshot`` and
    ``get_snapshot`` swallow store failures after logging them.
    """

    def __init__(self, db: Database):
        self._db = db

    def store_snapshot(self, document_hash: str, fields: Dict[str, Any]) -> None:
        """Overwrite the snapshot for a hash, raising StoreError on failure."""
        session = self._db.get_session()
        try:
            self._db.set_ai_context(session, canonical(document_hash), fields)
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreError(f"AI context cache unavailable: {e}") from e
        finally:
            session.close()

    def cache_snapshot(self, document_hash: str, fields: Dict[str, Any]) -> bool:
        try:
            self.store_snapshot(document_hash, fields)
        except StoreError as e:
            logger.warning("Failed to cache document %s for AI: %s", document_hash, e)
            return False
        return True

    def get_snapshot(self, document_hash: str) -> Optional[Dict[str, Any]]:
        session = self._db.get_session()
        try:
            entry = self._db.get_ai_context(session, canonical(document_hash))
            return dict(entry.snapshot or {}) if entry else None
        except SQLAlchemyError as e:
            logger.warning("Failed to read AI context for %s: %s", document_hash, e)
            return None
        finally:
            session.close()


_database: Optional[Database] = None


def get_database(database_url: str = "sqlite:///./compliancebot.db") -> Database:
    """Get or create the database instance."""
    global _database
    if _database is None:
        _database = Database(database_url)
        _database.create_tables()
    return _database

"""
SQL persistence adapter (SQLAlchemy).

One row per document in `kv_documents`; the value column holds the encoded
JSON. Each save is its own transaction, matching the one
read-modify-write per hive operation.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, String, Text, create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from apiary.core.logging.logger import get_logger
from apiary.core.persistence.base import JSONDocument, PersistenceAdapter
from apiary.modules.shared.exceptions import PersistenceError

logger = get_logger(__name__)


class Base(DeclarativeBase):
    pass


class KVDocument(Base):
    """Stored JSON document. Pure schema; no business logic."""

    __tablename__ = "kv_documents"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )


class SqlPersistence(PersistenceAdapter):
    name = "sql"

    def __init__(
        self,
        url: Optional[str] = None,
        engine: Optional[Engine] = None,
        create_schema: bool = True,
    ) -> None:
        if engine is None:
            if url is None:
                raise ValueError("SqlPersistence needs a url or an engine")
            engine = create_engine(url, pool_pre_ping=True)
        self._engine = engine
        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)
        if create_schema:
            Base.metadata.create_all(engine)

    def load(self, key: str) -> Optional[JSONDocument]:
        try:
            with self._sessions() as session:
                raw = session.scalar(select(KVDocument.value).where(KVDocument.key == key))
        except SQLAlchemyError as exc:
            logger.warning(
                "SQL load failed",
                extra={"storage_key": key, "error_type": type(exc).__name__},
            )
            raise PersistenceError("load", key, exc) from exc
        return self._decode(key, raw)

    def save(self, key: str, document: JSONDocument) -> None:
        payload = self._encode(key, document)
        try:
            with self._sessions.begin() as session:
                self._upsert(session, key, payload)
        except SQLAlchemyError as exc:
            logger.warning(
                "SQL save failed",
                extra={"storage_key": key, "error_type": type(exc).__name__},
            )
            raise PersistenceError("save", key, exc) from exc

    @staticmethod
    def _upsert(session: Session, key: str, payload: str) -> None:
        row = session.get(KVDocument, key)
        now = datetime.now(timezone.utc)
        if row is None:
            session.add(KVDocument(key=key, value=payload, updated_at=now))
        else:
            row.value = payload
            row.updated_at = now

    def delete(self, key: str) -> None:
        try:
            with self._sessions.begin() as session:
                row = session.get(KVDocument, key)
                if row is not None:
                    session.delete(row)
        except SQLAlchemyError as exc:
            raise PersistenceError("delete", key, exc) from exc

    def close(self) -> None:
        self._engine.dispose()

"""
SQLAlchemy-based vault storage implementation.

Local fallback backend for when no remote key-value service is configured.
Works with any SQLAlchemy-compatible database (SQLite, PostgreSQL, ...).
"""

import json
import logging
from contextlib import contextmanager
from typing import List

from sqlalchemy import BigInteger, Column, Engine, String, Text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base

from mind_vault.errors import TransportError
from mind_vault.models import VaultItem

logger = logging.getLogger(__name__)

Base = declarative_base()


class VaultItemDB(Base):
    """SQLAlchemy model for vault items."""

    __tablename__ = "vault_items"

    id = Column(String, primary_key=True)
    type = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    title = Column(Text, nullable=False)
    summary = Column(Text, nullable=True)
    tags_json = Column(Text, nullable=False, default="[]")
    created_at = Column(BigInteger, nullable=False, index=True)

    def to_vault_item(self) -> VaultItem:
        return VaultItem(
            id=self.id,
            type=self.type,
            content=self.content,
            title=self.title,
            summary=self.summary,
            tags=json.loads(self.tags_json) if self.tags_json else [],
            created_at=self.created_at,
        )

    def update_from(self, item: VaultItem):
        self.type = item.type
        self.content = item.content
        self.title = item.title
        self.summary = item.summary
        self.tags_json = json.dumps(item.tags, ensure_ascii=False)
        self.created_at = item.created_at


class SQLAlchemyVaultStore:
    """
    SQLAlchemy implementation of the VaultStore protocol.

    Example:
        from sqlalchemy import create_engine
        engine = create_engine("sqlite:///vault.db")
        store = SQLAlchemyVaultStore(engine)
        store.create_tables()
    """

    def __init__(self, engine: Engine):
        """
        Initialize the SQLAlchemy vault store.

        Args:
            engine: SQLAlchemy engine for database connection
        """
        self.engine = engine
        logger.info(f"SQLAlchemyVaultStore initialized (engine={engine.url})")

    @contextmanager
    def _session(self):
        """Context manager for database sessions with automatic commit/rollback."""
        session = Session(self.engine)
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database error: {e}")
            raise TransportError(f"Database error: {e}") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_tables(self):
        """Create database tables if they don't exist."""
        Base.metadata.create_all(self.engine)
        logger.info("Database tables created/verified")

    def _upsert(self, session: Session, item: VaultItem):
        row = session.get(VaultItemDB, item.id)
        if row is None:
            row = VaultItemDB(id=item.id)
            session.add(row)
        row.update_from(item)

    async def get_all(self) -> List[VaultItem]:
        with self._session() as session:
            rows = session.query(VaultItemDB).order_by(VaultItemDB.created_at.desc()).all()
            return [row.to_vault_item() for row in rows]

    async def put(self, item: VaultItem) -> None:
        with self._session() as session:
            self._upsert(session, item)
        logger.debug(f"Stored item {item.id}")

    async def put_batch(self, items: List[VaultItem]) -> None:
        with self._session() as session:
            for item in items:
                self._upsert(session, item)
        logger.debug(f"Stored batch of {len(items)} items")

    async def delete(self, item_id: str) -> None:
        with self._session() as session:
            count = session.query(VaultItemDB).filter(VaultItemDB.id == item_id).delete()
        logger.debug(f"Deleted item {item_id} ({count} rows)")

"""
Searchable index tables and the collaborator contract used by the import runner.

Every importer writes into exactly one model built on ``IndexedEntityMixin``.
Rows are stamped with ``last_imported_at`` whenever an import run creates or
re-confirms them, which lets the runner purge anything an upstream source no
longer publishes.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel, db, utcnow


class IndexedEntityMixin:
    """Columns and class-level index operations shared by importable models."""

    id: Mapped[int] = mapped_column(db.Integer, primary_key=True, autoincrement=True)
    entity_key: Mapped[str] = mapped_column(db.String(255), nullable=False, unique=True, index=True)
    last_imported_at: Mapped[datetime] = mapped_column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )

    @classmethod
    def index_name(cls) -> str:
        return cls.__tablename__

    @classmethod
    def upsert(cls, entity_key: str, **fields):
        """
        Create or update the entity identified by ``entity_key`` and touch it.

        The session is not committed; importers commit once their batch is
        complete.
        """
        entity = db.session.execute(select(cls).filter_by(entity_key=entity_key)).scalar_one_or_none()
        if entity is None:
            entity = cls(entity_key=entity_key)
            db.session.add(entity)
        for name, value in fields.items():
            setattr(entity, name, value)
        entity.last_imported_at = utcnow()
        return entity

    @classmethod
    def touch(cls, entity_key: str) -> None:
        """Mark an existing entity as seen by the current import run."""
        db.session.execute(
            update(cls).where(cls.entity_key == entity_key).values(last_imported_at=utcnow())
        )

    @classmethod
    def purge_older_than(cls, cutoff: datetime) -> int:
        """Delete entities whose ``last_imported_at`` is strictly before ``cutoff``."""
        result = db.session.execute(delete(cls).where(cls.last_imported_at < cutoff))
        db.session.commit()
        return result.rowcount or 0

    @classmethod
    def refresh_metadata(cls) -> IndexMetadata:
        """Recompute the summary row describing this index."""
        entity_count, last_imported_at = db.session.execute(
            select(func.count(cls.id), func.max(cls.last_imported_at))
        ).one()

        metadata = db.session.execute(
            select(IndexMetadata).filter_by(index_name=cls.index_name())
        ).scalar_one_or_none()
        if metadata is None:
            metadata = IndexMetadata(index_name=cls.index_name())
            db.session.add(metadata)
        metadata.entity_count = entity_count
        metadata.last_imported_at = last_imported_at
        metadata.refreshed_at = utcnow()
        db.session.commit()
        return metadata


class IndexMetadata(BaseModel):
    """Collection-level summary for one index, refreshed after every import."""

    __tablename__ = "index_metadata"

    id: Mapped[int] = mapped_column(db.Integer, primary_key=True, autoincrement=True)
    index_name: Mapped[str] = mapped_column(db.String(100), nullable=False, unique=True)
    entity_count: Mapped[int] = mapped_column(db.Integer, nullable=False, default=0)
    last_imported_at: Mapped[datetime | None] = mapped_column(db.DateTime(timezone=True), nullable=True)
    refreshed_at: Mapped[datetime | None] = mapped_column(db.DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<IndexMetadata {self.index_name} count={self.entity_count}>"

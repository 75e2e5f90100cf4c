# index_app/models/screening.py

from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel, db
from .index import IndexedEntityMixin


class UvlEntry(IndexedEntityMixin, BaseModel):
    """Party published on the Unverified List."""

    __tablename__ = "uvl_entries"

    name: Mapped[str] = mapped_column(db.String(500), nullable=False)
    address: Mapped[str | None] = mapped_column(db.Text, nullable=True)
    country: Mapped[str | None] = mapped_column(db.String(2), nullable=True, index=True)
    source_list_url: Mapped[str | None] = mapped_column(db.String(500), nullable=True)

    def __repr__(self):
        return f"<UvlEntry {self.name!r} country={self.country}>"


class TradeEvent(IndexedEntityMixin, BaseModel):
    """Trade event announced through the events XML feed."""

    __tablename__ = "trade_events"

    title: Mapped[str] = mapped_column(db.String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(db.Text, nullable=True)
    country: Mapped[str | None] = mapped_column(db.String(2), nullable=True, index=True)
    city: Mapped[str | None] = mapped_column(db.String(255), nullable=True)
    start_date: Mapped[str | None] = mapped_column(db.String(10), nullable=True)
    end_date: Mapped[str | None] = mapped_column(db.String(10), nullable=True)
    registration_deadline: Mapped[str | None] = mapped_column(db.String(10), nullable=True)
    url: Mapped[str | None] = mapped_column(db.String(1000), nullable=True)

    def __repr__(self):
        return f"<TradeEvent {self.title!r} start={self.start_date}>"

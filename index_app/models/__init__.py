# index_app/models/__init__.py
"""
Database models package
"""

from .base import BaseModel, db
from .index import IndexedEntityMixin, IndexMetadata
from .screening import TradeEvent, UvlEntry

__all__ = [
    "db",
    "BaseModel",
    "IndexedEntityMixin",
    "IndexMetadata",
    "TradeEvent",
    "UvlEntry",
]

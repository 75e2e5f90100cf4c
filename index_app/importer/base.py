"""
Importer contract consumed by the import runner.

A concrete importer names the index model it writes into and implements
``extract_and_load``; the runner owns everything before and after that call.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from .normalize import lookup_country
from .utils import read_resource


class Importer(ABC):
    """Base class for source-specific importers."""

    #: Index model (an ``IndexedEntityMixin`` subclass) this importer feeds.
    index: ClassVar[Any]

    def __init__(self, resource: str | None = None, *, index: Any | None = None) -> None:
        self.resource = resource
        if index is not None:
            self.index = index

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def extract_and_load(self) -> None:
        """Fetch, parse, normalize and upsert every record of the source."""

    def read_resource(self) -> str:
        if not self.resource:
            raise ValueError(f"{self.name} requires a source resource.")
        return read_resource(self.resource)

    def lookup_country(self, raw: str | None) -> str | None:
        return lookup_country(raw)

    def __repr__(self) -> str:
        return f"<{self.name} resource={self.resource!r}>"

"""
Importer registry.

Importers register metadata here so configuration validation and the CLI can
list them without importing their modules.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from importlib import import_module
from typing import Iterable, Mapping, Sequence

from flask import current_app


class UnknownImporterError(ValueError):
    """Raised when an importer name is not registered."""


@dataclass(frozen=True)
class ImporterDescriptor:
    """Metadata describing a registered importer."""

    name: str
    title: str
    importer_path: str
    source_config_key: str
    summary: str | None = None


def get_importer_registry() -> Mapping[str, ImporterDescriptor]:
    """
    Return the registry of built-in importers, in scheduling order.
    """
    return OrderedDict(
        (
            (
                "uvl",
                ImporterDescriptor(
                    name="uvl",
                    title="Unverified List (CSV)",
                    importer_path="index_app.importer.sources.uvl:UvlData",
                    source_config_key="IMPORTER_UVL_SOURCE",
                    summary="Parties on the Unverified List, published as CSV.",
                ),
            ),
            (
                "trade_events",
                ImporterDescriptor(
                    name="trade_events",
                    title="Trade Events (XML)",
                    importer_path="index_app.importer.sources.trade_events:TradeEventData",
                    source_config_key="IMPORTER_TRADE_EVENTS_SOURCE",
                    summary="Trade events announced through the events XML feed.",
                ),
            ),
        )
    )


def resolve_importers(
    configured: Sequence[str],
    registry: Mapping[str, ImporterDescriptor] | None = None,
) -> Iterable[ImporterDescriptor]:
    """
    Map importer names to registry descriptors, raising on unknowns.
    """
    registry = registry or get_importer_registry()
    unknown = sorted({name for name in configured if name not in registry})
    if unknown:
        raise UnknownImporterError(
            "Unknown importers configured: "
            + ", ".join(unknown)
            + ". Update configuration or register these importers first."
        )
    return tuple(registry[name] for name in configured)


def load_importer_class(descriptor: ImporterDescriptor):
    module_name, _, class_name = descriptor.importer_path.partition(":")
    return getattr(import_module(module_name), class_name)


def build_importer(name: str, app=None):
    """
    Instantiate the importer registered as ``name`` with its configured source.
    """
    app = app or current_app
    (descriptor,) = resolve_importers((name,))
    importer_class = load_importer_class(descriptor)
    return importer_class(app.config.get(descriptor.source_config_key))

"""Field extraction helpers for XML nodes and flat CSV rows."""

from __future__ import annotations

from typing import Mapping
from xml.etree.ElementTree import Element

from .text import squish


def extract_node(node: Element | None) -> str | None:
    """Return the squished text content of ``node``, or ``None`` when empty."""
    if node is None:
        return None
    content = squish("".join(node.itertext()))
    return content or None


def extract_fields(parent: Element, paths: Mapping[str, str]) -> dict[str, str | None]:
    """
    Pull one value per field out of ``parent``.

    ``paths`` maps canonical field names to ElementTree path expressions; the
    first node each path selects supplies the value.
    """
    return {field: extract_node(parent.find(path)) for field, path in paths.items()}


def remap_keys(mapping: Mapping[str, str], row: Mapping[str, object | None]) -> dict[str, object | None]:
    """Keep the keys of ``row`` listed in ``mapping`` and rename them."""
    return {target: row[source] for source, target in mapping.items() if source in row}

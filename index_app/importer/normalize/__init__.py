"""Field-level normalization toolkit shared by every importer."""

from __future__ import annotations

from .countries import (
    UNDETERMINED,
    CountryAlias,
    CountryMappingError,
    CountryResolver,
    get_country_resolver,
    load_country_mappings,
    lookup_country,
    parse_country_mappings,
)
from .dates import parse_american_date, parse_date
from .extract import extract_fields, extract_node, remap_keys
from .text import sanitize_entry, sanitize_value, squish, strip_markup

__all__ = [
    "UNDETERMINED",
    "CountryAlias",
    "CountryMappingError",
    "CountryResolver",
    "get_country_resolver",
    "load_country_mappings",
    "lookup_country",
    "parse_country_mappings",
    "parse_american_date",
    "parse_date",
    "extract_fields",
    "extract_node",
    "remap_keys",
    "sanitize_entry",
    "sanitize_value",
    "squish",
    "strip_markup",
]

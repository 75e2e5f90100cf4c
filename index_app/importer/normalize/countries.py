"""
Country-name resolution for free-text source fields.

Names are first normalized through an ordered alias table loaded from YAML
(``config/country_mappings.yaml``), then looked up in ISO 3166-1 to obtain the
alpha-2 code. Alias patterns are matched with ``re.search`` and are therefore
unanchored: ``Korea`` inside ``Korea, Democratic People's Republic`` matches
too, so specific entries must be listed before broad ones.
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import pycountry
import yaml
from flask import current_app, has_app_context

from ..metrics import record_country_lookup_miss

logger = logging.getLogger(__name__)

UNDETERMINED = "<undetermined>"
DEFAULT_MAPPINGS_PATH = Path(__file__).resolve().parents[3] / "config" / "country_mappings.yaml"
RESOLVER_EXTENSION_KEY = "country_resolver"
_NAME_ATTRIBUTES = ("name", "official_name", "common_name")


class CountryMappingError(RuntimeError):
    """Raised when the country alias table cannot be loaded or validated."""


@dataclass(frozen=True)
class CountryAlias:
    name: str
    patterns: tuple[re.Pattern[str], ...]

    @property
    def undetermined(self) -> bool:
        return self.name == UNDETERMINED

    def matches(self, value: str) -> bool:
        return any(pattern.search(value) for pattern in self.patterns)


def parse_country_mappings(raw: Any) -> tuple[CountryAlias, ...]:
    """Validate and compile a ``{name: [pattern, ...]}`` mapping, keeping its order."""

    if not isinstance(raw, Mapping):
        raise CountryMappingError(f"Country mappings must be a mapping, got {type(raw).__name__}.")

    aliases: list[CountryAlias] = []
    for name, patterns in raw.items():
        if not name:
            raise CountryMappingError("Country mapping entry is missing a name.")
        if isinstance(patterns, str) or not isinstance(patterns, (list, tuple)):
            raise CountryMappingError(f"Patterns for '{name}' must be a list.")
        compiled: list[re.Pattern[str]] = []
        for pattern in patterns:
            try:
                compiled.append(re.compile(str(pattern)))
            except re.error as exc:
                raise CountryMappingError(f"Invalid pattern {pattern!r} for '{name}': {exc}") from exc
        aliases.append(CountryAlias(name=str(name), patterns=tuple(compiled)))
    return tuple(aliases)


def load_country_mappings(path: str | Path) -> tuple[CountryAlias, ...]:
    path = Path(path)
    if not path.exists():
        raise CountryMappingError(f"Country mappings file not found at {path}")
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise CountryMappingError(f"Failed to parse country mappings YAML at {path}: {exc}") from exc
    return parse_country_mappings(raw)


def _partial_match(name: str):
    # Whole-word match so "Bosnia" finds "Bosnia and Herzegovina" but "Land" misses "Finland".
    pattern = re.compile(rf"\b{re.escape(name)}\b", re.IGNORECASE)
    for country in pycountry.countries:
        for attribute in _NAME_ATTRIBUTES:
            candidate = getattr(country, attribute, None)
            if candidate and pattern.search(candidate):
                return country
    return None


def iso_alpha2(name: str) -> str | None:
    """
    Return the alpha-2 code of the ISO 3166-1 country matching ``name``.

    Exact lookups win; otherwise the first country whose name, official name or
    common name contains ``name`` as whole words. Subdivisions never match.
    """
    try:
        return pycountry.countries.lookup(name).alpha_2
    except LookupError:
        pass
    country = _partial_match(name)
    return country.alpha_2 if country is not None else None


class CountryResolver:
    """
    Resolve free-form country names to ISO 3166-1 alpha-2 codes.

    The alias table is loaded on first use, exactly once even under concurrent
    callers, and is read without locking afterwards. ``reset`` drops it so the
    next lookup reloads the file.
    """

    def __init__(
        self,
        path: str | Path | None = None,
        *,
        mappings: Mapping[str, Any] | None = None,
    ) -> None:
        self.path = Path(path) if path else DEFAULT_MAPPINGS_PATH
        self._raw_mappings = mappings
        self._aliases: tuple[CountryAlias, ...] | None = None
        self._lock = threading.Lock()

    @property
    def aliases(self) -> tuple[CountryAlias, ...]:
        aliases = self._aliases
        if aliases is None:
            with self._lock:
                if self._aliases is None:
                    self._aliases = self._load()
                aliases = self._aliases
        return aliases

    def _load(self) -> tuple[CountryAlias, ...]:
        if self._raw_mappings is not None:
            return parse_country_mappings(self._raw_mappings)
        logger.debug("Loading country mappings from %s", self.path)
        return load_country_mappings(self.path)

    def reset(self) -> None:
        with self._lock:
            self._aliases = None

    def normalize(self, raw: str | None) -> str | None:
        """
        Map ``raw`` onto a canonical country name.

        Returns ``None`` for names the alias table marks as undetermined, and the
        stripped input when no alias matches. Blank or non-string input gives ``None``.
        """
        if not isinstance(raw, str) or not raw.strip():
            return None
        value = raw.strip()
        for alias in self.aliases:
            if alias.matches(value):
                return None if alias.undetermined else alias.name
        return value

    def resolve(self, raw: str | None) -> str | None:
        if not isinstance(raw, str) or not raw.strip():
            return None
        name = self.normalize(raw)
        if name is None:
            return None
        code = iso_alpha2(name)
        if code is None:
            logger.error("Could not find a country code for %s", raw)
            record_country_lookup_miss()
        return code


_default_resolver: CountryResolver | None = None
_default_resolver_lock = threading.Lock()


def get_country_resolver() -> CountryResolver:
    """
    Return the shared resolver, bound to ``COUNTRY_MAPPINGS_PATH`` when an app
    context is active.
    """
    global _default_resolver

    if has_app_context():
        state = current_app.extensions
        resolver = state.get(RESOLVER_EXTENSION_KEY)
        if resolver is None:
            with _default_resolver_lock:
                resolver = state.get(RESOLVER_EXTENSION_KEY)
                if resolver is None:
                    resolver = CountryResolver(current_app.config.get("COUNTRY_MAPPINGS_PATH"))
                    state[RESOLVER_EXTENSION_KEY] = resolver
        return resolver

    if _default_resolver is None:
        with _default_resolver_lock:
            if _default_resolver is None:
                _default_resolver = CountryResolver()
    return _default_resolver


def lookup_country(raw: str | None) -> str | None:
    """Resolve ``raw`` with the shared resolver."""
    return get_country_resolver().resolve(raw)

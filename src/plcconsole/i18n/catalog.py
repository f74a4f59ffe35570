"""Localized string lookup — YAML string tables keyed by culture tag."""

from __future__ import annotations

import enum
import importlib.resources
import logging
from collections.abc import Sequence
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)


class Locale(enum.Enum):
    """Languages offered at start-up, in menu order. Values are culture tags."""

    GERMAN = "de-DE"
    ENGLISH = "en-US"
    SPANISH = "es-ES"
    FRENCH = "fr-FR"
    ITALIAN = "it-IT"
    CHINESE = "zh-Hans"

    @property
    def native_name(self) -> str:
        return _NATIVE_NAMES[self]


_NATIVE_NAMES = {
    Locale.GERMAN: "Deutsch",
    Locale.ENGLISH: "English",
    Locale.SPANISH: "Español",
    Locale.FRENCH: "Français",
    Locale.ITALIAN: "Italiano",
    Locale.CHINESE: "Chinese",
}

FALLBACK_LOCALE = Locale.ENGLISH


class StringCatalog:
    """Looks up user-facing strings by stable key.

    Packaged tables live in ``plcconsole.i18n.strings``; each directory in
    ``overrides`` may hold ``<culture>.yaml`` files whose keys replace the
    packaged ones. Earlier override directories win. Missing keys fall back
    to English, then to None.
    """

    def __init__(self, overrides: Sequence[Path] = ()) -> None:
        self._overrides = list(overrides)
        self._tables: dict[Locale, dict[str, str]] = {}

    def lookup(self, key: str, locale: Locale) -> str | None:
        value = self._table(locale).get(key)
        if value is None and locale is not FALLBACK_LOCALE:
            value = self._table(FALLBACK_LOCALE).get(key)
        if value is None:
            logger.debug("Missing string '%s' for %s", key, locale.value)
        return value

    def _table(self, locale: Locale) -> dict[str, str]:
        table = self._tables.get(locale)
        if table is None:
            table = _load_packaged(locale)
            for directory in reversed(self._overrides):
                table.update(_load_override(directory / f"{locale.value}.yaml"))
            self._tables[locale] = table
        return table


def _load_packaged(locale: Locale) -> dict[str, str]:
    pkg = importlib.resources.files("plcconsole.i18n.strings")
    resource = pkg.joinpath(f"{locale.value}.yaml")
    try:
        text = resource.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.warning("No packaged strings for %s", locale.value)
        return {}
    return _as_table(yaml.safe_load(text))


def _load_override(path: Path) -> dict[str, str]:
    if not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (yaml.YAMLError, OSError):
        logger.warning("Ignoring unreadable strings file %s", path, exc_info=True)
        return {}
    return _as_table(data)


def _as_table(data: object) -> dict[str, str]:
    if not isinstance(data, dict):
        return {}
    return {str(k): str(v) for k, v in data.items() if v is not None}


class Translator:
    """A catalog bound to the operator's current locale."""

    def __init__(self, catalog: StringCatalog, locale: Locale = FALLBACK_LOCALE) -> None:
        self.catalog = catalog
        self.locale = locale

    def __call__(self, key: str) -> str | None:
        return self.catalog.lookup(key, self.locale)

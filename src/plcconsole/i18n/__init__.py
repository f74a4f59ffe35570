"""Localization — locales and string tables."""

from plcconsole.i18n.catalog import FALLBACK_LOCALE, Locale, StringCatalog, Translator

__all__ = ["FALLBACK_LOCALE", "Locale", "StringCatalog", "Translator"]

"""Tests for localized string lookup."""

from __future__ import annotations

import importlib.resources
from pathlib import Path

import pytest
import yaml

from plcconsole.i18n import FALLBACK_LOCALE, Locale, StringCatalog, Translator


def _packaged_keys(locale: Locale) -> set[str]:
    pkg = importlib.resources.files("plcconsole.i18n.strings")
    text = pkg.joinpath(f"{locale.value}.yaml").read_text(encoding="utf-8")
    return set(yaml.safe_load(text))


@pytest.mark.parametrize("locale", list(Locale))
def test_every_locale_has_the_full_key_set(locale):
    assert _packaged_keys(locale) == _packaged_keys(FALLBACK_LOCALE)


def test_language_menu_order():
    assert [locale.native_name for locale in Locale] == [
        "Deutsch",
        "English",
        "Español",
        "Français",
        "Italiano",
        "Chinese",
    ]


def test_lookup_in_selected_locale():
    catalog = StringCatalog()
    assert catalog.lookup("commandError", Locale.ENGLISH) == "Invalid selection. Please try again."
    assert catalog.lookup("networkInterfacePrompt", Locale.GERMAN) == "Netzwerkschnittstelle:"


def test_unknown_key_is_none():
    assert StringCatalog().lookup("noSuchKey", Locale.FRENCH) is None


def test_missing_key_falls_back_to_english(tmp_path: Path):
    (tmp_path / "en-US.yaml").write_text("customGreeting: Hello\n")
    catalog = StringCatalog([tmp_path])
    assert catalog.lookup("customGreeting", Locale.ITALIAN) == "Hello"


def test_earlier_override_directory_wins(tmp_path: Path):
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.mkdir()
    second.mkdir()
    (first / "en-US.yaml").write_text("exit: '9: Leave'\n")
    (second / "en-US.yaml").write_text("exit: '9: Quit'\ncommandError: Nope\n")

    catalog = StringCatalog([first, second])
    assert catalog.lookup("exit", Locale.ENGLISH) == "9: Leave"
    assert catalog.lookup("commandError", Locale.ENGLISH) == "Nope"
    assert catalog.lookup("identify", Locale.ENGLISH) == "1: Identify (flash LEDs)"


def test_unreadable_override_is_ignored(tmp_path: Path):
    (tmp_path / "en-US.yaml").write_text("exit: [unclosed\n")
    catalog = StringCatalog([tmp_path])
    assert catalog.lookup("exit", Locale.ENGLISH) == "9: Exit"


def test_translator_follows_locale_changes():
    translate = Translator(StringCatalog())
    assert translate.locale is Locale.ENGLISH
    assert translate("exit") == "9: Exit"
    translate.locale = Locale.SPANISH
    assert translate("exit") == "9: Salir"

from __future__ import annotations

import pytest

from voxlate.contracts import LanguageEntry
from voxlate.languages.catalog import DEFAULT_LANGUAGES, LanguageCatalog


def test_default_catalog_is_bijective() -> None:
    catalog = LanguageCatalog()
    assert len(catalog) == len(DEFAULT_LANGUAGES) == 23
    for entry in catalog.all():
        assert catalog.lookup_by_code(entry.code) == entry.display_name
        assert catalog.lookup_by_display_name(entry.display_name) == entry.code
    assert "auto" not in catalog


def test_display_name_lookup_ignores_case_and_spacing() -> None:
    catalog = LanguageCatalog()
    assert catalog.lookup_by_display_name("  spanish ") == "es-ES"
    assert catalog.lookup_by_display_name("chinese   (MANDARIN)") == "zh-CN"
    assert catalog.lookup_by_display_name("Klingon") is None
    assert catalog.lookup_by_code("xx-XX") is None


def test_reconcile_display_name() -> None:
    catalog = LanguageCatalog()
    assert catalog.reconcile_display_name("JAPANESE") == "Japanese"
    assert catalog.reconcile_display_name("Esperanto") == "Esperanto"


@pytest.mark.parametrize(
    "locale_code, expected",
    [
        ("es-ES", "es-ES"),
        ("en_GB", "en-US"),
        ("pt_PT.UTF-8", "pt-BR"),
        ("ja", "ja-JP"),
        ("xx_YY", None),
        (None, None),
        ("", None),
    ],
)
def test_best_match(locale_code, expected) -> None:
    assert LanguageCatalog().best_match(locale_code) == expected


def test_duplicate_codes_rejected() -> None:
    with pytest.raises(ValueError):
        LanguageCatalog([LanguageEntry("en-US", "English"), LanguageEntry("en-US", "American")])

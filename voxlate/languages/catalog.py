from __future__ import annotations

from typing import Iterable, Optional, Sequence

from voxlate.contracts import LanguageEntry

DEFAULT_LANGUAGES: tuple[LanguageEntry, ...] = (
    LanguageEntry("en-US", "English"),
    LanguageEntry("es-ES", "Spanish"),
    LanguageEntry("fr-FR", "French"),
    LanguageEntry("de-DE", "German"),
    LanguageEntry("it-IT", "Italian"),
    LanguageEntry("pt-BR", "Portuguese"),
    LanguageEntry("nl-NL", "Dutch"),
    LanguageEntry("sv-SE", "Swedish"),
    LanguageEntry("pl-PL", "Polish"),
    LanguageEntry("ru-RU", "Russian"),
    LanguageEntry("uk-UA", "Ukrainian"),
    LanguageEntry("tr-TR", "Turkish"),
    LanguageEntry("el-GR", "Greek"),
    LanguageEntry("ar-SA", "Arabic"),
    LanguageEntry("he-IL", "Hebrew"),
    LanguageEntry("hi-IN", "Hindi"),
    LanguageEntry("bn-IN", "Bengali"),
    LanguageEntry("th-TH", "Thai"),
    LanguageEntry("vi-VN", "Vietnamese"),
    LanguageEntry("id-ID", "Indonesian"),
    LanguageEntry("ja-JP", "Japanese"),
    LanguageEntry("ko-KR", "Korean"),
    LanguageEntry("zh-CN", "Chinese (Mandarin)"),
)


def _fold(name: str) -> str:
    return " ".join(str(name or "").split()).casefold()


class LanguageCatalog:
    """
    Immutable code <-> display name table.

    Display-name lookups are case-insensitive and ignore surrounding or repeated
    whitespace, since the remote service returns loosely formatted names.
    """

    def __init__(self, entries: Iterable[LanguageEntry] = DEFAULT_LANGUAGES) -> None:
        self._entries: tuple[LanguageEntry, ...] = tuple(entries)
        self._by_code: dict[str, LanguageEntry] = {}
        self._by_name: dict[str, LanguageEntry] = {}
        for entry in self._entries:
            if entry.code in self._by_code:
                raise ValueError(f"duplicate language code: {entry.code}")
            self._by_code[entry.code] = entry
            self._by_name.setdefault(_fold(entry.display_name), entry)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, code: object) -> bool:
        return code in self._by_code

    def all(self) -> Sequence[LanguageEntry]:
        return self._entries

    def lookup_by_code(self, code: str) -> Optional[str]:
        entry = self._by_code.get(code)
        return entry.display_name if entry is not None else None

    def lookup_by_display_name(self, name: str) -> Optional[str]:
        entry = self._by_name.get(_fold(name))
        return entry.code if entry is not None else None

    def reconcile_display_name(self, raw: str) -> str:
        """Canonical display name when `raw` names a known language, else `raw` unchanged."""
        entry = self._by_name.get(_fold(raw))
        if entry is None:
            return raw
        return entry.display_name

    def best_match(self, locale_code: str | None) -> Optional[str]:
        """
        Map a locale tag such as "en_GB" or "es-MX" to a catalog code:
        exact code first, then the first entry sharing the language prefix.
        """
        if not locale_code:
            return None
        tag = str(locale_code).split(".")[0].replace("_", "-").strip()
        if not tag:
            return None
        if tag in self._by_code:
            return tag
        prefix = tag.split("-")[0].lower()
        for entry in self._entries:
            if entry.code.split("-")[0].lower() == prefix:
                return entry.code
        return None

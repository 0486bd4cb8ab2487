from __future__ import annotations

from typing import Dict, Mapping, Protocol


class Translator(Protocol):
    def tr(self, locale: str, path: str) -> str:
        ...


class CatalogTranslator:
    """Looks captions up in per-locale ``{path: label}`` catalogs.

    A missing key falls back to the default locale, then to the last
    segment of the path, which is the node's default caption key.
    """

    def __init__(self, catalogs: Mapping[str, Mapping[str, str]] | None = None, *, default_locale: str = "en") -> None:
        self.default_locale = default_locale
        self._catalogs: Dict[str, Dict[str, str]] = {
            locale: dict(entries) for locale, entries in (catalogs or {}).items()
        }

    def add(self, locale: str, path: str, label: str) -> None:
        self._catalogs.setdefault(locale, {})[path] = label

    def locales(self) -> list[str]:
        return sorted(self._catalogs)

    def tr(self, locale: str, path: str) -> str:
        label = self._catalogs.get(locale, {}).get(path)
        if label is None and locale != self.default_locale:
            label = self._catalogs.get(self.default_locale, {}).get(path)
        if label is None:
            return path.rsplit("/", 1)[-1]
        return label

"""Text normalization utilities for catalog matching."""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from typing import Iterable

_DIACRITIC_BLOCKS = (
    (0x0300, 0x036F),
    (0x1AB0, 0x1AFF),
    (0x1DC0, 0x1DFF),
    (0x20D0, 0x20FF),
    (0xFE20, 0xFE2F),
)


@dataclass(frozen=True, slots=True)
class NormalizedText:
    """Represents normalized text alongside the input it came from."""

    original: str
    normalized: str

    @property
    def is_blank(self) -> bool:
        return not self.normalized


class TextNormalizer:
    """Applies Unicode decomposition, diacritic stripping and case folding.

    Only marks from the combining diacritical blocks are removed, so
    ``Āmavāta`` and ``amavata`` compare equal while Indic signs such as the
    virama survive decomposition untouched.
    """

    _WHITESPACE_PATTERN = re.compile(r"\s+")

    def __init__(self, form: str = "NFKD", strip_marks: bool = True) -> None:
        if form not in {"NFD", "NFKD"}:
            raise ValueError("Normalization form must be a decomposition (NFD or NFKD)")
        self._form = form
        self._strip_marks = strip_marks

    @staticmethod
    def _remove_control_characters(text: str) -> str:
        return "".join(ch for ch in text if unicodedata.category(ch) != "Cc")

    @staticmethod
    def _remove_diacritics(text: str) -> str:
        return "".join(ch for ch in text if not _is_diacritic(ch))

    def _collapse_whitespace(self, text: str) -> str:
        return self._WHITESPACE_PATTERN.sub(" ", text).strip()

    def normalize(self, text: str | None) -> NormalizedText:
        """Normalize text for substring comparison."""

        raw = text or ""
        clean_text = self._remove_control_characters(raw)
        clean_text = unicodedata.normalize(self._form, clean_text)
        if self._strip_marks:
            clean_text = self._remove_diacritics(clean_text)
        folded_text = clean_text.casefold()
        return NormalizedText(original=raw, normalized=self._collapse_whitespace(folded_text))

    def key(self, text: str | None) -> str:
        """Shorthand returning only the normalized string."""

        return self.normalize(text).normalized

    def normalize_batch(self, texts: Iterable[str]) -> tuple[NormalizedText, ...]:
        return tuple(self.normalize(text) for text in texts)


def _is_diacritic(ch: str) -> bool:
    point = ord(ch)
    return any(start <= point <= end for start, end in _DIACRITIC_BLOCKS)


__all__ = ["NormalizedText", "TextNormalizer"]

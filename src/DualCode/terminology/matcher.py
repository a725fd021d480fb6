"""Substring and spelling-tolerant search over the code catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from rapidfuzz import fuzz

from .catalog import CodeCatalog
from .models import CatalogEntry
from .normalization import TextNormalizer
from .telemetry import TerminologyTelemetry

MAX_RESULTS = 20


@dataclass(frozen=True, slots=True)
class Suggestion:
    """A near-miss catalog entry returned when substring search finds nothing."""

    entry: CatalogEntry
    score: float
    matched_label: str


@dataclass(slots=True)
class _IndexedEntry:
    entry: CatalogEntry
    keys: tuple[str, ...]


@dataclass(slots=True)
class Matcher:
    """Finds catalog entries whose display or designations contain a query.

    Normalized labels are computed once at construction; the catalog itself
    is never modified.
    """

    catalog: CodeCatalog
    normalizer: TextNormalizer = field(default_factory=TextNormalizer)
    limit: int = MAX_RESULTS
    suggest_cutoff: float = 80.0
    telemetry: TerminologyTelemetry = field(default_factory=TerminologyTelemetry)
    _index: tuple[_IndexedEntry, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not 1 <= self.limit <= MAX_RESULTS:
            raise ValueError(f"limit must be between 1 and {MAX_RESULTS}")
        self._index = tuple(
            _IndexedEntry(entry=entry, keys=tuple(self.normalizer.key(label) for label in entry.labels()))
            for entry in self.catalog
        )

    def search(self, query: str) -> Sequence[CatalogEntry]:
        """Return matching entries in catalog order, at most ``limit`` long."""

        needle = self.normalizer.key(query)
        if not needle:
            return ()
        results: list[CatalogEntry] = []
        for indexed in self._index:
            if any(needle in key for key in indexed.keys):
                results.append(indexed.entry)
                if len(results) >= self.limit:
                    break
        self.telemetry.record_search(query, len(results), limit=self.limit)
        return tuple(results)

    def suggest(self, query: str) -> Sequence[Suggestion]:
        """Rank entries by fuzzy similarity for misspelled queries."""

        needle = self.normalizer.key(query)
        if not needle:
            return ()
        scored: list[tuple[float, int, Suggestion]] = []
        for position, indexed in enumerate(self._index):
            best_score = 0.0
            best_label = ""
            for label, key in zip(indexed.entry.labels(), indexed.keys):
                score = fuzz.WRatio(needle, key)
                if score > best_score:
                    best_score, best_label = score, label
            if best_score < self.suggest_cutoff:
                continue
            suggestion = Suggestion(entry=indexed.entry, score=best_score, matched_label=best_label)
            scored.append((-best_score, position, suggestion))
        scored.sort(key=lambda item: (item[0], item[1]))
        suggestions = tuple(item[2] for item in scored[: self.limit])
        self.telemetry.record_suggest(query, len(suggestions), cutoff=self.suggest_cutoff)
        return suggestions


__all__ = ["MAX_RESULTS", "Matcher", "Suggestion"]

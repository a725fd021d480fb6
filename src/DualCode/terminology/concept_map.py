"""Read-only concept map index keyed by source code."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, Optional, Sequence

from .catalog import CodeCatalog
from .models import ICD11_MMS_SYSTEM, ConceptMapEntry, TargetCandidate

logger = logging.getLogger(__name__)


class ConceptMapIndex:
    """Immutable mapping from a source code to its ordered target candidates."""

    __slots__ = ("_entries", "version")

    def __init__(self, entries: Iterable[ConceptMapEntry], *, version: Optional[str] = None) -> None:
        indexed: dict[str, ConceptMapEntry] = {}
        for entry in entries:
            if entry.source_code in indexed:
                raise ValueError(f"Duplicate concept map source '{entry.source_code}'")
            indexed[entry.source_code] = entry
        self._entries: Mapping[str, ConceptMapEntry] = MappingProxyType(indexed)
        self.version = version

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ConceptMapEntry]:
        return iter(self._entries.values())

    def __contains__(self, source_code: object) -> bool:
        return source_code in self._entries

    def lookup(self, source_code: str) -> Sequence[TargetCandidate]:
        """Return declared targets for ``source_code`` or an empty tuple."""

        entry = self._entries.get(source_code)
        if entry is None:
            return ()
        return entry.targets

    def dangling_sources(self, catalog: CodeCatalog) -> tuple[str, ...]:
        """List mapped source codes that the catalog does not contain."""

        return tuple(code for code in self._entries if code not in catalog)

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, Any]],
        *,
        version: Optional[str] = None,
    ) -> "ConceptMapIndex":
        """Build an index from rows shaped ``{"source": ..., "targets": [...]}``."""

        entries = []
        for record in records:
            targets = tuple(_candidate_from_record(target) for target in record.get("targets", ()))
            source = record.get("source") or record["source_code"]
            entries.append(ConceptMapEntry(source_code=source, targets=targets))
        return cls(entries, version=version)


def _candidate_from_record(target: Mapping[str, Any]) -> TargetCandidate:
    # Rows carrying "group" use "system" for the coding URI; bundled rows use it
    # for the group tag and keep the URI under "uri".
    if target.get("group"):
        group = target["group"]
        system = target.get("system") or target.get("uri", ICD11_MMS_SYSTEM)
    else:
        group = target["system"]
        system = target.get("uri", ICD11_MMS_SYSTEM)
    return TargetCandidate(
        group=group,
        code=target["code"],
        display=target["display"],
        equivalence=target["equivalence"],
        system=system,
    )


def load_concept_map(path: Path, *, version: Optional[str] = None) -> ConceptMapIndex:
    """Load a concept map fixture from a JSON file."""

    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        version = version or data.get("version")
        data = data.get("groups", data.get("entries", []))
    return ConceptMapIndex.from_records(data, version=version)


def check_consistency(index: ConceptMapIndex, catalog: CodeCatalog) -> tuple[str, ...]:
    """Warn about mapped sources missing from the catalog and return them."""

    dangling = index.dangling_sources(catalog)
    if dangling:
        logger.warning(
            "terminology.concept_map.dangling_sources",
            extra={"payload": {"source_codes": list(dangling)}},
        )
    return dangling


__all__ = ["ConceptMapIndex", "check_consistency", "load_concept_map"]

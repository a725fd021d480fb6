"""Read-only source code catalog."""

from __future__ import annotations

import json
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, Optional, Sequence

from .exceptions import UnknownSourceCodeError
from .models import NAMASTE_SYSTEM, CatalogEntry


class CodeCatalog:
    """Immutable, insertion-ordered set of source vocabulary entries.

    Built once at startup and handed to the components that read it. Codes
    are unique within the catalog; duplicates are rejected at load time.
    """

    __slots__ = ("_entries", "_by_code", "version")

    def __init__(self, entries: Iterable[CatalogEntry], *, version: Optional[str] = None) -> None:
        ordered = tuple(entries)
        by_code: dict[str, CatalogEntry] = {}
        for entry in ordered:
            if entry.code in by_code:
                raise ValueError(f"Duplicate catalog code '{entry.code}'")
            by_code[entry.code] = entry
        self._entries = ordered
        self._by_code: Mapping[str, CatalogEntry] = MappingProxyType(by_code)
        self.version = version

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self._entries)

    def __contains__(self, code: object) -> bool:
        return code in self._by_code

    @property
    def entries(self) -> Sequence[CatalogEntry]:
        return self._entries

    def get(self, code: str) -> CatalogEntry:
        """Retrieve a single entry, raising when the code is unknown."""

        try:
            return self._by_code[code]
        except KeyError:
            raise UnknownSourceCodeError(code) from None

    def find(self, code: str) -> Optional[CatalogEntry]:
        return self._by_code.get(code)

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, Any]],
        *,
        version: Optional[str] = None,
    ) -> "CodeCatalog":
        """Build a catalog from plain mappings shaped like the bundled data."""

        entries = [
            CatalogEntry(
                code=record["code"],
                display=record["display"],
                designations=record.get("designations"),
                system=record.get("system", NAMASTE_SYSTEM),
            )
            for record in records
        ]
        return cls(entries, version=version)


def load_catalog(path: Path, *, version: Optional[str] = None) -> CodeCatalog:
    """Load a catalog fixture from a JSON file.

    The file holds either a list of entries or an object with ``version`` and
    ``entries`` keys.
    """

    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        version = version or data.get("version")
        data = data.get("entries", [])
    return CodeCatalog.from_records(data, version=version)


__all__ = ["CodeCatalog", "load_catalog"]

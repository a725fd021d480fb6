"""Session-scoped selection of a source term and its chosen targets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from .models import CatalogEntry, TargetCandidate, TargetSystemGroup


@dataclass(slots=True)
class Selection:
    """Mutable per-session choice state handed to the synthesizer.

    Choosing a candidate replaces any earlier choice from the same group,
    mirroring one active choice per tab. Instances are owned by a single
    session and are not safe to share across concurrent sessions.
    """

    source: Optional[CatalogEntry] = None
    _chosen: list[TargetCandidate] = field(default_factory=list)

    def select_source(self, entry: CatalogEntry) -> None:
        self.source = entry
        self._chosen.clear()

    def choose(self, candidate: TargetCandidate) -> None:
        for position, existing in enumerate(self._chosen):
            if existing.group is candidate.group:
                self._chosen[position] = candidate
                return
        self._chosen.append(candidate)

    def remove(self, candidate: TargetCandidate) -> bool:
        try:
            self._chosen.remove(candidate)
        except ValueError:
            return False
        return True

    def clear(self) -> None:
        self.source = None
        self._chosen.clear()

    def chosen_for(self, group: TargetSystemGroup | str) -> Optional[TargetCandidate]:
        resolved = TargetSystemGroup.parse(group)
        for candidate in self._chosen:
            if candidate.group is resolved:
                return candidate
        return None

    @property
    def chosen_targets(self) -> Sequence[TargetCandidate]:
        return tuple(self._chosen)


__all__ = ["Selection"]

"""Translation of source codes into target vocabulary candidates."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from .concept_map import ConceptMapIndex
from .models import TargetCandidate, TargetSystemGroup
from .telemetry import TerminologyTelemetry


@dataclass(slots=True)
class Translator:
    """Looks up concept map candidates for a source code.

    An unmapped code yields an empty tuple rather than an error, and the
    curator-declared order of candidates is never changed.
    """

    index: ConceptMapIndex
    telemetry: TerminologyTelemetry = field(default_factory=TerminologyTelemetry)

    def translate(
        self,
        source_code: str,
        *,
        group: TargetSystemGroup | str | None = None,
    ) -> Sequence[TargetCandidate]:
        candidates = tuple(self.index.lookup(source_code))
        resolved: Optional[TargetSystemGroup] = None
        if group is not None:
            resolved = TargetSystemGroup.parse(group)
            candidates = filter_group(candidates, resolved)
        self.telemetry.record_translate(
            source_code,
            len(candidates),
            group=resolved.value if resolved else None,
        )
        return candidates

    def partition(self, source_code: str) -> Mapping[TargetSystemGroup, Sequence[TargetCandidate]]:
        """Split candidates by group; every group is present, possibly empty."""

        return partition_by_group(self.translate(source_code))

    def is_mapped(self, source_code: str) -> bool:
        return source_code in self.index

    def find_candidate(
        self,
        source_code: str,
        group: TargetSystemGroup | str,
        code: str,
    ) -> Optional[TargetCandidate]:
        """Return the candidate with ``code`` in ``group`` for ``source_code``."""

        for candidate in self.translate(source_code, group=group):
            if candidate.code == code:
                return candidate
        return None


def filter_group(
    candidates: Sequence[TargetCandidate],
    group: TargetSystemGroup,
) -> tuple[TargetCandidate, ...]:
    return tuple(candidate for candidate in candidates if candidate.group is group)


def partition_by_group(
    candidates: Sequence[TargetCandidate],
) -> dict[TargetSystemGroup, tuple[TargetCandidate, ...]]:
    return {group: filter_group(candidates, group) for group in TargetSystemGroup}


__all__ = ["Translator", "filter_group", "partition_by_group"]

"""Synthesis of dual-coded Condition bundles with paired audit records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional, Sequence

from .exceptions import InvalidSelection, SelectionViolation
from .models import DEFAULT_TAG_SYSTEM, CatalogEntry, ContextIds, TargetCandidate, VocabularyVersions
from .resources import (
    CONSENT_PLACEHOLDER,
    AuditAction,
    AuditOutcome,
    AuditRecord,
    CompositeOutput,
    ConditionResource,
    SecurityLabel,
)
from .selection import Selection
from .telemetry import TerminologyTelemetry

DEFAULT_OBSERVER_LABEL = "Terminology Microservice (proto)"
TRANSLATE_ENTITY = "ConceptMap/$translate NAMASTE→ICD11"
DUAL_CODED_SUFFIX = "(dual-coded)"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def validate_selection(
    source_entry: Optional[CatalogEntry],
    chosen_targets: Iterable[TargetCandidate],
) -> None:
    """Raise :class:`InvalidSelection` when a selection cannot be synthesized."""

    if source_entry is None:
        raise InvalidSelection(SelectionViolation.MISSING_SOURCE)
    seen = set()
    for candidate in chosen_targets:
        if candidate.group in seen:
            raise InvalidSelection(SelectionViolation.DUPLICATE_GROUP, group=candidate.group.value)
        seen.add(candidate.group)


@dataclass(slots=True)
class ResourceSynthesizer:
    """Builds the Condition, AuditEvent and Bundle for a selection.

    Output content depends only on the inputs, the configured versions and
    the clock, which is read exactly once per call.
    """

    versions: VocabularyVersions = field(default_factory=VocabularyVersions)
    tag_system: str = DEFAULT_TAG_SYSTEM
    observer_label: str = DEFAULT_OBSERVER_LABEL
    clock: Clock = utc_now
    security: Sequence[SecurityLabel] = (CONSENT_PLACEHOLDER,)
    telemetry: TerminologyTelemetry = field(default_factory=TerminologyTelemetry)

    def synthesize(
        self,
        source_entry: Optional[CatalogEntry],
        chosen_targets: Sequence[TargetCandidate],
        context: ContextIds,
    ) -> CompositeOutput:
        chosen = tuple(chosen_targets)
        try:
            validate_selection(source_entry, chosen)
        except InvalidSelection as exc:
            self.telemetry.record_invalid_selection(exc.reason.value, exc.group)
            raise

        recorded_at = self.clock()
        version_tags = self.versions.tags(self.tag_system)
        condition = ConditionResource(
            source_coding=source_entry.coding(),
            target_codings=tuple(candidate.coding() for candidate in chosen),
            context=context,
            recorded_at=recorded_at,
            version_tags=version_tags,
            text=f"{source_entry.display} {DUAL_CODED_SUFFIX}",
        )
        audit = AuditRecord(
            action=AuditAction.CREATE,
            outcome=AuditOutcome.SUCCESS,
            recorded_at=recorded_at,
            observer_label=self.observer_label,
            described_entity=TRANSLATE_ENTITY,
            version=self.versions.target_version,
        )
        output = CompositeOutput(
            condition=condition,
            audit=audit,
            container_tags=version_tags,
            security=tuple(self.security),
        )
        self.telemetry.record_synthesis(source_entry.code, len(condition.codings), recorded_at.isoformat())
        return output

    def synthesize_selection(self, selection: Selection, context: ContextIds) -> CompositeOutput:
        return self.synthesize(selection.source, selection.chosen_targets, context)


__all__ = [
    "DEFAULT_OBSERVER_LABEL",
    "ResourceSynthesizer",
    "TRANSLATE_ENTITY",
    "utc_now",
    "validate_selection",
]

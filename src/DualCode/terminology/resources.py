"""FHIR R4 shaped resources produced by dual coding."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Sequence

from .models import Coding, ContextIds, VersionTag

CONDITION_CLINICAL_SYSTEM = "http://terminology.hl7.org/CodeSystem/condition-clinical"
CONDITION_CATEGORY_SYSTEM = "http://terminology.hl7.org/CodeSystem/condition-category"
AUDIT_EVENT_TYPE_SYSTEM = "http://terminology.hl7.org/CodeSystem/audit-event-type"
ACT_REASON_SYSTEM = "http://terminology.hl7.org/CodeSystem/v3-ActReason"
ABDM_BUNDLE_PROFILE = "https://abdm.gov.in/fhir/r4/StructureDefinition/Bundle"


class AuditAction(str, Enum):
    """AuditEvent action codes."""

    CREATE = "C"
    EXECUTE = "E"


class AuditOutcome(str, Enum):
    """AuditEvent outcome codes. ``MINOR_FAILURE`` is reserved."""

    SUCCESS = "0"
    MINOR_FAILURE = "4"


@dataclass(frozen=True, slots=True)
class SecurityLabel:
    """A security label attached to the container, e.g. a consent marker."""

    system: str
    code: str
    display: str

    def to_dict(self) -> Dict[str, str]:
        return {"system": self.system, "code": self.code, "display": self.display}


CONSENT_PLACEHOLDER = SecurityLabel(system=ACT_REASON_SYSTEM, code="ETH", display="with patient consent")


def _timestamp(value: datetime) -> str:
    return value.isoformat()


@dataclass(frozen=True, slots=True)
class ConditionResource:
    """Problem-list Condition carrying the source coding and chosen targets."""

    source_coding: Coding
    target_codings: Sequence[Coding]
    context: ContextIds
    recorded_at: datetime
    version_tags: Sequence[VersionTag]
    text: str

    @property
    def codings(self) -> tuple[Coding, ...]:
        return (self.source_coding, *self.target_codings)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resourceType": "Condition",
            "clinicalStatus": {"coding": [{"system": CONDITION_CLINICAL_SYSTEM, "code": "active"}]},
            "category": [{"coding": [{"system": CONDITION_CATEGORY_SYSTEM, "code": "problem-list-item"}]}],
            "code": {"coding": [coding.to_dict() for coding in self.codings], "text": self.text},
            "subject": {"reference": f"Patient/{self.context.subject_id}"},
            "encounter": {"reference": f"Encounter/{self.context.encounter_id}"},
            "recordedDate": _timestamp(self.recorded_at),
            "meta": {"tag": [tag.to_dict() for tag in self.version_tags]},
        }


@dataclass(frozen=True, slots=True)
class AuditRecord:
    """AuditEvent paired with every synthesized Condition."""

    action: AuditAction
    outcome: AuditOutcome
    recorded_at: datetime
    observer_label: str
    described_entity: str
    version: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resourceType": "AuditEvent",
            "type": {"system": AUDIT_EVENT_TYPE_SYSTEM, "code": "rest"},
            "action": self.action.value,
            "recorded": _timestamp(self.recorded_at),
            "outcome": self.outcome.value,
            "source": {"observer": {"display": self.observer_label}},
            "entity": [
                {
                    "what": {"display": self.described_entity},
                    "detail": [{"type": "version", "valueString": self.version}],
                }
            ],
        }


@dataclass(frozen=True, slots=True)
class CompositeOutput:
    """Collection Bundle holding the Condition followed by its AuditEvent."""

    condition: ConditionResource
    audit: AuditRecord
    container_tags: Sequence[VersionTag]
    security: Sequence[SecurityLabel] = field(default_factory=lambda: (CONSENT_PLACEHOLDER,))
    profiles: Sequence[str] = (ABDM_BUNDLE_PROFILE,)

    @property
    def resources(self) -> tuple[ConditionResource, AuditRecord]:
        return (self.condition, self.audit)

    def to_dict(self) -> Dict[str, Any]:
        entries: List[Dict[str, Any]] = [{"resource": resource.to_dict()} for resource in self.resources]
        return {
            "resourceType": "Bundle",
            "type": "collection",
            "meta": {
                "profile": list(self.profiles),
                "tag": [tag.to_dict() for tag in self.container_tags],
                "security": [label.to_dict() for label in self.security],
            },
            "entry": entries,
        }


__all__ = [
    "ABDM_BUNDLE_PROFILE",
    "AuditAction",
    "AuditOutcome",
    "AuditRecord",
    "CONSENT_PLACEHOLDER",
    "CompositeOutput",
    "ConditionResource",
    "SecurityLabel",
]

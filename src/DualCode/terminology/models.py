"""Core data models for catalog lookup, translation and dual coding."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping, Optional, Sequence

from .exceptions import UnknownEquivalenceError, UnknownTargetGroupError

ICD11_MMS_SYSTEM = "http://id.who.int/icd/release/11/mms"
NAMASTE_SYSTEM = "https://example.org/fhir/CodeSystem/namaste"
DEFAULT_TAG_SYSTEM = "https://example.org/fhir/tags"


class Equivalence(str, Enum):
    """Closed set of concept map equivalence classifications."""

    EQUIVALENT = "equivalent"
    EQUAL = "equal"
    WIDER = "wider"
    NARROWER = "narrower"
    INEXACT = "inexact"
    UNMATCHED = "unmatched"
    RELATED = "related"

    @classmethod
    def parse(cls, value: "Equivalence | str") -> "Equivalence":
        """Resolve a raw equivalence value, accepting FHIR R4 aliases."""

        if isinstance(value, cls):
            return value
        token = str(value).strip().lower()
        token = _EQUIVALENCE_ALIASES.get(token, token)
        try:
            return cls(token)
        except ValueError as exc:
            raise UnknownEquivalenceError(f"Unknown equivalence '{value}'") from exc


_EQUIVALENCE_ALIASES = {
    "broader": "wider",
    "subsumes": "wider",
    "specializes": "narrower",
    "relatedto": "related",
    "disjoint": "unmatched",
}


class TargetSystemGroup(str, Enum):
    """Target vocabulary groupings offered for dual coding."""

    PATTERN_BASED = "pattern-based"
    BIOMEDICAL = "biomedical"

    @property
    def wire_tag(self) -> str:
        return _GROUP_WIRE_TAGS[self]

    @property
    def label(self) -> str:
        return "ICD-11 TM2" if self is TargetSystemGroup.PATTERN_BASED else "ICD-11 Biomed"

    @classmethod
    def parse(cls, value: "TargetSystemGroup | str") -> "TargetSystemGroup":
        """Resolve a group from its value or its concept map tag."""

        if isinstance(value, cls):
            return value
        token = str(value).strip()
        for group in cls:
            if token.lower() == group.value or token.upper() == group.wire_tag:
                return group
        raise UnknownTargetGroupError(f"Unknown target system group '{value}'")


_GROUP_WIRE_TAGS = {
    TargetSystemGroup.PATTERN_BASED: "ICD11-TM2",
    TargetSystemGroup.BIOMEDICAL: "ICD11-BIOMED",
}


@dataclass(frozen=True, slots=True)
class Coding:
    """A (system, code, display) triple as carried in a CodeableConcept."""

    system: str
    code: str
    display: str

    def to_dict(self) -> dict[str, str]:
        return {"system": self.system, "code": self.code, "display": self.display}


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    """Represents a source vocabulary entry with its alternate designations."""

    code: str
    display: str
    designations: Sequence[str] = field(default_factory=tuple)
    system: str = NAMASTE_SYSTEM

    def __post_init__(self) -> None:
        object.__setattr__(self, "designations", ensure_iterable(self.designations))

    def coding(self) -> Coding:
        return Coding(system=self.system, code=self.code, display=self.display)

    def labels(self) -> tuple[str, ...]:
        """Return the display followed by every designation."""

        return (self.display, *self.designations)


@dataclass(frozen=True, slots=True)
class TargetCandidate:
    """A concept map target annotated with its equivalence classification."""

    group: TargetSystemGroup
    code: str
    display: str
    equivalence: Equivalence
    system: str = ICD11_MMS_SYSTEM

    def __post_init__(self) -> None:
        object.__setattr__(self, "group", TargetSystemGroup.parse(self.group))
        object.__setattr__(self, "equivalence", Equivalence.parse(self.equivalence))

    @property
    def is_usable(self) -> bool:
        """False for explicit negative results kept for provenance."""

        return self.equivalence is not Equivalence.UNMATCHED

    def coding(self) -> Coding:
        return Coding(system=self.system, code=self.code, display=self.display)

    def to_dict(self) -> dict[str, str]:
        return {
            "group": self.group.value,
            "system": self.system,
            "code": self.code,
            "display": self.display,
            "equivalence": self.equivalence.value,
        }


@dataclass(frozen=True, slots=True)
class ConceptMapEntry:
    """Ordered target candidates declared for one source code."""

    source_code: str
    targets: Sequence[TargetCandidate] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "targets", tuple(self.targets))


@dataclass(frozen=True, slots=True)
class ContextIds:
    """Subject and encounter identifiers the resource is recorded against."""

    subject_id: str
    encounter_id: str

    def __post_init__(self) -> None:
        if not self.subject_id or not self.subject_id.strip():
            raise ValueError("subject_id must not be blank")
        if not self.encounter_id or not self.encounter_id.strip():
            raise ValueError("encounter_id must not be blank")


@dataclass(frozen=True, slots=True)
class VersionTag:
    """A (system, code) pair stamped into resource metadata."""

    system: str
    code: str

    def to_dict(self) -> dict[str, str]:
        return {"system": self.system, "code": self.code}


@dataclass(frozen=True, slots=True)
class VocabularyVersions:
    """Releases of the catalog and target vocabulary loaded at startup."""

    catalog_version: str = "2025-08-20"
    target_version: str = "2025-01"
    service_version: str = "0.1.0-proto"

    def tags(self, tag_system: str = DEFAULT_TAG_SYSTEM) -> tuple[VersionTag, ...]:
        return (
            VersionTag(system=tag_system, code=f"icd11-mms-{self.target_version}"),
            VersionTag(system=tag_system, code=f"namaste-csv-{self.catalog_version}"),
        )

    def to_dict(self) -> Mapping[str, str]:
        return {
            "catalog_version": self.catalog_version,
            "target_version": self.target_version,
            "service_version": self.service_version,
        }


def ensure_iterable(value: Optional[Iterable[str]]) -> tuple[str, ...]:
    """Return an immutable sequence from the provided iterable."""

    if value is None:
        return tuple()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, tuple):
        return value
    return tuple(value)


__all__ = [
    "CatalogEntry",
    "Coding",
    "ConceptMapEntry",
    "ContextIds",
    "DEFAULT_TAG_SYSTEM",
    "Equivalence",
    "ICD11_MMS_SYSTEM",
    "NAMASTE_SYSTEM",
    "TargetCandidate",
    "TargetSystemGroup",
    "VersionTag",
    "VocabularyVersions",
    "ensure_iterable",
]

"""Public API for the terminology module."""

from .catalog import CodeCatalog, load_catalog
from .concept_map import ConceptMapIndex, check_consistency, load_concept_map
from .config import TerminologyEngine, TerminologySettings, build_engine, load_settings
from .defaults import default_catalog, default_concept_map
from .exceptions import (
    InvalidSelection,
    SelectionViolation,
    TerminologyError,
    UnknownEquivalenceError,
    UnknownSourceCodeError,
    UnknownTargetGroupError,
)
from .matcher import Matcher, Suggestion
from .models import (
    CatalogEntry,
    Coding,
    ConceptMapEntry,
    ContextIds,
    Equivalence,
    TargetCandidate,
    TargetSystemGroup,
    VersionTag,
    VocabularyVersions,
)
from .normalization import NormalizedText, TextNormalizer
from .resources import AuditAction, AuditOutcome, AuditRecord, CompositeOutput, ConditionResource, SecurityLabel
from .selection import Selection
from .synthesizer import ResourceSynthesizer
from .telemetry import TerminologyTelemetry
from .translator import Translator, partition_by_group

__all__ = [
    "AuditAction",
    "AuditOutcome",
    "AuditRecord",
    "CatalogEntry",
    "CodeCatalog",
    "Coding",
    "CompositeOutput",
    "ConceptMapEntry",
    "ConceptMapIndex",
    "ConditionResource",
    "ContextIds",
    "Equivalence",
    "InvalidSelection",
    "Matcher",
    "NormalizedText",
    "ResourceSynthesizer",
    "SecurityLabel",
    "Selection",
    "SelectionViolation",
    "Suggestion",
    "TargetCandidate",
    "TargetSystemGroup",
    "TerminologyEngine",
    "TerminologyError",
    "TerminologySettings",
    "TerminologyTelemetry",
    "TextNormalizer",
    "Translator",
    "UnknownEquivalenceError",
    "UnknownSourceCodeError",
    "UnknownTargetGroupError",
    "VersionTag",
    "VocabularyVersions",
    "build_engine",
    "check_consistency",
    "default_catalog",
    "default_concept_map",
    "load_catalog",
    "load_concept_map",
    "load_settings",
    "partition_by_group",
]

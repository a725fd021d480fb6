"""Configuration loading and engine wiring for terminology components."""

from __future__ import annotations

import json
import os
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .catalog import CodeCatalog, load_catalog
from .concept_map import ConceptMapIndex, check_consistency, load_concept_map
from .defaults import default_catalog, default_concept_map
from .matcher import MAX_RESULTS, Matcher
from .models import DEFAULT_TAG_SYSTEM, VocabularyVersions
from .normalization import TextNormalizer
from .synthesizer import DEFAULT_OBSERVER_LABEL, ResourceSynthesizer
from .telemetry import TerminologyTelemetry
from .translator import Translator

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "dualcode" / "terminology.toml"


def _expand(path: Optional[str | Path], base: Optional[Path]) -> Optional[Path]:
    if path is None:
        return None
    candidate = Path(path).expanduser()
    if not candidate.is_absolute() and base is not None:
        candidate = (base / candidate).resolve()
    return candidate


@dataclass(frozen=True)
class TerminologySettings:
    """Process-wide settings resolved once at startup."""

    versions: VocabularyVersions = field(default_factory=VocabularyVersions)
    tag_system: str = DEFAULT_TAG_SYSTEM
    observer_label: str = DEFAULT_OBSERVER_LABEL
    search_limit: int = MAX_RESULTS
    suggest_cutoff: float = 80.0
    catalog_path: Optional[Path] = None
    concept_map_path: Optional[Path] = None
    config_path: Optional[Path] = None

    def __post_init__(self) -> None:
        if not 1 <= self.search_limit <= MAX_RESULTS:
            raise ValueError(f"search_limit must be between 1 and {MAX_RESULTS}")
        if not 0.0 <= self.suggest_cutoff <= 100.0:
            raise ValueError("suggest_cutoff must be between 0 and 100")


def _load_file_settings(path: Path) -> TerminologySettings:
    suffix = path.suffix.lower()
    content = path.read_bytes()
    data: Dict[str, Any]
    if suffix == ".json":
        data = json.loads(content)
    elif suffix in {".toml", ".tml"}:
        data = tomllib.loads(content.decode("utf-8"))
    else:
        raise ValueError(f"Unsupported config format: {path.suffix}")

    base_dir = path.parent
    versions_data = data.get("versions") or {}
    defaults = VocabularyVersions()
    versions = VocabularyVersions(
        catalog_version=str(versions_data.get("catalog", defaults.catalog_version)),
        target_version=str(versions_data.get("target", defaults.target_version)),
        service_version=str(versions_data.get("service", defaults.service_version)),
    )
    search = data.get("search") or {}
    sources = data.get("sources") or {}
    return TerminologySettings(
        versions=versions,
        tag_system=data.get("tag_system", DEFAULT_TAG_SYSTEM),
        observer_label=data.get("observer_label", DEFAULT_OBSERVER_LABEL),
        search_limit=int(search.get("limit", MAX_RESULTS)),
        suggest_cutoff=float(search.get("suggest_cutoff", 80.0)),
        catalog_path=_expand(sources.get("catalog"), base_dir),
        concept_map_path=_expand(sources.get("concept_map"), base_dir),
        config_path=path,
    )


def _apply_env_overrides(settings: TerminologySettings, env: Mapping[str, str]) -> TerminologySettings:
    versions = settings.versions
    if env.get("DC_CATALOG_VERSION"):
        versions = replace(versions, catalog_version=env["DC_CATALOG_VERSION"])
    if env.get("DC_TARGET_VERSION"):
        versions = replace(versions, target_version=env["DC_TARGET_VERSION"])
    if env.get("DC_SERVICE_VERSION"):
        versions = replace(versions, service_version=env["DC_SERVICE_VERSION"])

    updated = replace(settings, versions=versions)
    if env.get("DC_SEARCH_LIMIT"):
        updated = replace(updated, search_limit=int(env["DC_SEARCH_LIMIT"]))
    if env.get("DC_SUGGEST_CUTOFF"):
        updated = replace(updated, suggest_cutoff=float(env["DC_SUGGEST_CUTOFF"]))
    if env.get("DC_OBSERVER_LABEL"):
        updated = replace(updated, observer_label=env["DC_OBSERVER_LABEL"])
    if env.get("DC_CATALOG_PATH"):
        updated = replace(updated, catalog_path=_expand(env["DC_CATALOG_PATH"], None))
    if env.get("DC_CONCEPT_MAP_PATH"):
        updated = replace(updated, concept_map_path=_expand(env["DC_CONCEPT_MAP_PATH"], None))
    return updated


_VERSION_OVERRIDES = ("catalog_version", "target_version", "service_version")


def _apply_overrides(settings: TerminologySettings, overrides: Mapping[str, Any]) -> TerminologySettings:
    version_updates = {
        key: str(overrides[key]) for key in _VERSION_OVERRIDES if overrides.get(key)
    }
    updated = settings
    if version_updates:
        updated = replace(updated, versions=replace(updated.versions, **version_updates))
    if overrides.get("search_limit") is not None:
        updated = replace(updated, search_limit=int(overrides["search_limit"]))
    if overrides.get("suggest_cutoff") is not None:
        updated = replace(updated, suggest_cutoff=float(overrides["suggest_cutoff"]))
    if overrides.get("observer_label"):
        updated = replace(updated, observer_label=overrides["observer_label"])
    if overrides.get("catalog_path"):
        updated = replace(updated, catalog_path=_expand(overrides["catalog_path"], None))
    if overrides.get("concept_map_path"):
        updated = replace(updated, concept_map_path=_expand(overrides["concept_map_path"], None))
    return updated


def load_settings(
    config_path: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> TerminologySettings:
    """Resolve settings from file, then environment, then explicit overrides."""

    env = os.environ if env is None else env
    overrides = dict(overrides or {})

    path = config_path
    if path is None and env.get("DC_CONFIG"):
        path = Path(env["DC_CONFIG"])
    if path is not None:
        path = path.expanduser()
    elif DEFAULT_CONFIG_PATH.exists():
        path = DEFAULT_CONFIG_PATH

    if path is None:
        settings = TerminologySettings()
    elif path.exists():
        settings = _load_file_settings(path)
    else:
        raise FileNotFoundError(f"Config file not found: {path}")

    settings = _apply_env_overrides(settings, env)
    return _apply_overrides(settings, overrides)


@dataclass(frozen=True)
class TerminologyEngine:
    """Catalog, index and components wired together once at startup."""

    settings: TerminologySettings
    catalog: CodeCatalog
    concept_map: ConceptMapIndex
    matcher: Matcher
    translator: Translator
    synthesizer: ResourceSynthesizer


def build_engine(
    settings: Optional[TerminologySettings] = None,
    *,
    catalog: Optional[CodeCatalog] = None,
    concept_map: Optional[ConceptMapIndex] = None,
    telemetry: Optional[TerminologyTelemetry] = None,
    synthesizer: Optional[ResourceSynthesizer] = None,
) -> TerminologyEngine:
    """Load the vocabularies named by ``settings`` and build the components."""

    settings = settings or TerminologySettings()
    telemetry = telemetry or TerminologyTelemetry()
    versions = settings.versions
    if catalog is None:
        if settings.catalog_path is not None:
            catalog = load_catalog(settings.catalog_path, version=versions.catalog_version)
        else:
            catalog = default_catalog(versions.catalog_version)
    if concept_map is None:
        if settings.concept_map_path is not None:
            concept_map = load_concept_map(settings.concept_map_path, version=versions.target_version)
        else:
            concept_map = default_concept_map(versions.target_version)
    check_consistency(concept_map, catalog)

    matcher = Matcher(
        catalog,
        normalizer=TextNormalizer(),
        limit=settings.search_limit,
        suggest_cutoff=settings.suggest_cutoff,
        telemetry=telemetry,
    )
    translator = Translator(concept_map, telemetry=telemetry)
    if synthesizer is None:
        synthesizer = ResourceSynthesizer(
            versions=versions,
            tag_system=settings.tag_system,
            observer_label=settings.observer_label,
            telemetry=telemetry,
        )
    return TerminologyEngine(
        settings=settings,
        catalog=catalog,
        concept_map=concept_map,
        matcher=matcher,
        translator=translator,
        synthesizer=synthesizer,
    )


__all__ = [
    "TerminologyEngine",
    "TerminologySettings",
    "build_engine",
    "load_settings",
]

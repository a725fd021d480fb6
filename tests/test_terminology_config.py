"""Tests for settings resolution and engine wiring."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from DualCode.terminology import TerminologySettings, build_engine, load_settings

CONFIG_TEXT = """
observer_label = "District hospital gateway"

[versions]
catalog = "2026-01-15"
target = "2026-01"

[search]
limit = 5
suggest_cutoff = 70

[sources]
catalog = "data/catalog.json"
concept_map = "data/map.json"
"""


def write_sources(tmp_path: Path) -> None:
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "catalog.json").write_text(
        json.dumps(
            [
                {"code": "UN-0001", "display": "Nazla", "designations": ["Coryza"]},
                {"code": "UN-0002", "display": "Waja-ul-Mafasil", "designations": ["Joint pain"]},
            ]
        ),
        encoding="utf-8",
    )
    (data_dir / "map.json").write_text(
        json.dumps(
            {
                "version": "ignored",
                "groups": [
                    {
                        "source": "UN-0001",
                        "targets": [
                            {
                                "system": "ICD11-BIOMED",
                                "code": "CA00",
                                "display": "Acute nasopharyngitis",
                                "equivalence": "related",
                            }
                        ],
                    }
                ],
            }
        ),
        encoding="utf-8",
    )


def write_config(tmp_path: Path, text: str = CONFIG_TEXT, name: str = "terminology.toml") -> Path:
    config_path = tmp_path / name
    config_path.write_text(text, encoding="utf-8")
    return config_path


def test_defaults_without_config() -> None:
    settings = load_settings(env={})
    assert settings.versions.catalog_version == "2025-08-20"
    assert settings.versions.target_version == "2025-01"
    assert settings.versions.service_version == "0.1.0-proto"
    assert settings.search_limit == 20


def test_file_then_env_then_overrides(tmp_path: Path) -> None:
    config_path = write_config(tmp_path)

    from_file = load_settings(config_path, env={})
    assert from_file.versions.catalog_version == "2026-01-15"
    assert from_file.versions.service_version == "0.1.0-proto"
    assert from_file.search_limit == 5
    assert from_file.suggest_cutoff == 70.0
    assert from_file.observer_label == "District hospital gateway"
    assert from_file.catalog_path == (tmp_path / "data" / "catalog.json").resolve()

    env = {"DC_SEARCH_LIMIT": "7", "DC_TARGET_VERSION": "2026-02"}
    from_env = load_settings(config_path, env=env)
    assert from_env.search_limit == 7
    assert from_env.versions.target_version == "2026-02"

    overridden = load_settings(config_path, env=env, overrides={"search_limit": 3, "target_version": "2026-03"})
    assert overridden.search_limit == 3
    assert overridden.versions.target_version == "2026-03"
    assert overridden.versions.catalog_version == "2026-01-15"


def test_config_path_from_environment(tmp_path: Path) -> None:
    config_path = write_config(tmp_path, '{"versions": {"catalog": "2026-04-01"}}', name="terminology.json")
    settings = load_settings(env={"DC_CONFIG": str(config_path)})
    assert settings.versions.catalog_version == "2026-04-01"
    assert settings.config_path == config_path


def test_missing_explicit_config_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "absent.toml", env={})


def test_unsupported_config_format(tmp_path: Path) -> None:
    config_path = write_config(tmp_path, "limit: 5", name="terminology.yaml")
    with pytest.raises(ValueError):
        load_settings(config_path, env={})


def test_search_limit_is_bounded() -> None:
    with pytest.raises(ValueError):
        TerminologySettings(search_limit=0)
    with pytest.raises(ValueError):
        TerminologySettings(search_limit=21)
    with pytest.raises(ValueError):
        load_settings(env={"DC_SEARCH_LIMIT": "50"})


def test_build_engine_from_configured_sources(tmp_path: Path) -> None:
    write_sources(tmp_path)
    engine = build_engine(load_settings(write_config(tmp_path), env={}))

    assert len(engine.catalog) == 2
    assert engine.catalog.version == "2026-01-15"
    assert engine.concept_map.version == "2026-01"
    assert [entry.code for entry in engine.matcher.search("joint")] == ["UN-0002"]
    assert [candidate.code for candidate in engine.translator.translate("UN-0001")] == ["CA00"]
    assert engine.synthesizer.observer_label == "District hospital gateway"


def test_build_engine_defaults() -> None:
    engine = build_engine()
    assert "ASU-1001" in engine.catalog
    assert engine.translator.is_mapped("ASU-1022")


def test_missing_config_from_environment_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_settings(env={"DC_CONFIG": str(tmp_path / "absent.toml")})


def test_zero_search_limit_override_is_rejected() -> None:
    with pytest.raises(ValueError):
        load_settings(env={}, overrides={"search_limit": 0})

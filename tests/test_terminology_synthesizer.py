"""Tests for dual-coded bundle synthesis."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

from DualCode.terminology import (
    AuditOutcome,
    CatalogEntry,
    ContextIds,
    InvalidSelection,
    ResourceSynthesizer,
    Selection,
    SelectionViolation,
    TargetCandidate,
    TargetSystemGroup,
    Translator,
    VocabularyVersions,
)

CONTEXT = ContextIds(subject_id="123", encounter_id="enc-001")
PRAMEHA = CatalogEntry(code="ASU-1022", display="Prameha", system="S1")
DIABETES = TargetCandidate(
    group=TargetSystemGroup.BIOMEDICAL,
    system="T1",
    code="5A11",
    display="Type 2 diabetes mellitus",
    equivalence="related",
)


def test_condition_carries_source_then_target(synthesizer: ResourceSynthesizer) -> None:
    bundle = synthesizer.synthesize(PRAMEHA, [DIABETES], CONTEXT).to_dict()

    condition = bundle["entry"][0]["resource"]
    audit = bundle["entry"][1]["resource"]
    assert condition["resourceType"] == "Condition"
    assert condition["code"]["coding"] == [
        {"system": "S1", "code": "ASU-1022", "display": "Prameha"},
        {"system": "T1", "code": "5A11", "display": "Type 2 diabetes mellitus"},
    ]
    assert condition["code"]["text"] == "Prameha (dual-coded)"
    assert condition["subject"] == {"reference": "Patient/123"}
    assert condition["encounter"] == {"reference": "Encounter/enc-001"}
    assert condition["clinicalStatus"]["coding"][0]["code"] == "active"
    assert condition["category"][0]["coding"][0]["code"] == "problem-list-item"
    assert audit["resourceType"] == "AuditEvent"
    assert audit["outcome"] == "0"
    assert audit["action"] == "C"


def test_bundle_shape_and_tags(synthesizer: ResourceSynthesizer) -> None:
    bundle = synthesizer.synthesize(PRAMEHA, [DIABETES], CONTEXT).to_dict()

    assert bundle["resourceType"] == "Bundle"
    assert bundle["type"] == "collection"
    assert [tag["code"] for tag in bundle["meta"]["tag"]] == ["icd11-mms-2025-01", "namaste-csv-2025-08-20"]
    assert bundle["meta"]["security"][0]["code"] == "ETH"
    condition = bundle["entry"][0]["resource"]
    assert condition["meta"]["tag"] == bundle["meta"]["tag"]
    assert condition["recordedDate"] == "2025-09-01T10:30:00+00:00"
    assert bundle["entry"][1]["resource"]["recorded"] == condition["recordedDate"]


def test_zero_targets_yields_source_only(synthesizer: ResourceSynthesizer) -> None:
    output = synthesizer.synthesize(PRAMEHA, [], CONTEXT)
    assert [coding.code for coding in output.condition.codings] == ["ASU-1022"]
    assert output.audit.outcome is AuditOutcome.SUCCESS


def test_missing_source_is_rejected(synthesizer: ResourceSynthesizer) -> None:
    with pytest.raises(InvalidSelection) as excinfo:
        synthesizer.synthesize(None, [DIABETES], CONTEXT)
    assert excinfo.value.reason is SelectionViolation.MISSING_SOURCE
    assert "source" in str(excinfo.value)


def test_duplicate_group_is_rejected(synthesizer: ResourceSynthesizer, translator: Translator) -> None:
    biomed = translator.translate("ASU-1001", group="biomedical")
    source = CatalogEntry(code="ASU-1001", display="Āmavāta")
    with pytest.raises(InvalidSelection) as excinfo:
        synthesizer.synthesize(source, biomed, CONTEXT)
    assert excinfo.value.reason is SelectionViolation.DUPLICATE_GROUP
    assert excinfo.value.group == "biomedical"


def test_caller_order_is_preserved(synthesizer: ResourceSynthesizer, translator: Translator) -> None:
    tm2, biomed = translator.translate("ASU-1022")
    source = CatalogEntry(code="ASU-1022", display="Prameha")
    forward = synthesizer.synthesize(source, [tm2, biomed], CONTEXT)
    reverse = synthesizer.synthesize(source, [biomed, tm2], CONTEXT)
    assert [c.code for c in forward.condition.codings] == ["ASU-1022", "TM2-QP1A", "5A11"]
    assert [c.code for c in reverse.condition.codings] == ["ASU-1022", "5A11", "TM2-QP1A"]


def test_repeat_calls_differ_only_in_timestamp() -> None:
    ticks = count()
    start = datetime(2025, 1, 1, tzinfo=timezone.utc)
    synthesizer = ResourceSynthesizer(clock=lambda: start + timedelta(seconds=next(ticks)))

    first = synthesizer.synthesize(PRAMEHA, [DIABETES], CONTEXT).to_dict()
    second = synthesizer.synthesize(PRAMEHA, [DIABETES], CONTEXT).to_dict()

    first_condition = first["entry"][0]["resource"]
    second_condition = second["entry"][0]["resource"]
    assert first_condition["code"] == second_condition["code"]
    assert first_condition["recordedDate"] != second_condition["recordedDate"]
    first_condition.pop("recordedDate")
    second_condition.pop("recordedDate")
    assert first_condition == second_condition


def test_versions_come_from_configuration() -> None:
    synthesizer = ResourceSynthesizer(
        versions=VocabularyVersions(catalog_version="2026-02-01", target_version="2026-01"),
        observer_label="Clinic gateway",
    )
    output = synthesizer.synthesize(PRAMEHA, [], CONTEXT).to_dict()
    assert [tag["code"] for tag in output["meta"]["tag"]] == ["icd11-mms-2026-01", "namaste-csv-2026-02-01"]
    audit = output["entry"][1]["resource"]
    assert audit["source"]["observer"]["display"] == "Clinic gateway"
    assert audit["entity"][0]["detail"][0]["valueString"] == "2026-01"


def test_synthesize_selection(synthesizer: ResourceSynthesizer, translator: Translator) -> None:
    selection = Selection()
    selection.select_source(CatalogEntry(code="ASU-1022", display="Prameha"))
    for candidate in translator.translate("ASU-1022"):
        selection.choose(candidate)
    output = synthesizer.synthesize_selection(selection, CONTEXT)
    assert len(output.condition.codings) == 3
    assert output.resources == (output.condition, output.audit)

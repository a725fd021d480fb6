from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402

from DualCode.terminology import (  # noqa: E402
    CodeCatalog,
    ConceptMapIndex,
    Matcher,
    ResourceSynthesizer,
    TerminologyTelemetry,
    Translator,
    VocabularyVersions,
    default_catalog,
    default_concept_map,
)

FIXED_TIME = datetime(2025, 9, 1, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def catalog() -> CodeCatalog:
    return default_catalog("2025-08-20")


@pytest.fixture
def concept_map() -> ConceptMapIndex:
    return default_concept_map("2025-01")


@pytest.fixture
def matcher(catalog: CodeCatalog) -> Matcher:
    return Matcher(catalog)


@pytest.fixture
def translator(concept_map: ConceptMapIndex) -> Translator:
    return Translator(concept_map)


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_TIME


@pytest.fixture
def synthesizer(fixed_clock: Callable[[], datetime]) -> ResourceSynthesizer:
    return ResourceSynthesizer(versions=VocabularyVersions(), clock=fixed_clock, telemetry=TerminologyTelemetry())


@pytest.fixture(autouse=True)
def _reset_package_logging():
    yield
    package_logger = logging.getLogger("DualCode")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)

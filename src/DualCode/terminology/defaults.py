"""Bundled demonstration vocabularies.

Codes are illustrative only. They stand in for the NAMASTE CodeSystem and
the ICD-11 TM2/Biomed ConceptMap until remote catalog and translation
services are wired in.
"""

from __future__ import annotations

from typing import Optional

from .catalog import CodeCatalog
from .concept_map import ConceptMapIndex
from .models import NAMASTE_SYSTEM

NAMASTE_RECORDS = (
    {
        "code": "ASU-1001",
        "display": "Āmavāta",
        "designations": ["Amavata", "आमवात", "Rheumatic disorder (Ayurveda)", "Ama-vata"],
        "system": NAMASTE_SYSTEM,
    },
    {
        "code": "ASU-1022",
        "display": "Prameha",
        "designations": ["प्रमेह", "Prameha (urinary disorders)", "Madhumeha context"],
        "system": NAMASTE_SYSTEM,
    },
    {
        "code": "SID-0310",
        "display": "Vatha Noi",
        "designations": ["Vatha Noi (Siddha)", " वात दोष विकार "],
        "system": NAMASTE_SYSTEM,
    },
)

CONCEPT_MAP_RECORDS = (
    {
        "source": "ASU-1001",
        "targets": [
            {"system": "ICD11-TM2", "code": "TM2-SK6A", "display": "Wind pattern affecting joints", "equivalence": "narrower"},
            {"system": "ICD11-BIOMED", "code": "MG30.0", "display": "Rheumatoid arthritis, seropositive", "equivalence": "broader"},
            {
                "system": "ICD11-BIOMED",
                "code": "MB40.Z",
                "display": "Inflammatory polyarthropathy, unspecified",
                "equivalence": "unmatched",
            },
        ],
    },
    {
        "source": "ASU-1022",
        "targets": [
            {"system": "ICD11-TM2", "code": "TM2-QP1A", "display": "Urination disorder pattern", "equivalence": "equivalent"},
            {"system": "ICD11-BIOMED", "code": "5A11", "display": "Type 2 diabetes mellitus", "equivalence": "related"},
        ],
    },
    {
        "source": "SID-0310",
        "targets": [
            {"system": "ICD11-TM2", "code": "TM2-JA5Z", "display": "Accumulation pattern with dampness", "equivalence": "inexact"},
        ],
    },
)


def default_catalog(version: Optional[str] = None) -> CodeCatalog:
    return CodeCatalog.from_records(NAMASTE_RECORDS, version=version)


def default_concept_map(version: Optional[str] = None) -> ConceptMapIndex:
    return ConceptMapIndex.from_records(CONCEPT_MAP_RECORDS, version=version)


__all__ = [
    "CONCEPT_MAP_RECORDS",
    "NAMASTE_RECORDS",
    "default_catalog",
    "default_concept_map",
]

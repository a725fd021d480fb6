"""Pydantic schemas for the service layer."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from DualCode.terminology.models import TargetSystemGroup


class VersionsResponse(BaseModel):
    catalog_version: str
    target_version: str
    service_version: str


class HealthResponse(BaseModel):
    status: str
    versions: VersionsResponse
    catalog_size: int
    concept_map_size: int
    slow_requests: List[str] = Field(default_factory=list)


class CatalogEntryResponse(BaseModel):
    """A catalog entry as listed in a ValueSet expansion."""

    system: str
    code: str
    display: str
    designations: List[str] = Field(default_factory=list)


class SuggestionResponse(BaseModel):
    entry: CatalogEntryResponse
    score: float
    matched_label: str


class ExpansionResponse(BaseModel):
    filter: str
    total: int
    contains: List[CatalogEntryResponse]
    suggestions: List[SuggestionResponse] = Field(default_factory=list)


class TranslateRequest(BaseModel):
    code: str
    group: Optional[TargetSystemGroup] = None

    @field_validator("group", mode="before")
    @classmethod
    def _parse_group(cls, value: Any) -> Any:
        if value is None or isinstance(value, TargetSystemGroup):
            return value
        return TargetSystemGroup.parse(value)


class CandidateResponse(BaseModel):
    group: str
    system: str
    code: str
    display: str
    equivalence: str
    usable: bool


class TranslateResponse(BaseModel):
    code: str
    mapped: bool
    matches: List[CandidateResponse]


class TargetChoice(BaseModel):
    group: TargetSystemGroup
    code: str

    @field_validator("group", mode="before")
    @classmethod
    def _parse_group(cls, value: Any) -> Any:
        return TargetSystemGroup.parse(value)


class SynthesizeRequest(BaseModel):
    code: str
    targets: List[TargetChoice] = Field(default_factory=list)
    subject_id: str = Field(min_length=1)
    encounter_id: str = Field(min_length=1)


class SelectionErrorDetail(BaseModel):
    reason: str
    group: Optional[str] = None
    message: str


class ConsentAcknowledgement(BaseModel):
    acknowledged: bool
    security: List[Dict[str, str]]
    note: str

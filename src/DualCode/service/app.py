"""FastAPI application exposing catalog search, translation and dual coding."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, status

from DualCode.terminology.config import TerminologyEngine, TerminologySettings, build_engine
from DualCode.terminology.exceptions import InvalidSelection, UnknownSourceCodeError
from DualCode.terminology.matcher import MAX_RESULTS
from DualCode.terminology.models import CatalogEntry, ContextIds, TargetCandidate
from DualCode.terminology.resources import CONSENT_PLACEHOLDER

from .schemas import (
    CandidateResponse,
    CatalogEntryResponse,
    ConsentAcknowledgement,
    ExpansionResponse,
    HealthResponse,
    SelectionErrorDetail,
    SuggestionResponse,
    SynthesizeRequest,
    TranslateRequest,
    TranslateResponse,
    VersionsResponse,
)
from .telemetry import RequestTimingMiddleware, SlowRequestTracker

logger = logging.getLogger(__name__)


def _entry_to_response(entry: CatalogEntry) -> CatalogEntryResponse:
    return CatalogEntryResponse(
        system=entry.system,
        code=entry.code,
        display=entry.display,
        designations=list(entry.designations),
    )


def _candidate_to_response(candidate: TargetCandidate) -> CandidateResponse:
    return CandidateResponse(
        group=candidate.group.value,
        system=candidate.system,
        code=candidate.code,
        display=candidate.display,
        equivalence=candidate.equivalence.value,
        usable=candidate.is_usable,
    )


def _selection_error(exc: InvalidSelection) -> HTTPException:
    detail = SelectionErrorDetail(reason=exc.reason.value, group=exc.group, message=str(exc))
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail.model_dump())


def create_app(
    engine: Optional[TerminologyEngine] = None,
    *,
    settings: Optional[TerminologySettings] = None,
    slow_request_threshold_ms: float = 500.0,
) -> FastAPI:
    engine = engine or build_engine(settings)
    versions = engine.settings.versions
    app = FastAPI(title="DualCode Terminology Service", version=versions.service_version)
    slow_tracker = SlowRequestTracker()
    app.state.engine = engine
    app.state.slow_request_tracker = slow_tracker
    app.add_middleware(
        RequestTimingMiddleware,
        slow_request_threshold_ms=slow_request_threshold_ms,
        on_slow_request=slow_tracker.record,
    )

    @app.get("/healthz", response_model=HealthResponse)
    def health() -> HealthResponse:
        slow_requests = slow_tracker.snapshot()
        return HealthResponse(
            status="degraded" if slow_requests else "ok",
            versions=VersionsResponse(**versions.to_dict()),
            catalog_size=len(engine.catalog),
            concept_map_size=len(engine.concept_map),
            slow_requests=slow_requests,
        )

    @app.get("/ValueSet/$expand", response_model=ExpansionResponse)
    def expand(
        filter: str = Query("", description="Text to match against displays and designations."),
        limit: Optional[int] = Query(None, ge=1, le=MAX_RESULTS, description="Cap on returned matches."),
    ) -> ExpansionResponse:
        matches = engine.matcher.search(filter)[:limit]
        suggestions = []
        if not matches and filter.strip():
            suggestions = [
                SuggestionResponse(
                    entry=_entry_to_response(item.entry),
                    score=item.score,
                    matched_label=item.matched_label,
                )
                for item in engine.matcher.suggest(filter)[:limit]
            ]
        return ExpansionResponse(
            filter=filter,
            total=len(matches),
            contains=[_entry_to_response(entry) for entry in matches],
            suggestions=suggestions,
        )

    @app.post("/ConceptMap/$translate", response_model=TranslateResponse)
    def translate(payload: TranslateRequest) -> TranslateResponse:
        candidates = engine.translator.translate(payload.code, group=payload.group)
        return TranslateResponse(
            code=payload.code,
            mapped=engine.translator.is_mapped(payload.code),
            matches=[_candidate_to_response(candidate) for candidate in candidates],
        )

    @app.post("/Bundle/$synthesize")
    def synthesize(payload: SynthesizeRequest) -> dict:
        try:
            source = engine.catalog.get(payload.code)
        except UnknownSourceCodeError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

        chosen: list[TargetCandidate] = []
        for choice in payload.targets:
            candidate = engine.translator.find_candidate(payload.code, choice.group, choice.code)
            if candidate is None:
                raise HTTPException(
                    status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                    detail=f"No {choice.group.value} mapping '{choice.code}' for source '{payload.code}'",
                )
            chosen.append(candidate)

        try:
            context = ContextIds(subject_id=payload.subject_id, encounter_id=payload.encounter_id)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
        try:
            output = engine.synthesizer.synthesize(source, chosen, context)
        except InvalidSelection as exc:
            raise _selection_error(exc) from exc
        return output.to_dict()

    @app.post("/consent/$acknowledge", response_model=ConsentAcknowledgement)
    def acknowledge_consent() -> ConsentAcknowledgement:
        # Enforcement is delegated to the ABDM consent flow; this only echoes the label.
        logger.info("service.consent_acknowledged")
        return ConsentAcknowledgement(
            acknowledged=True,
            security=[CONSENT_PLACEHOLDER.to_dict()],
            note="Prototype uses implicit consent",
        )

    return app


__all__ = ["create_app"]

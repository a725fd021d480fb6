"""Telemetry hooks for terminology lookups and synthesis."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional


@dataclass(slots=True)
class TerminologyTelemetry:
    """Emits structured terminology events to the logging system."""

    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("DualCode.terminology"))

    def emit_event(self, name: str, payload: Mapping[str, object]) -> None:
        self.logger.info(name, extra={"payload": dict(payload)})

    def record_search(self, query: str, hits: int, *, limit: int) -> None:
        self.logger.debug(
            "terminology.search",
            extra={"payload": {"query": query, "hits": hits, "limit": limit, "no_matches": hits == 0}},
        )

    def record_suggest(self, query: str, hits: int, *, cutoff: float) -> None:
        self.logger.debug(
            "terminology.suggest",
            extra={"payload": {"query": query, "hits": hits, "cutoff": cutoff}},
        )

    def record_translate(self, source_code: str, candidates: int, *, group: Optional[str] = None) -> None:
        self.logger.debug(
            "terminology.translate",
            extra={
                "payload": {
                    "source_code": source_code,
                    "candidates": candidates,
                    "group": group,
                    "unmapped": candidates == 0,
                }
            },
        )

    def record_synthesis(self, source_code: str, codings: int, recorded_at: str) -> None:
        self.emit_event(
            "terminology.synthesize",
            {"source_code": source_code, "codings": codings, "recorded_at": recorded_at},
        )

    def record_invalid_selection(self, reason: str, group: Optional[str] = None) -> None:
        self.logger.warning(
            "terminology.invalid_selection",
            extra={"payload": {"reason": reason, "group": group}},
        )


__all__ = ["TerminologyTelemetry"]

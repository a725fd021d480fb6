"""Request timing, metrics and slow-call tracking for the terminology service."""

from __future__ import annotations

import logging
import os
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Mapping, Optional

from opentelemetry import metrics, trace
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

SERVICE_NAME = "dualcode.service"

SlowRequestCallback = Callable[[str, float], None]


def _otel_disabled(env: Mapping[str, str], exporter_var: str) -> bool:
    if env.get("OTEL_SDK_DISABLED") == "1":
        return True
    return env.get(exporter_var, "").lower() in {"", "none"}


def _get_tracer(name: str, env: Optional[Mapping[str, str]] = None):
    env = os.environ if env is None else env
    if _otel_disabled(env, "OTEL_TRACES_EXPORTER"):
        return None
    return trace.get_tracer(name)


def _get_meter(name: str, env: Optional[Mapping[str, str]] = None):
    env = os.environ if env is None else env
    if _otel_disabled(env, "OTEL_METRICS_EXPORTER"):
        return None
    return metrics.get_meter(name)


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Logs one ``service.request`` event per call, records OTEL metrics and reports slow ones.

    The tracer and meter come from the global OpenTelemetry providers unless
    passed in; either is skipped when its exporter is not configured.
    """

    def __init__(
        self,
        app,
        *,
        service_name: str = SERVICE_NAME,
        slow_request_threshold_ms: float = 0.0,
        on_slow_request: Optional[SlowRequestCallback] = None,
        tracer: Any = None,
        meter: Any = None,
    ) -> None:
        super().__init__(app)
        self._threshold_ms = slow_request_threshold_ms
        self._on_slow_request = on_slow_request
        self._tracer = tracer if tracer is not None else _get_tracer(service_name)
        meter = meter if meter is not None else _get_meter(service_name)
        self._request_counter = None
        self._request_duration = None
        if meter is not None:
            self._request_counter = meter.create_counter(
                "service_requests_total", unit="1", description="Total HTTP requests processed"
            )
            self._request_duration = meter.create_histogram(
                "service_request_duration_ms", unit="ms", description="Request latency in milliseconds"
            )

    def _is_slow(self, duration_ms: float) -> bool:
        return bool(self._threshold_ms) and duration_ms > self._threshold_ms

    async def dispatch(self, request: Request, call_next) -> Response:
        started = time.perf_counter()
        path = request.url.path
        span = None
        if self._tracer is not None:
            span = self._tracer.start_span(
                "http.request",
                attributes={"http.method": request.method, "http.route": path},
            )
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000.0
            attributes = {"http.method": request.method, "http.route": path}
            if span is not None:
                span.set_attribute("http.status_code", status_code)
                span.set_attribute("http.duration_ms", elapsed_ms)
                span.end()
            if self._request_counter is not None:
                self._request_counter.add(1, attributes={**attributes, "http.status_code": str(status_code)})
            if self._request_duration is not None:
                self._request_duration.record(elapsed_ms, attributes=attributes)
            logger.info(
                "service.request",
                extra={
                    "payload": {
                        "method": request.method,
                        "path": path,
                        "status_code": status_code,
                        "duration_ms": round(elapsed_ms, 3),
                    }
                },
            )
            if self._on_slow_request is not None and self._is_slow(elapsed_ms):
                self._on_slow_request(path, elapsed_ms)


@dataclass(frozen=True, slots=True)
class SlowRequest:
    path: str
    duration_ms: float

    def describe(self) -> str:
        return f"{self.path} took {self.duration_ms:.1f}ms"


@dataclass
class SlowRequestTracker:
    """Keeps the latest slow calls so ``/healthz`` can report degradation."""

    capacity: int = 50
    _recent: Deque[SlowRequest] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.capacity < 1:
            raise ValueError("capacity must be positive")
        self._recent = deque(maxlen=self.capacity)

    def record(self, path: str, duration_ms: float) -> None:
        logger.warning("service.slow_request", extra={"payload": {"path": path, "duration_ms": duration_ms}})
        self._recent.append(SlowRequest(path=path, duration_ms=duration_ms))

    def clear(self) -> None:
        self._recent.clear()

    def snapshot(self) -> list[str]:
        return [item.describe() for item in self._recent]


__all__ = ["RequestTimingMiddleware", "SERVICE_NAME", "SlowRequest", "SlowRequestTracker"]

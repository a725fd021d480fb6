from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from fastapi import FastAPI
from fastapi.testclient import TestClient

from DualCode.service import RequestTimingMiddleware, SlowRequestTracker
from DualCode.service.telemetry import _get_meter, _get_tracer


class RecordingInstrument:
    def __init__(self) -> None:
        self.calls: List[Tuple[float, Dict[str, Any]]] = []

    def add(self, amount: float, attributes: Optional[Dict[str, Any]] = None) -> None:
        self.calls.append((amount, dict(attributes or {})))

    def record(self, amount: float, attributes: Optional[Dict[str, Any]] = None) -> None:
        self.calls.append((amount, dict(attributes or {})))


class RecordingMeter:
    def __init__(self) -> None:
        self.instruments: Dict[str, RecordingInstrument] = {}

    def _create(self, name: str, **_: Any) -> RecordingInstrument:
        instrument = RecordingInstrument()
        self.instruments[name] = instrument
        return instrument

    create_counter = _create
    create_histogram = _create


class RecordingSpan:
    def __init__(self, name: str, attributes: Dict[str, Any]) -> None:
        self.name = name
        self.attributes = dict(attributes)
        self.ended = False

    def set_attribute(self, key: str, value: Any) -> None:
        self.attributes[key] = value

    def end(self) -> None:
        self.ended = True


class RecordingTracer:
    def __init__(self) -> None:
        self.spans: List[RecordingSpan] = []

    def start_span(self, name: str, attributes: Optional[Dict[str, Any]] = None) -> RecordingSpan:
        span = RecordingSpan(name, attributes or {})
        self.spans.append(span)
        return span


def build_client(meter: RecordingMeter, tracer: RecordingTracer, tracker: SlowRequestTracker) -> TestClient:
    app = FastAPI()

    @app.get("/ping")
    def ping() -> Dict[str, bool]:
        return {"ok": True}

    app.add_middleware(
        RequestTimingMiddleware,
        slow_request_threshold_ms=1e-6,
        on_slow_request=tracker.record,
        tracer=tracer,
        meter=meter,
    )
    return TestClient(app)


def test_requests_are_counted_timed_and_traced() -> None:
    meter = RecordingMeter()
    tracer = RecordingTracer()
    tracker = SlowRequestTracker()
    client = build_client(meter, tracer, tracker)

    assert client.get("/ping").status_code == 200
    assert client.get("/missing").status_code == 404

    counter = meter.instruments["service_requests_total"]
    assert [attributes["http.status_code"] for _, attributes in counter.calls] == ["200", "404"]
    assert all(amount == 1 for amount, _ in counter.calls)

    durations = meter.instruments["service_request_duration_ms"]
    assert [attributes["http.route"] for _, attributes in durations.calls] == ["/ping", "/missing"]
    assert all(amount >= 0 for amount, _ in durations.calls)

    assert [span.name for span in tracer.spans] == ["http.request", "http.request"]
    assert all(span.ended for span in tracer.spans)
    assert tracer.spans[0].attributes["http.status_code"] == 200
    assert tracer.spans[0].attributes["http.method"] == "GET"
    assert len(tracker.snapshot()) == 2


def test_otel_instruments_follow_exporter_settings() -> None:
    assert _get_meter("dualcode.test", env={}) is None
    assert _get_tracer("dualcode.test", env={"OTEL_TRACES_EXPORTER": "none"}) is None
    assert _get_meter("dualcode.test", env={"OTEL_METRICS_EXPORTER": "otlp", "OTEL_SDK_DISABLED": "1"}) is None

    assert _get_meter("dualcode.test", env={"OTEL_METRICS_EXPORTER": "otlp"}) is not None
    assert _get_tracer("dualcode.test", env={"OTEL_TRACES_EXPORTER": "otlp"}) is not None

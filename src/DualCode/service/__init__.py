"""Service layer package exports."""

from .app import create_app
from .telemetry import RequestTimingMiddleware, SlowRequest, SlowRequestTracker

__all__ = [
    "create_app",
    "RequestTimingMiddleware",
    "SlowRequest",
    "SlowRequestTracker",
]

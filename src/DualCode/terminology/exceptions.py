"""Custom exceptions for the terminology module."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class TerminologyError(Exception):
    """Base exception for terminology related failures."""


class SelectionViolation(str, Enum):
    """Enumerates the selection constraints checked before synthesis."""

    MISSING_SOURCE = "missing_source"
    DUPLICATE_GROUP = "duplicate_group"


class InvalidSelection(TerminologyError):
    """Raised when a selection cannot be turned into a dual-coded resource."""

    def __init__(self, reason: SelectionViolation, *, group: Optional[str] = None) -> None:
        self.reason = reason
        self.group = group
        if reason is SelectionViolation.MISSING_SOURCE:
            message = "No source term selected"
        else:
            message = f"More than one target chosen for group '{group}'"
        super().__init__(message)


class UnknownEquivalenceError(TerminologyError, ValueError):
    """Raised when a mapping declares an equivalence outside the closed set."""


class UnknownTargetGroupError(TerminologyError, ValueError):
    """Raised when a target candidate names an unrecognised system grouping."""


class UnknownSourceCodeError(TerminologyError, KeyError):
    """Raised when a catalog lookup by code finds no entry."""

    def __str__(self) -> str:
        return f"Unknown source code '{self.args[0]}'" if self.args else "Unknown source code"


__all__ = [
    "InvalidSelection",
    "SelectionViolation",
    "TerminologyError",
    "UnknownEquivalenceError",
    "UnknownSourceCodeError",
    "UnknownTargetGroupError",
]

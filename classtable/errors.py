"""Exception hierarchy for timetable operations."""

from __future__ import annotations

from typing import Optional


class TimetableError(Exception):
    """Base class for all timetable errors."""
    pass


class ValidationError(TimetableError, ValueError):
    """Raised when an operation is rejected before any state changes.

    Covers editing a break cell, out-of-range indices, relocating from a
    column that is not a break, and malformed timetable documents.
    """
    pass


class NotFoundError(TimetableError):
    """Raised when no timetable exists for the requested class/section or id."""
    pass


class NetworkError(TimetableError):
    """Raised when a persistence or generator request fails."""

    def __init__(self, message: str, status: Optional[int] = None, errors: Optional[list] = None):
        super().__init__(message)
        self.status = status
        self.errors = errors or []

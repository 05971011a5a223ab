"""Exceptions raised by coursetree."""

from typing import Any


class CourseTreeError(Exception):
    """Base class for coursetree errors."""


class StructuralError(CourseTreeError, ValueError):
    """A content tree violates its identifier invariants.

    Raised when loading a language with no root or several roots, an unresolved
    parent reference, a duplicated id or a parent cycle. Never auto-repaired.
    """

    def __init__(self, message: str, violations: list[Any] | None = None) -> None:
        super().__init__(message)
        self.violations = list(violations or [])


class FormatError(CourseTreeError, ValueError):
    """An interchange file cannot be parsed at the top level."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)
        self.path = path

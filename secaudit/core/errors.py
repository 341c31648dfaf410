"""
Error taxonomy for secaudit.

Only InvalidInputError is fatal. The other two describe per-item failures
that the engines record as findings and keep going.
"""

from typing import Optional


class AuditError(Exception):
    """Base class for all secaudit errors."""
    pass


class InvalidInputError(AuditError, ValueError):
    """Structurally invalid top-level input (missing root directory etc.)."""
    pass


class MalformedRecordError(AuditError, ValueError):
    """A memory-log line that cannot be parsed into an operation."""

    def __init__(self, message: str, record: Optional[str] = None):
        super().__init__(message)
        self.record = record


class TargetFailure(AuditError):
    """
    Failure of an audited item: a fuzz target that raised, or a source
    file that could not be read.
    """

    def __init__(self, subject: str, cause: BaseException):
        self.subject = subject
        self.cause = cause
        super().__init__(f"{subject}: {self.description}")

    @property
    def description(self) -> str:
        return f"{type(self.cause).__name__}: {self.cause}"

    @property
    def cause_type(self) -> str:
        return type(self.cause).__name__

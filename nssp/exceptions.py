"""
NSSP Exceptions

    NsspError
        IngestError        malformed source rows (dates, columns)
        StageError         SQL stage execution failed
        UnknownViewError   view name not registered by any stage
"""


class NsspError(Exception):
    """Base exception for the NSSP views package."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class IngestError(NsspError):
    """Raised when the source file cannot be normalized into observations."""


class StageError(NsspError):
    """Raised when a stage's SQL fails to execute."""


class UnknownViewError(NsspError, ValueError):
    """Raised when querying or exporting a view no stage defines."""

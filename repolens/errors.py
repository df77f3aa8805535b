"""Error taxonomy surfaced by the analysis pipeline."""

from __future__ import annotations


class AnalysisError(RuntimeError):
    """Base class for failures that abort an analysis run."""


class InvalidUrlError(AnalysisError):
    """Raised when the input URL cannot be analyzed."""


class FetchError(AnalysisError):
    """Raised when listing or downloading repository files fails."""

    def __init__(self, message: str, *, url: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class InternalAnalysisError(AnalysisError):
    """Raised when an analyzer invariant does not hold."""


class AnalysisCancelled(AnalysisError):
    """Raised inside a run that was cancelled or superseded."""


__all__ = [
    "AnalysisCancelled",
    "AnalysisError",
    "FetchError",
    "InternalAnalysisError",
    "InvalidUrlError",
]

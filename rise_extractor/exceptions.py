"""
Custom exceptions for the Rise content extractor.

Error philosophy:
  - SourceReadError     → RECOVERED: the file is skipped, a warning is logged,
                          the rest of the course is still analyzed.
  - LessonAnalysisError → RECOVERED: same as above, for failures while
                          analyzing a lesson's text.
  - ConfigurationError  → FAIL HARD: raised while building the extractor,
                          never in the middle of an analysis run.

Everything else (no Rise markers, no title, malformed markup) is modeled as
absence-with-fallback, so a course analysis always completes.
"""

from typing import Optional


class RiseExtractorError(Exception):
    """Base exception for all Rise extractor errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- FAIL HARD: bad settings are rejected up front ---

class ConfigurationError(RiseExtractorError):
    """Raised when extractor configuration is invalid."""
    pass


# --- RECOVERED: per-file failures, warn and skip ---

class FileAnalysisError(RiseExtractorError):
    """Base for failures tied to a single course file."""

    def __init__(
        self,
        message: str,
        path: str,
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        self.path = path

    def to_warning(self) -> str:
        """Render as the warning line recorded on the course analysis."""
        return f"{self.path}: {self.message}"


class SourceReadError(FileAnalysisError):
    """
    Raised when a source file's text cannot be read or decoded.

    The analyzer logs it as a warning and skips the file.
    """
    pass


class LessonAnalysisError(FileAnalysisError):
    """
    Raised when a lesson's text was read but could not be analyzed.

    The analyzer logs it as a warning and skips the file.
    """
    pass

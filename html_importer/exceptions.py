"""
Custom exceptions for the HTML Importer framework.

Error philosophy:
  - RuleDocumentError → FAIL HARD: a persisted rule document cannot be loaded.
  - SanitizerError    → NON-FATAL: the template cell yields nothing, warning logged.

Selector problems are never exceptions: an invalid selector degrades to
template handling or is filtered out of a selector list.  Exceptions raised by
a host capability propagate unchanged.
"""

from typing import Optional


class ImporterError(Exception):
    """Base exception for all HTML Importer errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- FAIL HARD: the rule document is unusable ---

class RuleDocumentError(ImporterError):
    """
    Raised when a rule document cannot be read or validated.

    Carries the source (file path or store key) so the caller can point the
    user at the broken document.
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        self.source = source

    def to_response(self) -> dict:
        """Convert to a JSON-friendly error payload."""
        return {
            "error": "RuleDocumentError",
            "message": self.message,
            "source": self.source,
            "details": self.details
        }


# --- NON-FATAL: caught by the cell evaluator ---

class SanitizerError(ImporterError):
    """
    Raised when template markup cannot be sanitized.

    Non-fatal - the template cell is dropped and a warning logged.
    """
    pass

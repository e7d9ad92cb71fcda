"""
Error taxonomy for the coaching pipeline.

Every failure the controller knows how to handle derives from CoachError.
ValidationMismatch is the odd one out: it never escapes the controller,
it only drives the retry prompt.
"""

from __future__ import annotations


class CoachError(Exception):
    """Base class for all coaching errors."""


class ConfigurationError(CoachError):
    """Required configuration is missing or invalid. Fatal at startup."""


class CaptureError(CoachError):
    """The host failed to capture a photo."""


class DetectionError(CoachError):
    """The vision classifier call failed or returned malformed data."""


class AnalysisError(CoachError):
    """The analysis call failed or returned unparseable content."""


class NarrationError(CoachError):
    """Voice output failed or timed out."""


class ValidationMismatch(CoachError):
    """Detected card count does not match what the street requires."""

    def __init__(self, street: str, expected: int, actual: int):
        self.street = street
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Expected {expected} card(s) at {street}, got {actual}"
        )

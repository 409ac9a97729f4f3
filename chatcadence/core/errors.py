"""
Exceptions raised by the segmentation engine.

These signal programming errors (a phase handed an empty run), not
recoverable runtime conditions. Empty input at the public entry points is
never an error.
"""


class SegmentationError(ValueError):
    """Base class for segmentation invariant violations."""


class EmptyVolleyError(SegmentationError):
    """Raised when a volley is built from an empty list of turns."""


class EmptySessionError(SegmentationError):
    """Raised when a session is built from an empty list of volleys."""

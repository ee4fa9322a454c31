"""
Exception taxonomy for the low-light vision pipeline.

Every error raised on purpose by this package derives from LowLightVisionError.
The concrete classes also derive from ValueError so callers that already
guard image helpers with ``except ValueError`` keep working.
"""


class LowLightVisionError(Exception):
    """Base class for all package errors."""


class DecodeError(LowLightVisionError, ValueError):
    """Image bytes or arrays could not be turned into an ImageSample."""


class EnhancementError(LowLightVisionError, ValueError):
    """A color-space conversion or lookup-table step failed."""


class DetectionError(LowLightVisionError, ValueError):
    """The external detector failed or returned malformed output."""


class ComparisonError(LowLightVisionError, ValueError):
    """Feature vectors are empty or internally inconsistent."""

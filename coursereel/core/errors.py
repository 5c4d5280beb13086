"""Error taxonomy shared by the generation pipeline and the attempt tracker."""


class CourseReelError(Exception):
    """Base class for application errors."""


# External services. Always absorbed by a fallback at the component boundary.

class ContentSynthesisError(CourseReelError):
    """Generative text call failed, timed out or returned an unusable payload."""


class StockMediaError(CourseReelError):
    """Stock media search failed or timed out."""


class SpeechSynthesisError(CourseReelError):
    """Text-to-speech call failed."""


# Surfaced to callers.

class GenerationValidationError(CourseReelError):
    """Request rejected before any external call or write."""


class PersistenceError(CourseReelError):
    """Generation transaction failed and was rolled back."""


class NotFoundError(CourseReelError):
    """Referenced project, scenario, scene or attempt does not exist."""


class AttemptStateError(CourseReelError):
    """Operation not allowed in the attempt's current status."""

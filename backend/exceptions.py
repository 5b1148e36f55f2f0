class GiftGlanceError(Exception):
    """Base exception for the gift wizard."""


class ValidationError(GiftGlanceError):
    """Raised when user input blocks a wizard action. The message is shown as-is."""


class AnalysisError(GiftGlanceError):
    """Raised when the analysis backend fails to produce a usable result."""


class MissingAPIKeyError(GiftGlanceError):
    """Raised when no OpenAI API key is configured."""

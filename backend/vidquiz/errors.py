class QuizError(Exception):
    """Base error for the generate endpoint; rendered as {"error": ...}."""

    status_code = 500

    def __init__(self, error: str):
        super().__init__(error)
        self.error = error


class BadRequest(QuizError):
    status_code = 400


class NotFound(QuizError):
    status_code = 404


class GenerationFailed(QuizError):
    status_code = 500

    def __init__(self, error: str = "AI_GENERATION_FAILED"):
        super().__init__(error)


class InternalError(QuizError):
    status_code = 500


class TranscriptUnavailable(Exception):
    """Raised by transcript backends; never leaves the transcript service."""

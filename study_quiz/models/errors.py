"""Error taxonomy for quiz generation, loading and run setup."""


class QuizError(Exception):
    """Base class for every error surfaced to the user."""


class MalformedResponse(QuizError):
    """The model's raw text could not be reduced to a JSON object."""

    def __init__(self, reason: str, snippet: str = ""):
        self.reason = reason
        self.snippet = snippet
        super().__init__(f"The AI response was not valid JSON ({reason}).")


class MalformedQuestion(QuizError):
    """A parsed candidate violates the question contract."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"AI returned a malformed question: {reason}")


class InsufficientPoolError(QuizError):
    """Fewer questions are available than the operation needs."""

    def __init__(self, have: int, need: int):
        self.have = have
        self.need = need
        super().__init__(
            f"Not enough questions. Only {have} available, but {need} are needed."
        )


class QuizValidationError(QuizError):
    """The run configuration is invalid; no request was sent."""


class MalformedBankFile(QuizError):
    """A question-bank file could not be read or lacks required sections."""


class GenerationError(QuizError):
    """A generation batch was aborted."""

class ClimaError(Exception):
    """Base class for errors raised by the survey backend."""


class UnknownQuestionError(ClimaError, KeyError):
    """A question key that has no column in the survey_responses table."""

    def __init__(self, key):
        super().__init__(key)
        self.key = key

    def __str__(self):
        return f"unknown question key: {self.key!r}"


class SubmissionError(ClimaError, ValueError):
    """A survey payload that cannot be stored as submitted."""

    def __init__(self, message, fields=None):
        super().__init__(message)
        self.message = message
        self.fields = list(fields or [])

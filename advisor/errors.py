# errors.py

from typing import List, Optional


class AdvisorError(Exception):
    """Base class for every error raised by the advisor package."""


class DataIntegrityError(AdvisorError):
    """
    The configuration data (questions, sections, decision rules, offerings)
    is inconsistent. Raised at load time with every problem found.
    """

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


class AnswerValidationError(AdvisorError):
    """An answer or customer detail was rejected at submission time."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class NotFoundError(AdvisorError):
    pass


class RecordStoreError(AdvisorError):
    """A record store read or write failed. Always surfaced to the caller."""

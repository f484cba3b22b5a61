"""Exceptions raised by the drafting engine."""


class AutoApplyError(Exception):
    """Base class for engine errors."""


class GenerationError(AutoApplyError):
    """Raised when the text-generation capability fails or returns nothing usable."""

    def __init__(self, message: str, model: str | None = None, recoverable: bool = True):
        super().__init__(message)
        self.model = model
        self.recoverable = recoverable


class SectionNotFoundError(AutoApplyError):
    """Raised when a draft operation names a section the draft does not contain."""

    def __init__(self, section_id: str):
        super().__init__(f"Section '{section_id}' is not part of this draft")
        self.section_id = section_id

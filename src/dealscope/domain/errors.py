# src/dealscope/domain/errors.py
from __future__ import annotations


class DealscopeError(Exception):
    """Base class for every error raised by the analysis core."""


class InputError(DealscopeError):
    """
    A single property record cannot be analyzed (missing address, no price
    information, unparseable numbers).

    Batch analysis recovers from this: the record is skipped and reported.
    """

    def __init__(self, identifier: str | None, message: str) -> None:
        self.identifier = identifier
        self.message = message
        super().__init__(f"[{identifier or '?'}] {message}")


class ConfigurationError(DealscopeError):
    """
    A configuration value is non-numeric or out of range.

    Configuration is shared by every record in a run, so this is fatal to the
    whole batch.
    """


class ComputationError(DealscopeError):
    """
    A stage produced a non-finite number (NaN / inf).

    This signals a logic defect. It is never folded into a verdict.
    """

    def __init__(self, identifier: str | None, stage: str, field: str, value: float) -> None:
        self.identifier = identifier
        self.stage = stage
        self.field = field
        self.value = value
        super().__init__(
            f"[{identifier or '?'}] non-finite value in stage '{stage}': {field}={value!r}"
        )

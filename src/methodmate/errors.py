"""Exceptions raised by methodmate.

Oracle failures never escape the extraction pipeline; they are absorbed into
an ``ExtractionOutcome``. They are still raised by the oracle client itself so
the retry policy can tell them apart from refusals.
"""

from __future__ import annotations

from typing import Any


class MethodMateError(Exception):
    """Base exception for all methodmate errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class MalformedInputError(MethodMateError):
    """Input document is empty or not text."""


class OracleError(MethodMateError):
    """Base class for text-analysis oracle failures."""


class OracleTransportError(OracleError):
    """Timeout, network failure or non-2xx status from the oracle."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message, {"status_code": status_code} if status_code else None)
        self.status_code = status_code


class OracleEmptyAnswer(OracleError):
    """The oracle answered but the payload carried no usable text."""

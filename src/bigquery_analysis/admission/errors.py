"""Exceptions raised by the admission pipeline and its query services."""

from __future__ import annotations


class AdmissionError(Exception):
    """Base class for admission pipeline errors."""


class InvalidQueryError(AdmissionError, ValueError):
    """Raised when a request is malformed (e.g. the query text is empty).

    This is the only failure that is not converted into an outcome: it
    signals caller misuse and is surfaced as a protocol-level error.
    """


class QueryServiceError(AdmissionError):
    """Raised by a query service when the backend rejects or fails a call.

    The message is the backend's own text (syntax, permission, quota or
    network errors) and is reported verbatim to the caller.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


__all__ = ["AdmissionError", "InvalidQueryError", "QueryServiceError"]

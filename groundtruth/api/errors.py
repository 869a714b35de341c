"""Exceptions raised by the API layer and the training data store."""

import logging
from typing import Optional


class GroundTruthError(Exception):
    """Base exception for errors that map onto an HTTP response."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class BadRequestError(GroundTruthError):
    """Raised when a request is malformed (bad Range header, bad body, ...)."""

    status_code = 400


class AuthenticationRequired(GroundTruthError):
    """Raised when no authenticated user is attached to the request."""

    status_code = 401


class PreconditionError(GroundTruthError):
    """Raised when a conditional request is missing its If-Match header."""

    status_code = 412


class SessionError(GroundTruthError):
    """Raised when a user cannot be written to or read from the session."""

    status_code = 401


# Store error categories and the HTTP status each one maps to
CONFLICT = "conflict"
NOT_FOUND = "not_found"
FORBIDDEN = "forbidden"
REQUIRED_FIELD_MISSING = "required_field_missing"
UNEXPECTED_OBJECT_TYPE = "unexpected_object_type"
INVALID = "invalid"
UNIQUE_CONSTRAINT_VIOLATED = "unique_constraint_violated"
TOO_MANY_RESULTS = "too_many_results"
UNKNOWN = "unknown"

CATEGORY_STATUS = {
    CONFLICT: 409,
    NOT_FOUND: 404,
    FORBIDDEN: 403,
    REQUIRED_FIELD_MISSING: 400,
    UNEXPECTED_OBJECT_TYPE: 400,
    INVALID: 422,
    UNIQUE_CONSTRAINT_VIOLATED: 400,
    TOO_MANY_RESULTS: 500,
    UNKNOWN: 500,
}

EXPECTED_STATUS = {400, 403, 404, 409, 412, 422}


class StoreError(GroundTruthError):
    """Error raised by the document store, tagged with a category."""

    def __init__(self, category: str, message: str, status_code: Optional[int] = None):
        if status_code is None:
            status_code = CATEGORY_STATUS.get(category, 500)
        super().__init__(message, status_code)
        self.category = category

    def __repr__(self) -> str:
        return f"StoreError({self.category!r}, {self.message!r}, {self.status_code})"


def as_error(category: str, message: str, status_code: Optional[int] = None) -> StoreError:
    """Build a StoreError for the given category."""
    return StoreError(category, message, status_code)


def log_error(err: Exception, logger: Optional[logging.Logger] = None) -> None:
    """Log expected errors at debug level and everything else at error level."""
    logger = logger or logging.getLogger(__name__)
    status = getattr(err, "status_code", 500)
    if status in EXPECTED_STATUS or status == 401:
        logger.debug(f"{type(err).__name__}: {err}")
    else:
        logger.error(f"{type(err).__name__}: {err}", exc_info=err)

"""Service-level errors. Routers translate them into HTTP responses."""

import logging

from fastapi import HTTPException


class PlannerError(Exception):
    status_code = 400


class NotFoundError(PlannerError):
    status_code = 404


class ValidationError(PlannerError):
    status_code = 400


class ConflictError(PlannerError):
    status_code = 409


def as_http_error(exc: PlannerError, logger: logging.Logger, event: str, db=None, **context) -> HTTPException:
    """Log a failed request under ``event`` and build its HTTPException."""
    if db is not None:
        # nothing from the failed write may stay in the session
        db.rollback()
    logger.error(event, extra={**context, "error_type": type(exc).__name__})
    return HTTPException(status_code=exc.status_code, detail=str(exc))

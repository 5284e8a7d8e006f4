"""Mapping of engine errors onto HTTP responses."""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException

from vibeframe.errors import (
    AUTHENTICATION,
    MALFORMED_OUTPUT,
    RATE_LIMITED,
    TIMEOUT,
    TRANSPORT,
    ExportFormatError,
    NothingToUndo,
    PersistenceError,
    SessionNotFound,
    TurnFailed,
    TurnSuperseded,
)

_TURN_STATUS = {
    RATE_LIMITED: 429,
    AUTHENTICATION: 502,
    MALFORMED_OUTPUT: 502,
    TRANSPORT: 502,
    TIMEOUT: 504,
}


def _error(status: int, reason: str, message: str, retryable: bool = False, **extra: Any) -> HTTPException:
    return HTTPException(
        status_code=status,
        detail={"reason": reason, "message": message, "retryable": retryable, **extra},
    )


def turn_failed(exc: TurnFailed) -> HTTPException:
    extra = {}
    if exc.annotation is not None:
        extra["annotation"] = exc.annotation.model_dump(mode="json")
    return _error(_TURN_STATUS.get(exc.reason, 502), exc.reason, exc.message, exc.retryable, **extra)


def superseded(exc: TurnSuperseded) -> HTTPException:
    return _error(409, "superseded", str(exc))


def not_found(exc: SessionNotFound) -> HTTPException:
    return _error(404, "not_found", str(exc))


def persistence_failed(exc: PersistenceError) -> HTTPException:
    return _error(500, "persistence", exc.message, retryable=True)


def bad_import(exc: ExportFormatError) -> HTTPException:
    return _error(422, "bad_import", str(exc))


def invalid_request(message: str) -> HTTPException:
    return _error(422, "invalid_request", message)


def nothing_to_undo(exc: NothingToUndo) -> HTTPException:
    return _error(409, "nothing_to_undo", str(exc))

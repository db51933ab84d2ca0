# Overview: Maps domain outcomes onto JSON responses and HTTP status codes.

from flask import jsonify

from ..errors import (
    DomainError,
    ValidationError,
    NotFound,
    PermissionDenied,
    ConflictError,
    InvalidTransition,
    InsufficientStock,
    SlotTaken,
    AuthError,
    EmailInUse,
    WeakPassword,
)

# Most specific first
_STATUS_BY_KIND = (
    (EmailInUse, 409),
    (WeakPassword, 400),
    (AuthError, 401),
    (ValidationError, 400),
    (NotFound, 404),
    (PermissionDenied, 403),
    (InvalidTransition, 409),
    (InsufficientStock, 409),
    (SlotTaken, 409),
    (ConflictError, 409),
)


def status_for(error: DomainError) -> int:
    for cls, status in _STATUS_BY_KIND:
        if isinstance(error, cls):
            return status
    return 400


def error_response(error: DomainError):
    return jsonify(error.to_dict()), status_for(error)


def outcome_response(outcome, *, status: int = 200, serialize=None):
    """
    Turn an Outcome from errors.attempt() into a response.

    serialize maps the success value to JSON-able data; defaults to
    value.to_dict().
    """
    if not outcome.ok:
        return error_response(outcome.error)
    value = outcome.value
    if serialize is not None:
        body = serialize(value)
    elif value is None:
        body = {"ok": True}
    else:
        body = value.to_dict()
    return jsonify(body), status


def items(records) -> dict:
    return {"items": [r.to_dict() for r in records], "count": len(records)}

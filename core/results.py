# core/results.py
"""
Return values of the data-access actions.

Actions never raise to the views: they hand back either a Success carrying the
data or a Failure carrying a message and an error code. Views turn both into
the JSON shape {"success": bool, "data"?: ..., "error"?: str}.
"""
import logging
from dataclasses import dataclass, field
from functools import wraps

from django.db import DatabaseError
from django.http import JsonResponse

logger = logging.getLogger(__name__)

VALIDATION = 'validation'
NOT_FOUND = 'not_found'
CONFLICT = 'conflict'
STORAGE = 'storage'

HTTP_STATUS = {
    VALIDATION: 400,
    NOT_FOUND: 404,
    CONFLICT: 409,
    STORAGE: 500,
}


@dataclass(frozen=True)
class Success:
    data: object = None

    success = True

    def to_dict(self, serialize=None):
        payload = {'success': True}
        if self.data is not None:
            payload['data'] = serialize(self.data) if serialize else self.data
        return payload


@dataclass(frozen=True)
class Failure:
    error: str
    code: str = STORAGE
    field_errors: dict = field(default_factory=dict)

    success = False

    @property
    def status_code(self):
        return HTTP_STATUS.get(self.code, 500)

    def to_dict(self, serialize=None):
        payload = {'success': False, 'error': self.error}
        if self.field_errors:
            payload['errors'] = self.field_errors
        return payload


class IdentifierError(Exception):
    """An existing identifier could not be parsed while issuing the next one."""


def validation_failure(form):
    """Build a validation Failure from an invalid Django form"""
    field_errors = {name: [str(message) for message in messages] for name, messages in form.errors.items()}
    first_message = next(
        (messages[0] for messages in field_errors.values() if messages),
        'Please correct the errors below.'
    )
    return Failure(first_message, VALIDATION, field_errors)


def not_found(label):
    return Failure(f'{label} not found', NOT_FOUND)


def storage_guard(error_message):
    """
    Turn storage errors raised by an action into a generic Failure.

    The exception is logged with the call arguments; the caller only ever sees
    error_message.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except (DatabaseError, IdentifierError):
                logger.exception(
                    '%s failed (args=%r, kwargs=%r)', func.__qualname__, args, kwargs
                )
                return Failure(error_message, STORAGE)
        return wrapper
    return decorator


def result_response(result, serialize=None, status=200):
    """JsonResponse for an action result, mapping failure codes to HTTP statuses"""
    if not result.success:
        status = result.status_code
    return JsonResponse(result.to_dict(serialize), status=status)


def serialize_many(serialize):
    """Lift a per-object serializer to a list of objects"""
    def wrapper(items):
        return [serialize(item) for item in items]
    return wrapper


def invalid_payload_response():
    return result_response(Failure('Invalid data format', VALIDATION))

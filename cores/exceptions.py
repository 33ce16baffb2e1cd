# cores/exceptions.py
"""
Error kinds shared by the exam engine.

Services raise these directly; DRF turns them into
``{"detail": ..., "code": ...}`` responses with the matching status.
"""
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler


class NotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class NotAuthorized(APIException):
    """Exam unpublished or outside its window, or caller does not own the resource."""
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You are not allowed to perform this action."
    default_code = "not_authorized"


class AttemptClosed(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "This attempt has already been submitted."
    default_code = "attempt_closed"


class AttemptInProgress(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "This attempt has not been submitted yet."
    default_code = "attempt_in_progress"


class InvalidScore(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Awarded points are out of range."
    default_code = "invalid_score"


class InvalidAnswer(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "The answer does not match the question."
    default_code = "invalid_answer"


class InvalidViolation(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Unknown violation type."
    default_code = "invalid_violation"


def api_exception_handler(exc, context):
    """
    DRF's handler plus a machine-readable ``code`` next to ``detail``.

    Field-level validation errors keep their ``{field: [messages]}`` shape.
    """
    if isinstance(exc, Http404):
        exc = exceptions.NotFound()
    elif isinstance(exc, DjangoPermissionDenied):
        exc = exceptions.PermissionDenied()

    response = exception_handler(exc, context)
    if response is None or not isinstance(exc, APIException):
        return response

    codes = exc.get_codes()
    if isinstance(response.data, list):
        messages = response.data
        response.data = {
            'detail': messages[0] if len(messages) == 1 else messages,
            'code': codes[0] if isinstance(codes, list) and codes else codes,
        }
    elif isinstance(response.data, dict) and 'detail' in response.data:
        response.data.setdefault('code', codes)
    return response

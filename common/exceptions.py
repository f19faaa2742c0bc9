"""
API exceptions and the custom exception handler for Django REST Framework.
"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    NotFound as DRFNotFound,
    ValidationError as DRFValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class NotFound(DRFNotFound):
    """A referenced group, member or expense does not exist."""
    default_detail = 'The requested resource was not found.'
    default_code = 'not_found'


class InvalidSplit(APIException):
    """
    A split-policy invariant was violated.

    Raised by the split calculator at write time; the detail carries the
    specific invariant message (e.g. ``Percentages must sum to 100.``).
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid split.'
    default_code = 'invalid_split'


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'The request conflicts with the current state of the resource.'
    default_code = 'conflict'


class MemberInUse(Conflict):
    default_detail = 'Member has recorded expenses.'
    default_code = 'member_in_use'


def custom_exception_handler(exc, context):
    """
    Custom exception handler that returns consistent JSON error responses.

    Response format:
    {
        "success": false,
        "error": {
            "code": "error_code",
            "message": "Human-readable message",
            "details": { ... }  // optional, for field-level validation errors
        }
    }
    """
    # Convert Django ValidationError to DRF ValidationError
    if isinstance(exc, DjangoValidationError):
        exc = DRFValidationError(detail=exc.message_dict if hasattr(exc, 'message_dict') else exc.messages)

    # Call DRF's default exception handler first
    response = exception_handler(exc, context)

    if response is None:
        # Unhandled exception
        logger.exception(
            'Unhandled exception in %s',
            context.get('view', 'unknown view'),
            exc_info=exc,
        )
        return Response(
            {
                'success': False,
                'error': {
                    'code': 'internal_error',
                    'message': 'An unexpected error occurred. Please try again later.',
                },
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    response.data = {
        'success': False,
        'error': _format_error(exc, response),
    }
    return response


def _format_error(exc, response):
    """Format the error payload based on exception type."""
    if isinstance(exc, DRFValidationError):
        return {
            'code': 'validation_error',
            'message': 'Invalid input.',
            'details': response.data,
        }

    if isinstance(exc, Http404):
        return {
            'code': 'not_found',
            'message': 'The requested resource was not found.',
        }

    if isinstance(exc, APIException):
        return {
            'code': exc.get_codes() if isinstance(exc.detail, str) else exc.default_code,
            'message': str(exc.detail),
        }

    return {
        'code': 'error',
        'message': 'An error occurred.',
    }

# shared/common/exceptions.py
"""
API Exceptions and the DRF Exception Handler

Every error leaves the API in one envelope:

    {"success": false, "error": {"code", "message", "request_id", "details"?}}
"""

import logging
import traceback
from typing import Dict, Any, Optional
from rest_framework import status
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework.exceptions import APIException
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from django.http import Http404
from django.conf import settings

logger = logging.getLogger(__name__)


class BaseAPIException(APIException):
    """API exception that carries a machine-readable error code."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'An unexpected error occurred.'
    default_code = 'error'
    error_code = 'INTERNAL_ERROR'

    def __init__(
        self,
        detail: Optional[str] = None,
        code: Optional[str] = None,
        error_code: Optional[str] = None,
        extra_data: Optional[Dict] = None
    ):
        super().__init__(detail=detail, code=code)
        self.error_code = error_code or self.error_code
        self.extra_data = extra_data or {}


class ServiceErrorException(BaseAPIException):
    """
    Wraps a service-layer error for the API.

    Service errors define ``status_code``, ``error_code``, ``message`` and
    ``extra``; they are copied onto the API exception unchanged.
    """

    @classmethod
    def from_error(cls, error: Exception) -> 'ServiceErrorException':
        exc = cls(
            detail=getattr(error, 'message', str(error)),
            error_code=getattr(error, 'error_code', None),
            extra_data=dict(getattr(error, 'extra', {}) or {}),
        )
        exc.status_code = getattr(error, 'status_code', status.HTTP_400_BAD_REQUEST)
        return exc


def error_body(code: str, message: str, request_id=None, details=None) -> Dict[str, Any]:
    body = {
        'success': False,
        'error': {
            'code': code,
            'message': message,
            'request_id': request_id,
        }
    }
    if details:
        body['error']['details'] = details
    return body


def custom_exception_handler(exc, context) -> Optional[Response]:
    """DRF exception handler rendering the error envelope."""

    request = context.get('request')
    request_id = getattr(request, 'request_id', None) if request else None

    response = exception_handler(exc, context)
    if response is not None:
        return format_error_response(exc, response, request_id)

    if isinstance(exc, DjangoValidationError):
        details = exc.message_dict if hasattr(exc, 'message_dict') else {'detail': exc.messages}
        return Response(
            error_body('VALIDATION_ERROR', 'Validation error', request_id, details),
            status=status.HTTP_400_BAD_REQUEST
        )

    if isinstance(exc, Http404):
        return Response(
            error_body('NOT_FOUND', str(exc) or 'Resource not found', request_id),
            status=status.HTTP_404_NOT_FOUND
        )

    if isinstance(exc, IntegrityError):
        # A constraint caught what the service layer let through
        logger.warning(
            f"Integrity error: {exc}",
            extra={'request_id': request_id}
        )
        return Response(
            error_body('conflict', 'The request conflicts with existing data', request_id),
            status=status.HTTP_409_CONFLICT
        )

    logger.exception(
        f"Unhandled exception: {exc}",
        extra={
            'request_id': request_id,
            'exception_type': type(exc).__name__,
        }
    )

    if settings.DEBUG:
        body = error_body('INTERNAL_ERROR', str(exc), request_id)
        body['error']['type'] = type(exc).__name__
        body['error']['traceback'] = traceback.format_exc().split('\n')
        return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return Response(
        error_body('INTERNAL_ERROR', 'An unexpected error occurred. Please try again later.', request_id),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def format_error_response(exc, response: Response, request_id: str = None) -> Response:
    """Rewrite a DRF error response into the envelope."""

    code = getattr(exc, 'error_code', None) or _default_error_code(exc)
    details = getattr(exc, 'extra_data', None)

    if not details and isinstance(response.data, dict) and 'detail' not in response.data:
        # Field errors from serializer validation
        details = response.data

    response.data = error_body(code, get_error_message(exc, response), request_id, details)
    return response


def _default_error_code(exc) -> str:
    code = getattr(exc, 'default_code', None)
    return str(code).upper() if code else 'ERROR'


def get_error_message(exc, response: Response) -> str:
    detail = getattr(exc, 'detail', None)

    if isinstance(detail, str):
        return detail
    if isinstance(detail, list) and detail:
        return str(detail[0])
    if isinstance(detail, dict):
        return str(detail.get('detail', 'Validation error'))

    if isinstance(response.data, dict):
        return response.data.get('detail', str(response.data))
    return str(response.data)

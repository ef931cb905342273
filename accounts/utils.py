import logging

from rest_framework import status as http_status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def _split_error_payload(data):
    """Return (message, errors) for a DRF error payload."""
    if isinstance(data, dict):
        if 'detail' in data:
            return str(data['detail']), []
        return 'Validation failed.', data
    if isinstance(data, list):
        return 'Validation failed.', data
    return str(data), []


def custom_exception_handler(exc, context):
    """Render DRF errors in the same envelope as ``api_response``"""
    response = exception_handler(exc, context)
    view = context.get('view')
    view_name = view.__class__.__name__ if view else 'unknown view'

    if response is None:
        logger.error(f"Unhandled error in {view_name}: {exc!r}")
        return None

    message, errors = _split_error_payload(response.data)
    if response.status_code >= http_status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(f"{view_name} failed with {response.status_code}: {message}")

    response.data = {
        'success': False,
        'message': message,
        'code': getattr(exc, 'default_code', 'error'),
        'data': None,
        'errors': errors,
    }
    return response


def api_response(success=True, message='', data=None, errors=None, status=http_status.HTTP_200_OK):
    """Build the ``{success, message, data, errors}`` envelope every view returns"""
    return Response(
        {
            'success': success,
            'message': message,
            'data': data if data is not None else {},
            'errors': errors if errors is not None else [],
        },
        status=status,
    )

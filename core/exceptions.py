import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ValidationError(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid input.'
    default_code = 'invalid'


class NotFoundError(exceptions.APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'
    default_code = 'not_found'


class DomainRuleError(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'This action is not allowed.'
    default_code = 'rule_violation'


class UploadError(exceptions.APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Error while uploading media.'
    default_code = 'upload_failed'


def first_message(detail):
    """
    Flattens DRF error details (nested dicts/lists from serializers) into one line.
    """
    if isinstance(detail, dict):
        if 'detail' in detail:
            return first_message(detail['detail'])
        for field, value in detail.items():
            message = first_message(value)
            if field == 'non_field_errors':
                return message
            return f"{field}: {message}"
        return ''
    if isinstance(detail, (list, tuple)):
        return first_message(detail[0]) if detail else ''
    return str(detail)


def api_exception_handler(exc, context):
    """
    Single translation point from raised errors to the `{success, message}` envelope.
    """
    view = context.get('view')
    source = view.__class__.__name__ if view else 'request'

    response = exception_handler(exc, context)
    if response is None:
        logger.error(f"{source} raised an unexpected error", exc_info=exc)
        return Response({'success': False, 'message': 'Internal server error'},
                        status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    message = first_message(response.data)
    if response.status_code >= 500:
        logger.error(f"{source} failed: {message}", exc_info=exc)

    response.data = {'success': False, 'message': message}
    return response

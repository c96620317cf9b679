from django.conf import settings
from rest_framework import status
from rest_framework.response import Response

from .exceptions import NotFoundError


def envelope(message, status_code=status.HTTP_200_OK, **payload):
    return Response({'success': True, 'message': message, **payload}, status=status_code)


def ensure_not_empty(items, message):
    """
    Raises NotFoundError for an empty result when EMPTY_RESULT_AS_ERROR is on.
    """
    if not items and settings.EMPTY_RESULT_AS_ERROR:
        raise NotFoundError(message)
    return items

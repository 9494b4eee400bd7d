"""
DRF exception handler — turns every failure into the API's error envelope:
{"success": false, "message": "..."}.

Anything that escapes a view without being a CRMError or a DRF APIException
is logged and reported as a generic 500, so no fault ever reaches the
transport layer unhandled.
"""
import logging

from django.http import Http404
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response
from rest_framework.settings import api_settings
from rest_framework.views import set_rollback

from crm.exceptions import CRMError, PersistenceError

logger = logging.getLogger(__name__)


def _flatten_detail(detail) -> str:
    """Reduce a DRF error detail (str, list or nested dict) to one line."""
    if isinstance(detail, dict):
        for field, value in detail.items():
            message = _flatten_detail(value)
            if field == api_settings.NON_FIELD_ERRORS_KEY:
                return message
            return f"{field}: {message}"
        return "Invalid request"
    if isinstance(detail, (list, tuple)):
        return _flatten_detail(detail[0]) if detail else "Invalid request"
    return str(detail)


def _error(message: str, status_code: int, headers: dict | None = None) -> Response:
    return Response({"success": False, "message": message}, status=status_code, headers=headers)


def crm_exception_handler(exc, context):
    view = context.get("view")
    view_name = view.__class__.__name__ if view else "unknown view"

    if isinstance(exc, CRMError):
        if isinstance(exc, PersistenceError):
            logger.error("%s: %s", view_name, exc.message)
        set_rollback()
        return _error(exc.message, exc.status_code)

    if isinstance(exc, Http404):
        exc = drf_exceptions.NotFound()

    if isinstance(exc, drf_exceptions.NotAuthenticated):
        exc.detail = "Authorization token required"

    if isinstance(exc, drf_exceptions.APIException):
        headers = {}
        auth_header = getattr(exc, "auth_header", None)
        if auth_header:
            headers["WWW-Authenticate"] = auth_header
        set_rollback()
        return _error(_flatten_detail(exc.detail), exc.status_code, headers or None)

    logger.exception("Unhandled error in %s", view_name)
    set_rollback()
    return _error("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)

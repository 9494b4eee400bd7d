"""Success envelope shared by every CRM endpoint: {"success": true, "message"?, "data": {...}}."""
from django.conf import settings
from rest_framework import status as drf_status
from rest_framework.response import Response


def success(data: dict, message: str | None = None, status: int = drf_status.HTTP_200_OK) -> Response:
    body = {"success": True}
    if message:
        body["message"] = message
    body["data"] = data
    return Response(body, status=status)


def store_alias() -> str:
    """Database alias the CRM services are bound to for this process."""
    return settings.CRM_DATABASE_ALIAS

"""
Internal-team authentication for the CRM API.

Staff send `Authorization: Bearer internal_user_<uuid>`. A token that is
missing or malformed is rejected with 401; a user that is unknown or has been
deactivated is rejected with 403. The resolved InternalUser becomes
request.user and is the actor recorded on activities and audit entries.
"""
import uuid

from django.conf import settings

from rest_framework import exceptions
from rest_framework.authentication import BaseAuthentication, get_authorization_header
from rest_framework.permissions import BasePermission

from crm.models.internal_user import InternalUser

TOKEN_PREFIX = "internal_user_"


def internal_token_for(user: InternalUser) -> str:
    return f"{TOKEN_PREFIX}{user.id}"


class InternalTokenAuthentication(BaseAuthentication):
    keyword = "Bearer"

    def authenticate(self, request):
        header = get_authorization_header(request).split()
        if not header or header[0].lower() != self.keyword.lower().encode():
            return None
        if len(header) != 2:
            raise exceptions.AuthenticationFailed("Authorization token required")

        token = header[1].decode(errors="replace")
        if not token.startswith(TOKEN_PREFIX):
            raise exceptions.AuthenticationFailed("Invalid internal user token")
        try:
            user_id = uuid.UUID(token[len(TOKEN_PREFIX):])
        except ValueError:
            raise exceptions.AuthenticationFailed("Invalid internal user token")

        user = InternalUser.objects.using(settings.CRM_DATABASE_ALIAS).filter(id=user_id).first()
        if user is None:
            raise exceptions.PermissionDenied("Internal team access required")
        if not user.is_active:
            raise exceptions.PermissionDenied("Internal team account is not active")
        return user, token

    def authenticate_header(self, request):
        return f'{self.keyword} realm="api"'


class IsInternalUser(BasePermission):
    message = "Internal team access required"

    def has_permission(self, request, view):
        return isinstance(request.user, InternalUser) and request.user.is_active

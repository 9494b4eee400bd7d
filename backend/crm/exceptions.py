"""
Domain errors raised by the CRM services.

  ValidationError  → 400  missing/invalid field, unknown enum value
  NotFoundError    → 404  unknown lead id, unmatched referral code
  PersistenceError → 500  the database rejected a primary read/write

The HTTP mapping lives in crm.api.exception_handler.
"""
from rest_framework import status


class CRMError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(CRMError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class NotFoundError(CRMError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class PersistenceError(CRMError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Database operation failed"

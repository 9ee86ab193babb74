"""
Application error taxonomy.

Services raise these; the handlers registered in app.main turn them into
JSON responses. ReconciliationError never reaches a client: the webhook path
logs it and acknowledges the event. Any other failure while applying an event
becomes a WebhookProcessingError so Stripe retries the delivery.
"""
from fastapi import status


class AppError(Exception):
    """Operational error carrying the HTTP status it should map to."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthorizationError(AppError):
    # Not-found and not-owned share this error so other users' records stay invisible
    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT


class GatewayError(AppError):
    status_code = status.HTTP_502_BAD_GATEWAY


class ReconciliationError(AppError):
    """An inbound gateway event that cannot be matched to a local record."""


class WebhookProcessingError(AppError):
    """A verified event failed to apply; the 5xx makes Stripe redeliver it."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

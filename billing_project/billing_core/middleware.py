import logging

from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

from .authentication import user_from_token
from .exceptions import (AuthenticationFailed, EntityNotFound, NumberConflict,
                         RateLimited)

logger = logging.getLogger(__name__)


class JWTAuthenticationMiddleware(MiddlewareMixin):
    # Run on every request and
    # swap request.user for the owner of a valid bearer token
    def process_request(self, request):
        header = request.META.get("HTTP_AUTHORIZATION", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token:
            return None  # session/anonymous user stays as-is
        try:
            request.user = user_from_token(token.strip())
        except AuthenticationFailed as exc:
            # a bad token never falls back to the session user
            return _error_response(request, exc, 401)
        # token callers don't carry CSRF cookies
        request._dont_enforce_csrf_checks = True
        return None


def _messages(exc):
    if isinstance(exc, ValidationError):
        return list(exc.messages)
    return [str(exc)]


def _error_response(request, exc, status):
    messages = _messages(exc)
    log = logger.warning if status < 500 else logger.error
    log("%s %s -> %s: %s", request.method, request.path, status, "; ".join(messages))

    body = {"success": False,
            "message": messages[0] if len(messages) == 1 else "Validation failed"}
    if len(messages) > 1:
        body["errors"] = messages
    if isinstance(exc, ValidationError) and hasattr(exc, "error_dict"):
        body["fields"] = exc.message_dict
    return JsonResponse(body, status=status)


class BillingErrorMiddleware(MiddlewareMixin):
    """Map billing errors raised by views to JSON error responses."""

    # PolicyViolation is a ValidationError, so both land on 400
    STATUS_BY_ERROR = (
        (AuthenticationFailed, 401),
        (EntityNotFound, 404),
        (NumberConflict, 409),
        (RateLimited, 429),
        (ValidationError, 400),
    )

    def process_exception(self, request, exception):
        for error_class, status in self.STATUS_BY_ERROR:
            if isinstance(exception, error_class):
                return _error_response(request, exception, status)
        return None  # anything else goes to Django's 500 handling

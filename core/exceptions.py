from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.views import exception_handler

ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "VALIDATION_ERROR",
    status.HTTP_401_UNAUTHORIZED: "NOT_AUTHENTICATED",
    status.HTTP_403_FORBIDDEN: "NOT_AUTHORIZED",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    status.HTTP_409_CONFLICT: "CONFLICT",
    status.HTTP_422_UNPROCESSABLE_ENTITY: "BUSINESS_RULE_VIOLATION",
    status.HTTP_429_TOO_MANY_REQUESTS: "RATE_LIMIT_EXCEEDED",
    status.HTTP_503_SERVICE_UNAVAILABLE: "SERVICE_UNAVAILABLE",
}


class BusinessLogicError(APIException):
    """
    A marketplace rule refused the operation (empty cart, exhausted coupon,
    out of stock...). ``internal_code`` lets clients branch without parsing
    the message and ``extra`` is exposed under ``meta``.
    """
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "Business rule not satisfied."
    default_code = "BUSINESS_LOGIC_ERROR"

    def __init__(self, detail=None, *, internal_code=None, status_code=None, extra=None):
        body = {"detail": detail or self.default_detail}
        if internal_code:
            body["code"] = internal_code
        if extra:
            body["meta"] = extra
        if status_code:
            self.status_code = status_code
        super().__init__(body, self.default_code)


class ResourceConflictError(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The resource is in a state that does not allow this operation."
    default_code = "RESOURCE_CONFLICT"


class ServiceUnavailableError(APIException):
    """An external service is not configured or not reachable."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "The service is temporarily unavailable."
    default_code = "SERVICE_UNAVAILABLE"


def _as_drf_error(exc):
    # Model validators raise Django's ValidationError from full_clean()
    if isinstance(exc, DjangoValidationError):
        if hasattr(exc, "error_dict"):
            return ValidationError(exc.message_dict)
        return ValidationError(exc.messages)
    return exc


def _error_body(status_code, data):
    body = {"status_code": status_code, "error": ERROR_CODES.get(status_code, "SERVER_ERROR")}

    if isinstance(data, list):
        body["detail"] = "Error"
        body["errors"] = {"non_field_errors": data}
        return body

    body["detail"] = data.get("detail") or "Error"
    if "code" in data:
        body["code"] = data["code"]
    errors = {key: value for key, value in data.items() if key not in ("detail", "code")}
    if errors:
        body["errors"] = errors
    return body


def drf_exception_handler(exc, context):
    """
    DRF ``EXCEPTION_HANDLER``: every API error body becomes
    ``{"status_code", "error", "detail", "code"?, "errors"?}``.

    Exceptions DRF does not know about are left to Django (plain 500).
    """
    response = exception_handler(_as_drf_error(exc), context)
    if response is None:
        return None
    response.data = _error_body(response.status_code, response.data)
    return response

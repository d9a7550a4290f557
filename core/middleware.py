import logging
import time
import uuid
from contextvars import ContextVar

from django.conf import settings
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Read by core.logging_filters.RequestIDFilter so log lines carry the id
current_request_id = ContextVar("current_request_id", default="-")


class RequestIDMiddleware(MiddlewareMixin):
    """
    Tags every request with an X-Request-ID (the caller's, or a fresh UUID)
    and echoes it back on the response.
    """

    def process_request(self, request):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.request_id = request_id
        request._request_id_token = current_request_id.set(request_id)

    def process_response(self, request, response):
        request_id = getattr(request, "request_id", None)
        if request_id:
            response[REQUEST_ID_HEADER] = request_id
        token = getattr(request, "_request_id_token", None)
        if token is not None:
            current_request_id.reset(token)
        return response


class PerformanceLoggingMiddleware(MiddlewareMixin):
    """
    Adds X-Response-Time and warns about requests slower than
    ``SLOW_REQUEST_THRESHOLD`` seconds (default 1.0).
    """

    def process_request(self, request):
        request._started_at = time.perf_counter()

    def process_response(self, request, response):
        started_at = getattr(request, "_started_at", None)
        if started_at is None:
            return response

        elapsed = time.perf_counter() - started_at
        if elapsed > getattr(settings, "SLOW_REQUEST_THRESHOLD", 1.0):
            user = getattr(request, "user", None)
            logger.warning(
                "Slow request %s %s took %.2fs (status %s, user %s)",
                request.method,
                request.path,
                elapsed,
                response.status_code,
                user.pk if user is not None and user.is_authenticated else "anonymous",
            )

        response["X-Response-Time"] = f"{elapsed:.3f}s"
        return response

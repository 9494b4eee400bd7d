"""Request logging — one line per request with status and duration."""
import logging
import time

logger = logging.getLogger("crm.requests")


class RequestLogMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        started = time.monotonic()
        response = self.get_response(request)
        duration_ms = (time.monotonic() - started) * 1000

        log = logger.warning if response.status_code >= 400 else logger.info
        log(
            "%s %s %s %.0fms - %s",
            request.method,
            request.get_full_path(),
            response.status_code,
            duration_ms,
            request.META.get("REMOTE_ADDR", "-"),
        )
        return response

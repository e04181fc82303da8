import logging
import time

from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger(__name__)


class RequestLogMiddleware(MiddlewareMixin):
    """
    Logs every API request with its method, path, origin and timing.
    Non-API paths (admin, static) are left alone.
    """

    def process_request(self, request):
        request._started_at = time.monotonic()

    def process_response(self, request, response):
        if not request.path.startswith('/api/'):
            return response

        started = getattr(request, '_started_at', None)
        elapsed_ms = int((time.monotonic() - started) * 1000) if started else 0
        origin = request.headers.get('Origin', 'no-origin')

        logger.info(
            "%s %s -> %s (%sms, origin=%s)",
            request.method, request.path, response.status_code, elapsed_ms, origin,
        )
        return response

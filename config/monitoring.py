"""
Request logging middleware for the API.
"""
import logging
import time

from django.conf import settings
from django.db import connection
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger(__name__)

SKIPPED_PREFIXES = ('/admin/', '/static/', '/media/')

# Request bodies on these paths carry credentials
SENSITIVE_SUFFIXES = ('/auth/token/', '/auth/token/refresh/')


class QueryCountDebugMiddleware(MiddlewareMixin):
    """
    Logs the number of queries run and the total time they took.
    Only active with DEBUG, since Django records queries only then.
    """
    def process_response(self, request, response):
        if settings.DEBUG:
            total_time = 0
            queries = connection.queries
            for query in queries:
                total_time += float(query.get('time') or 0)

            logger.debug(
                "[SQL] %s %s | %s queries | %.3fs",
                request.method,
                request.path,
                len(queries),
                total_time
            )
        return response


class RequestResponseLogMiddleware(MiddlewareMixin):
    """
    Logs request and response details for API monitoring.
    """
    def process_request(self, request):
        if request.path.startswith(SKIPPED_PREFIXES):
            return None

        request.start_time = time.monotonic()

        if request.path.endswith(SENSITIVE_SUFFIXES):
            params = {}
        else:
            params = dict(request.GET)

        logger.info(
            "[REQUEST] %s %s | User: %s | Params: %s",
            request.method,
            request.path,
            getattr(request, 'user', 'Anonymous'),
            params
        )
        return None

    def process_response(self, request, response):
        if request.path.startswith(SKIPPED_PREFIXES):
            return response

        duration = 0
        if hasattr(request, 'start_time'):
            duration = time.monotonic() - request.start_time

        log = logger.warning if response.status_code >= 400 else logger.info
        log(
            "[RESPONSE] %s %s | Status: %s | Duration: %.2fs | User: %s",
            request.method,
            request.path,
            response.status_code,
            duration,
            getattr(request, 'user', 'Anonymous')
        )

        response['X-Request-Duration'] = f"{duration:.2f}"
        return response

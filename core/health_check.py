import logging
import time

from django.conf import settings
from django.db import DatabaseError, connection
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.cache import never_cache
from django.views.decorators.http import require_http_methods

logger = logging.getLogger(__name__)

SLOW_QUERY_MS = 100


@never_cache
@require_http_methods(["GET", "HEAD"])
def health_check(request):
    """
    Health check endpoint for uptime monitoring.
    Returns 200 when the database answers, 503 when it does not.
    """
    payload = {
        'status': 'healthy',
        'timestamp': timezone.now().isoformat(),
        'version': getattr(settings, 'APP_VERSION', '0.1.0'),
        'checks': {'database': 'unknown'},
    }

    try:
        started = time.monotonic()
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
            cursor.fetchone()
        latency_ms = (time.monotonic() - started) * 1000

        payload['checks']['database'] = 'healthy' if latency_ms < SLOW_QUERY_MS else 'slow'
        payload['database_latency_ms'] = round(latency_ms, 1)
        return JsonResponse(payload, status=200)

    except DatabaseError as e:
        logger.error(f"Health check failed: {str(e)}")
        payload['status'] = 'unhealthy'
        payload['checks']['database'] = 'error'
        payload['error'] = str(e)
        return JsonResponse(payload, status=503)

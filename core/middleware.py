# core/middleware.py
"""
Request throttling and security headers applied to every request.
"""
import logging

from django.conf import settings
from django.http import JsonResponse

from .ratelimit import build_rate_limiter
from .utils import get_client_ip

logger = logging.getLogger(__name__)


class RateLimitMiddleware:
    """
    Reject clients that exceed the request budget with HTTP 429.

    The limiter is built from settings.RATE_LIMIT when the middleware is
    instantiated; pass one explicitly to share or replace its backend.
    """

    def __init__(self, get_response, limiter=None):
        self.get_response = get_response
        self.limiter = limiter if limiter is not None else build_rate_limiter()

    def __call__(self, request):
        if self.limiter is not None:
            client_ip = get_client_ip(request)
            if not self.limiter.allow(client_ip):
                logger.warning('Rate limit exceeded for %s on %s', client_ip, request.path)
                return JsonResponse(
                    {'error': 'Too many requests. Please try again later.'},
                    status=429
                )

        response = self.get_response(request)

        policy = getattr(settings, 'CONTENT_SECURITY_POLICY', '')
        if policy and 'Content-Security-Policy' not in response:
            response['Content-Security-Policy'] = policy

        return response

# users/middleware.py
import time

from .providers import get_session_policy

SESSION_REFRESHED_KEY = '_session_refreshed_at'


class SessionRefreshMiddleware:
    """
    Push an authenticated session's expiry forward, at most once per
    SESSION_REFRESH_AGE, so active users stay signed in for SESSION_COOKIE_AGE
    after their last visit without rewriting the session on every request.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        user = getattr(request, 'user', None)
        if user is not None and user.is_authenticated:
            policy = get_session_policy()
            now = time.time()
            refreshed_at = request.session.get(SESSION_REFRESHED_KEY, 0)
            if now - refreshed_at >= policy['update_age']:
                request.session.set_expiry(policy['expires_in'])
                request.session[SESSION_REFRESHED_KEY] = now

        return self.get_response(request)

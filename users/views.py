#users/views.py
import logging

from django.contrib.auth import authenticate, login, logout
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.views.decorators.cache import never_cache
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from core.utils import parse_request_data

from .providers import get_identity_providers, get_session_policy

logger = logging.getLogger(__name__)


@never_cache
@require_http_methods(["GET", "POST"])
def login_view(request):
    """
    GET lists the sign-in options; POST signs in with username and password.
    """
    if request.method == 'GET':
        return JsonResponse({
            'email_password': True,
            'providers': [provider.as_public_dict() for provider in get_identity_providers()],
        })

    try:
        data = parse_request_data(request)
        username = (data.get('username') or '').strip()
        password = data.get('password') or ''
    except (ValueError, AttributeError):
        return JsonResponse({'success': False, 'error': 'Invalid data format'}, status=400)

    if not username or not password:
        return JsonResponse({'success': False, 'error': 'Username and password are required.'}, status=400)

    user = authenticate(request, username=username, password=password)
    if user is None:
        logger.warning('Failed login attempt for %s', username)
        return JsonResponse({'success': False, 'error': 'Invalid username or password.'}, status=401)

    login(request, user)
    logger.info('User %s logged in', user.username)
    return JsonResponse({
        'success': True,
        'data': {
            'username': user.username,
            'full_name': user.full_name,
            'session': get_session_policy(),
        },
    })


@never_cache
@require_POST
@login_required
def logout_view(request):
    """Log out and clear the session"""
    username = request.user.username
    logout(request)
    logger.info('User %s logged out', username)

    response = JsonResponse({'success': True})
    response['Cache-Control'] = 'no-cache, no-store, must-revalidate, max-age=0, private'
    response['Pragma'] = 'no-cache'
    response['Expires'] = '0'
    return response


@never_cache
@require_GET
@login_required
def current_session(request):
    """Identity and module permissions of the signed-in user"""
    user = request.user
    return JsonResponse({
        'success': True,
        'data': {
            'username': user.username,
            'full_name': user.full_name,
            'role': user.role.name if user.role else None,
            'is_superuser': user.is_superuser,
            'session_expires_at': request.session.get_expiry_date().isoformat(),
        },
    })

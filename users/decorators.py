# users/decorators.py
from functools import wraps

from django.http import JsonResponse


def permission_required_json(module_name):
    """Answer 403 JSON unless the signed-in user may access module_name"""
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            if not hasattr(request.user, 'has_permission') or not request.user.has_permission(module_name):
                return JsonResponse({'success': False, 'error': 'Permission denied'}, status=403)
            return view_func(request, *args, **kwargs)
        return wrapper
    return decorator

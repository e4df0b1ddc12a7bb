# core/signals.py
"""
Cache invalidation for UI routes.

Every successful write sends `paths_invalidated` once, naming the routes whose
rendered data is now stale. The receiver below drops the cached payloads kept
for those routes.
"""
import logging

from django.core.cache import cache
from django.dispatch import Signal, receiver

logger = logging.getLogger(__name__)

paths_invalidated = Signal()

DASHBOARD_PATH = '/dashboard'


def page_cache_key(path):
    return f'page:{path.rstrip("/") or "/"}'


def revalidate_path(*paths, sender=None):
    """Announce that the data behind the given UI routes changed"""
    paths_invalidated.send(sender=sender, paths=tuple(paths))


@receiver(paths_invalidated, dispatch_uid='drop_cached_pages')
def drop_cached_pages(sender, paths, **kwargs):
    cache.delete_many([page_cache_key(path) for path in paths])
    logger.debug('Invalidated cached routes: %s', ', '.join(paths))

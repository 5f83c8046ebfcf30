"""Django signals for cache invalidation."""

from django.core.cache import cache
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from events.cache_keys import EVENT_LIST_KEY, event_detail_key
from events.models import Event


@receiver([post_save, post_delete], sender=Event)
def invalidate_event_cache(sender, instance, **kwargs):
    """Invalidate caches when an event is saved or deleted."""
    cache.delete_many([EVENT_LIST_KEY, event_detail_key(instance.pk)])

# apps/reports/services.py
from django.contrib.contenttypes.models import ContentType
from loguru import logger

from .models import ActivityLog


class ActivityLogger:
    @staticmethod
    def log(actor_id, model_class, object_id, action_type, description="", details=None):
        """
        Uniwersalna metoda do logowania zdarzeń.
        Przyjmuje klasę modelu i ID, bo obiekt mógł już zostać usunięty.
        """
        entry = ActivityLog.objects.create(
            actor_id=actor_id,
            content_type=ContentType.objects.get_for_model(model_class),
            object_id=object_id,
            action_type=action_type,
            description=description,
            details=details or {}
        )
        logger.debug(f"Dziennik: {action_type} {model_class.__name__}#{object_id} (actor={actor_id})")
        return entry

    @staticmethod
    def recent(limit=50, model_class=None, object_id=None):
        qs = ActivityLog.objects.select_related('actor', 'content_type')
        if model_class is not None:
            qs = qs.filter(content_type=ContentType.objects.get_for_model(model_class))
            if object_id is not None:
                qs = qs.filter(object_id=object_id)
        return list(qs[:limit])

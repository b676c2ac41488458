# apps/tasks/signals.py
from django.db.models.signals import pre_save
from django.dispatch import receiver
from django.utils import timezone
from loguru import logger

from apps.projects.domain.time_tracking import clamp_hours
from apps.projects.models import Project
from .domain.entities import TaskStatus
from .models import Task


@receiver(pre_save, sender=Task)
def stamp_task_completion(sender, instance, **kwargs):
    """
    Pierwsze wejście w Completed ustawia completed_at (także przy zapisie z Admina).
    Znacznik ustawiony wcześniej przez serwis zostaje bez zmian.
    """
    if instance.status != TaskStatus.COMPLETED.value or instance.completed_at:
        return

    old_status = None
    if instance.id:
        old_status = Task.objects.filter(id=instance.id).values_list('status', flat=True).first()

    if old_status != TaskStatus.COMPLETED.value:
        instance.completed_at = timezone.now()


@receiver(pre_save, sender=Project)
def clamp_project_hours(sender, instance, **kwargs):
    """Czas wykorzystany nigdy nie jest ujemny ani NaN."""
    clamped = clamp_hours(instance.used_hours)
    if clamped != instance.used_hours:
        logger.warning(f"Projekt {instance.id}: used_hours={instance.used_hours!r} poza zakresem - zapisuję {clamped}")
        instance.used_hours = clamped

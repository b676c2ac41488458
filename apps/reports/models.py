# apps/reports/models.py
from django.db import models
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType

from apps.reports.ports.audit import AuditAction


class ActivityLog(models.Model):
    # Kto? (brak = akcja systemowa)
    actor = models.ForeignKey(
        'core.Member',
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='activity'
    )

    # Co zrobił? (Typ akcji)
    class ActionType(models.TextChoices):
        CREATED = AuditAction.CREATED.value, 'Created'
        UPDATED = AuditAction.UPDATED.value, 'Updated'
        STATUS_CHANGE = AuditAction.STATUS_CHANGE.value, 'Status change'
        COMPLETED = AuditAction.COMPLETED.value, 'Completed'
        DELETED = AuditAction.DELETED.value, 'Deleted'
        TIMER = AuditAction.TIMER.value, 'Timer'
        USAGE_LOGGED = AuditAction.USAGE_LOGGED.value, 'Usage logged'

    action_type = models.CharField(max_length=20, choices=ActionType.choices)

    # Na czym? (Generic Relation - obiekt mógł zostać usunięty)
    content_type = models.ForeignKey(ContentType, on_delete=models.CASCADE)
    object_id = models.PositiveIntegerField()
    content_object = GenericForeignKey('content_type', 'object_id')

    description = models.TextField(blank=True)

    # Metadane (JSON - np. {"old_status": "Started", "new_status": "Blocked"})
    details = models.JSONField(default=dict, blank=True)

    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-timestamp', '-id']
        indexes = [
            models.Index(fields=['content_type', 'object_id'], name='reports_activity_target_idx'),
        ]

    def __str__(self):
        return f"{self.actor} - {self.action_type} - {self.timestamp}"

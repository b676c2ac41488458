# apps/tasks/models.py
from django.db import models

from apps.tasks.domain.entities import Severity, TaskPriority, TaskStatus, TaskType


class Task(models.Model):
    title = models.CharField(max_length=200)
    code = models.CharField(max_length=50, blank=True)
    description = models.TextField(blank=True)

    # Używamy TextChoices dla wygody w Adminie, ale mapujemy to na Enum domenowy
    class StatusChoices(models.TextChoices):
        NOT_STARTED = TaskStatus.NOT_STARTED.value, 'Not started'
        IN_PROGRESS = TaskStatus.IN_PROGRESS.value, 'In progress'
        ON_HOLD = TaskStatus.ON_HOLD.value, 'On hold'
        BLOCKED = TaskStatus.BLOCKED.value, 'Blocked'
        USER_TESTING = TaskStatus.USER_TESTING.value, 'User - Testing'
        UPDATE = TaskStatus.UPDATE.value, 'Update'
        COMPLETED = TaskStatus.COMPLETED.value, 'Completed'

    class TypeChoices(models.TextChoices):
        TASK = TaskType.TASK.value, 'Task'
        RISK = TaskType.RISK.value, 'Risk (BLOCKED)'
        ISSUE = TaskType.ISSUE.value, 'Issue'

    class SeverityChoices(models.TextChoices):
        CRITICAL = Severity.CRITICAL.value, 'Critical'
        HIGH = Severity.HIGH.value, 'High'
        MEDIUM = Severity.MEDIUM.value, 'Medium'
        LOW = Severity.LOW.value, 'Low'

    class PriorityChoices(models.TextChoices):
        LOW = TaskPriority.LOW.value, 'Low'
        MEDIUM = TaskPriority.MEDIUM.value, 'Medium'
        HIGH = TaskPriority.HIGH.value, 'High'
        URGENT = TaskPriority.URGENT.value, 'Urgent'

    status = models.CharField(
        max_length=30,
        choices=StatusChoices.choices,
        default=StatusChoices.NOT_STARTED
    )
    type = models.CharField(max_length=10, choices=TypeChoices.choices, default=TypeChoices.TASK)
    # Tylko dla risk/issue
    severity = models.CharField(max_length=10, choices=SeverityChoices.choices, null=True, blank=True)
    priority = models.CharField(max_length=10, choices=PriorityChoices.choices, default=PriorityChoices.MEDIUM)

    project = models.ForeignKey(
        'projects.Project',
        on_delete=models.CASCADE,
        related_name='tasks'
    )
    assignee = models.ForeignKey(
        'core.Member',
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='assigned_tasks'
    )
    deadline = models.DateField(null=True, blank=True)

    # Wypełniane przy ukończeniu
    completed_at = models.DateTimeField(null=True, blank=True)
    time_spent = models.FloatField(null=True, blank=True)
    time_saved = models.FloatField(null=True, blank=True)
    completion_reference = models.CharField(max_length=255, blank=True)

    status_reason = models.TextField(blank=True)
    comments = models.TextField(blank=True)
    user_requirements = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['deadline', 'id']

    def __str__(self):
        return self.title

# apps/projects/models.py
from django.db import models

from apps.projects.domain.entities import ProjectFrequency, ProjectStatus, RiskLevel


class Project(models.Model):
    name = models.CharField(max_length=200)
    code = models.CharField(max_length=50, blank=True)
    description = models.TextField(blank=True)

    # Używamy TextChoices dla wygody w Adminie, ale mapujemy to na Enum domenowy
    class StatusChoices(models.TextChoices):
        NOT_STARTED = ProjectStatus.NOT_STARTED.value, 'Not started'
        STARTED = ProjectStatus.STARTED.value, 'Started'
        USER_TESTING = ProjectStatus.USER_TESTING.value, 'User - Testing'
        UPDATE = ProjectStatus.UPDATE.value, 'Update'
        BLOCKED = ProjectStatus.BLOCKED.value, 'Blocked'
        COMPLETED = ProjectStatus.COMPLETED.value, 'Completed'
        COMPLETED_BLOCKED = ProjectStatus.COMPLETED_BLOCKED.value, 'Completed Blocked'
        COMPLETED_NOT_SATISFIED = ProjectStatus.COMPLETED_NOT_SATISFIED.value, 'Completed, Not Satisfied'

    class RiskChoices(models.TextChoices):
        LOW = RiskLevel.LOW.value, 'Low'
        MEDIUM = RiskLevel.MEDIUM.value, 'Medium'
        HIGH = RiskLevel.HIGH.value, 'High'

    class FrequencyChoices(models.TextChoices):
        DAILY = ProjectFrequency.DAILY.value, 'Daily'
        WEEKLY = ProjectFrequency.WEEKLY.value, 'Weekly'
        TWICE_A_MONTH = ProjectFrequency.TWICE_A_MONTH.value, 'Twice a month'
        THREE_WEEKS_ONCE = ProjectFrequency.THREE_WEEKS_ONCE.value, '3 weeks once'
        MONTHLY = ProjectFrequency.MONTHLY.value, 'Monthly'
        SPECIFIC_DATES = ProjectFrequency.SPECIFIC_DATES.value, 'Specific Dates'

    status = models.CharField(
        max_length=30,
        choices=StatusChoices.choices,
        default=StatusChoices.NOT_STARTED
    )

    # Hierarchia (Podprojekty) - usuwanie kaskadowe robi repozytorium
    parent_project = models.ForeignKey(
        'self',
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='subprojects'
    )
    weight = models.FloatField(null=True, blank=True, help_text="% udziału w postępie rodzica")

    lead = models.ForeignKey(
        'core.Member',
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='led_projects'
    )
    phase = models.CharField(max_length=100, blank=True)

    # Czas (godziny)
    allocated_hours = models.FloatField(default=0)
    used_hours = models.FloatField(default=0)
    additional_hours = models.FloatField(default=0)
    saved_hours = models.FloatField(default=0)
    expected_saved_hours = models.FloatField(default=0)
    # Obecność = licznik działa (lokalny czas bez strefy)
    timer_start_time = models.DateTimeField(null=True, blank=True)

    # Terminy
    start_date = models.DateField(null=True, blank=True)
    target_end_date = models.DateField(null=True, blank=True)
    milestone_date = models.DateField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    risk_level = models.CharField(max_length=10, choices=RiskChoices.choices, default=RiskChoices.LOW)
    overage_reason = models.TextField(blank=True)

    # Dane z okien potwierdzeń
    frequency = models.CharField(max_length=30, choices=FrequencyChoices.choices, null=True, blank=True)
    frequency_detail = models.CharField(max_length=255, blank=True)
    tools_used = models.JSONField(default=list, blank=True)
    end_user_feedback = models.JSONField(null=True, blank=True)
    latest_comments = models.JSONField(null=True, blank=True)
    # Lista {"userId", "date", "savedHours"}
    last_used_by = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.code} {self.name}".strip()

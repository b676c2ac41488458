import django_filters
from django import forms
from django.db.models import Q

from apps.projects.models import Project
from .domain.entities import TaskStatus, TaskType
from .models import Task


class RiskIssueFilter(django_filters.FilterSet):
    title = django_filters.CharFilter(
        lookup_expr='icontains',
        label="Tytuł zawiera",
        widget=forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'Szukaj...'})
    )
    type = django_filters.ChoiceFilter(
        choices=[(TaskType.RISK.value, 'Risk (BLOCKED)'), (TaskType.ISSUE.value, 'Issue')],
        label="Rodzaj",
        widget=forms.Select(attrs={'class': 'form-select'})
    )
    severity = django_filters.ChoiceFilter(
        choices=Task.SeverityChoices.choices,
        label="Ważność",
        widget=forms.Select(attrs={'class': 'form-select'})
    )
    status = django_filters.ChoiceFilter(
        choices=Task.StatusChoices.choices,
        label="Status",
        widget=forms.Select(attrs={'class': 'form-select'})
    )
    project = django_filters.ModelChoiceFilter(
        queryset=Project.objects.all(),
        label="Projekt",
        widget=forms.Select(attrs={'class': 'form-select'})
    )
    # Projekt razem z podprojektami (widok "ryzyka projektu" z karty rodzica)
    project_tree = django_filters.NumberFilter(method='filter_project_tree', label="Projekt i podprojekty")
    active = django_filters.BooleanFilter(method='filter_active', label="Tylko otwarte")

    class Meta:
        model = Task
        fields = ['assignee']

    def filter_project_tree(self, queryset, name, value):
        return queryset.filter(
            Q(project_id=value) | Q(project__parent_project_id=value)
        )

    def filter_active(self, queryset, name, value):
        if value:
            return queryset.exclude(status=TaskStatus.COMPLETED.value)
        return queryset.filter(status=TaskStatus.COMPLETED.value)

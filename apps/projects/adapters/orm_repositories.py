# apps/projects/adapters/orm_repositories.py
from enum import Enum
from typing import List, Optional

from django.db import transaction
from loguru import logger

from apps.projects.domain.entities import ProjectEntity, ProjectFrequency, ProjectStatus, RiskLevel
from apps.projects.domain.time_tracking import clamp_hours
from apps.projects.models import Project as ProjectModel
from apps.projects.ports.repositories import IProjectRepository, ProjectNotFound
from apps.tasks.models import Task as TaskModel

# Pole encji -> kolumna modelu
FIELD_MAP = {
    'name': 'name',
    'code': 'code',
    'status': 'status',
    'parent_id': 'parent_project_id',
    'weight': 'weight',
    'allocated_hours': 'allocated_hours',
    'used_hours': 'used_hours',
    'additional_hours': 'additional_hours',
    'saved_hours': 'saved_hours',
    'timer_start_time': 'timer_start_time',
    'milestone_date': 'milestone_date',
    'completed_at': 'completed_at',
    'risk_level': 'risk_level',
    'overage_reason': 'overage_reason',
    'lead_id': 'lead_id',
    'phase': 'phase',
    'frequency': 'frequency',
    'frequency_detail': 'frequency_detail',
    'tools_used': 'tools_used',
    'end_user_feedback': 'end_user_feedback',
    'latest_comments': 'latest_comments',
    'last_used_by': 'last_used_by',
}


def _column_value(value):
    # Enumy domenowe zapisujemy jako ich wartości tekstowe
    return value.value if isinstance(value, Enum) else value


class DjangoProjectRepository(IProjectRepository):
    def to_entity(self, model: ProjectModel) -> ProjectEntity:
        """Konwertuje Model Django -> Czystą Encję."""
        return ProjectEntity(
            id=model.id,
            name=model.name,
            code=model.code,
            status=ProjectStatus(model.status),
            parent_id=model.parent_project_id,
            weight=model.weight,
            allocated_hours=clamp_hours(model.allocated_hours),
            used_hours=clamp_hours(model.used_hours),
            additional_hours=clamp_hours(model.additional_hours),
            saved_hours=clamp_hours(model.saved_hours),
            timer_start_time=model.timer_start_time,
            milestone_date=model.milestone_date,
            completed_at=model.completed_at,
            risk_level=RiskLevel(model.risk_level),
            overage_reason=model.overage_reason,
            lead_id=model.lead_id,
            phase=model.phase,
            frequency=ProjectFrequency(model.frequency) if model.frequency else None,
            frequency_detail=model.frequency_detail,
            tools_used=list(model.tools_used or []),
            end_user_feedback=model.end_user_feedback,
            latest_comments=model.latest_comments,
            last_used_by=list(model.last_used_by or []),
        )

    def get_by_id(self, project_id: int) -> Optional[ProjectEntity]:
        try:
            project = ProjectModel.objects.get(id=project_id)
            return self.to_entity(project)
        except ProjectModel.DoesNotExist:
            return None

    def list_all(self) -> List[ProjectEntity]:
        return [self.to_entity(p) for p in ProjectModel.objects.all()]

    def create(self, project: ProjectEntity) -> ProjectEntity:
        data = {
            column: _column_value(getattr(project, name))
            for name, column in FIELD_MAP.items()
        }
        data['used_hours'] = clamp_hours(data['used_hours'])
        obj = ProjectModel.objects.create(**data)
        return self.to_entity(obj)

    def update(self, project_id: int, fields: dict) -> ProjectEntity:
        data = {}
        for name, value in fields.items():
            column = FIELD_MAP.get(name)
            if column is None:
                logger.warning(f"Projekt {project_id}: pomijam nieznane pole '{name}'")
                continue
            data[column] = _column_value(value)

        if not data:
            raise ValueError("No valid fields to update")
        if 'used_hours' in data:
            data['used_hours'] = clamp_hours(data['used_hours'])

        # save() zamiast queryset.update(), żeby zadziałały sygnały pre_save
        try:
            obj = ProjectModel.objects.get(id=project_id)
        except ProjectModel.DoesNotExist:
            raise ProjectNotFound(f"Project {project_id} not found")
        for column, value in data.items():
            setattr(obj, column, value)
        obj.save()
        return self.to_entity(obj)

    @transaction.atomic
    def delete(self, project_id: int) -> List[int]:
        if not ProjectModel.objects.filter(id=project_id).exists():
            raise ProjectNotFound(f"Project {project_id} not found")

        child_ids = list(ProjectModel.objects.filter(parent_project_id=project_id).values_list('id', flat=True))
        ids = [project_id] + child_ids

        TaskModel.objects.filter(project_id__in=ids).delete()
        ProjectModel.objects.filter(id__in=ids).delete()
        return ids

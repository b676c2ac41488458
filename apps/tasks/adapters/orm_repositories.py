# apps/tasks/adapters/orm_repositories.py
from enum import Enum
from typing import List, Optional

from loguru import logger

from apps.tasks.domain.entities import Severity, TaskEntity, TaskPriority, TaskStatus, TaskType
from apps.tasks.models import Task as TaskModel
from apps.tasks.ports.repositories import ITaskRepository

# Pole encji -> kolumna modelu
FIELD_MAP = {
    'title': 'title',
    'project_id': 'project_id',
    'description': 'description',
    'status': 'status',
    'type': 'type',
    'severity': 'severity',
    'priority': 'priority',
    'assignee_id': 'assignee_id',
    'deadline': 'deadline',
    'completed_at': 'completed_at',
    'time_spent': 'time_spent',
    'time_saved': 'time_saved',
    'completion_reference': 'completion_reference',
    'status_reason': 'status_reason',
    'comments': 'comments',
    'user_requirements': 'user_requirements',
}


class DjangoTaskRepository(ITaskRepository):
    def to_entity(self, model: TaskModel) -> TaskEntity:
        """Konwertuje Model Django -> Czystą Encję."""
        return TaskEntity(
            id=model.id,
            title=model.title,
            project_id=model.project_id,
            description=model.description,
            status=TaskStatus(model.status),
            type=TaskType(model.type),
            severity=Severity(model.severity) if model.severity else None,
            priority=TaskPriority(model.priority),
            assignee_id=model.assignee_id,
            deadline=model.deadline,
            completed_at=model.completed_at,
            time_spent=model.time_spent,
            time_saved=model.time_saved,
            completion_reference=model.completion_reference,
            status_reason=model.status_reason,
            comments=model.comments,
            user_requirements=model.user_requirements,
        )

    def _to_data(self, fields: dict) -> dict:
        data = {}
        for name, value in fields.items():
            column = FIELD_MAP.get(name)
            if column is None:
                logger.warning(f"Zadanie: pomijam nieznane pole '{name}'")
                continue
            data[column] = value.value if isinstance(value, Enum) else value
        return data

    def get_by_id(self, task_id: int) -> Optional[TaskEntity]:
        try:
            task = TaskModel.objects.get(id=task_id)
            return self.to_entity(task)
        except TaskModel.DoesNotExist:
            return None

    def list_all(self) -> List[TaskEntity]:
        return [self.to_entity(t) for t in TaskModel.objects.all()]

    def filter_by_project(self, project_ids: List[int]) -> List[TaskEntity]:
        qs = TaskModel.objects.filter(project_id__in=project_ids)
        return [self.to_entity(t) for t in qs]

    def save(self, task: TaskEntity) -> TaskEntity:
        data = self._to_data({name: getattr(task, name) for name in FIELD_MAP})
        # Ważność tylko dla risk/issue
        if task.type == TaskType.TASK:
            data['severity'] = None

        if task.id:
            # Aktualizacja istniejącego
            obj = TaskModel.objects.get(id=task.id)
            for column, value in data.items():
                setattr(obj, column, value)
            obj.save()
        else:
            obj = TaskModel.objects.create(**data)

        return self.to_entity(obj)

    def update(self, task_id: int, fields: dict) -> TaskEntity:
        data = self._to_data(fields)
        if not data:
            raise ValueError("No valid fields to update")

        try:
            obj = TaskModel.objects.get(id=task_id)
        except TaskModel.DoesNotExist:
            raise ValueError("Task not found")
        for column, value in data.items():
            setattr(obj, column, value)
        obj.save()
        return self.to_entity(obj)

"""Shared fixtures: in-memory repositories and team members."""

import dataclasses
from datetime import datetime
from typing import Dict, List, Optional

import pytest

from apps.core.domain.roles import CurrentUser, Role
from apps.projects.domain.entities import ProjectEntity
from apps.projects.ports.repositories import IProjectRepository, ProjectNotFound
from apps.reports.ports.audit import IAuditTrail
from apps.tasks.domain.entities import TaskEntity
from apps.tasks.ports.repositories import ITaskRepository


class InMemoryTaskRepository(ITaskRepository):
    def __init__(self, tasks: Optional[List[TaskEntity]] = None):
        self.rows: Dict[int, TaskEntity] = {}
        self._next_id = 1
        for task in tasks or []:
            self.save(task)

    def get_by_id(self, task_id):
        task = self.rows.get(task_id)
        return dataclasses.replace(task) if task else None

    def list_all(self):
        return [dataclasses.replace(t) for t in self.rows.values()]

    def save(self, task):
        if task.id is None:
            task = dataclasses.replace(task, id=self._next_id)
        self._next_id = max(self._next_id, task.id + 1)
        self.rows[task.id] = dataclasses.replace(task)
        return dataclasses.replace(task)

    def update(self, task_id, fields):
        if task_id not in self.rows:
            raise ValueError("Task not found")
        valid = {k: v for k, v in fields.items() if hasattr(self.rows[task_id], k) and k != 'id'}
        if not valid:
            raise ValueError("No valid fields to update")
        self.rows[task_id] = dataclasses.replace(self.rows[task_id], **valid)
        return dataclasses.replace(self.rows[task_id])


class InMemoryProjectRepository(IProjectRepository):
    def __init__(self, projects: Optional[List[ProjectEntity]] = None, tasks: Optional[InMemoryTaskRepository] = None):
        self.rows: Dict[int, ProjectEntity] = {}
        self.tasks = tasks
        self.updates: List[tuple] = []
        self._next_id = 1
        for project in projects or []:
            self.create(project)

    def get_by_id(self, project_id):
        project = self.rows.get(project_id)
        return dataclasses.replace(project) if project else None

    def list_all(self):
        return [dataclasses.replace(p) for p in self.rows.values()]

    def create(self, project):
        if project.id is None:
            project = dataclasses.replace(project, id=self._next_id)
        self._next_id = max(self._next_id, project.id + 1)
        self.rows[project.id] = dataclasses.replace(project)
        return dataclasses.replace(project)

    def update(self, project_id, fields):
        if project_id not in self.rows:
            raise ProjectNotFound(f"Project {project_id} not found")
        valid = {k: v for k, v in fields.items() if hasattr(self.rows[project_id], k) and k != 'id'}
        if not valid:
            raise ValueError("No valid fields to update")
        self.updates.append((project_id, valid))
        self.rows[project_id] = dataclasses.replace(self.rows[project_id], **valid)
        return dataclasses.replace(self.rows[project_id])

    def delete(self, project_id):
        if project_id not in self.rows:
            raise ProjectNotFound(f"Project {project_id} not found")
        ids = [project_id] + [p.id for p in self.rows.values() if p.parent_id == project_id]
        for pid in ids:
            del self.rows[pid]
        if self.tasks is not None:
            for task in list(self.tasks.rows.values()):
                if task.project_id in ids:
                    del self.tasks.rows[task.id]
        return ids


class RecordingAuditTrail(IAuditTrail):
    def __init__(self):
        self.entries = []

    def record(self, actor, action_type, target, target_id, description="", details=None):
        self.entries.append({
            'actor_id': actor.id if actor else None,
            'action_type': action_type,
            'target': target,
            'target_id': target_id,
            'description': description,
            'details': details or {},
        })

    def actions(self):
        return [e['action_type'] for e in self.entries]


@pytest.fixture
def now():
    return datetime(2024, 6, 10, 12, 0, 0)


@pytest.fixture
def admin():
    return CurrentUser(id=1, role=Role.DIRECTOR, name="Dana Director")


@pytest.fixture
def lead():
    return CurrentUser(id=2, role=Role.STAFF, name="Lee Lead")


@pytest.fixture
def team_leader():
    return CurrentUser(id=3, role=Role.TEAM_LEADER, name="Tam Leader")


@pytest.fixture
def staff():
    return CurrentUser(id=4, role=Role.STAFF, name="Sam Staff")


@pytest.fixture
def task_repo():
    return InMemoryTaskRepository()


@pytest.fixture
def project_repo(task_repo):
    return InMemoryProjectRepository(tasks=task_repo)


@pytest.fixture
def audit():
    return RecordingAuditTrail()

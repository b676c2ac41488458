"""Tests for the Django repositories, signals and audit trail."""

from datetime import date, datetime

import pytest
from django.contrib.auth.models import User

from apps.core.models import Member
from apps.projects.adapters.orm_repositories import DjangoProjectRepository
from apps.projects.domain.entities import ProjectEntity, ProjectFrequency, ProjectStatus
from apps.projects.models import Project
from apps.projects.ports.repositories import ProjectNotFound
from apps.reports.adapters.audit_trail import DjangoAuditTrail
from apps.reports.models import ActivityLog
from apps.reports.ports.audit import AuditAction
from apps.reports.services import ActivityLogger
from apps.tasks.adapters.orm_repositories import DjangoTaskRepository
from apps.tasks.domain.entities import Severity, TaskEntity, TaskStatus, TaskType
from apps.tasks.models import Task

pytestmark = pytest.mark.django_db


@pytest.fixture
def member():
    return Member.objects.create(name="Lee Lead", role=Member.RoleChoices.STAFF)


@pytest.fixture
def projects():
    return DjangoProjectRepository()


@pytest.fixture
def tasks():
    return DjangoTaskRepository()


class TestProjectRepository:
    """Tests for DjangoProjectRepository."""

    def test_create_and_read_back(self, projects, member):
        """Entities round-trip through the model with enums restored."""
        created = projects.create(ProjectEntity(
            id=None, name="Billing", code="B-1", lead_id=member.id,
            allocated_hours=20, milestone_date=date(2024, 7, 1),
        ))

        loaded = projects.get_by_id(created.id)
        assert loaded.name == "Billing"
        assert loaded.status == ProjectStatus.NOT_STARTED
        assert loaded.lead_id == member.id
        assert loaded.tools_used == []
        assert loaded.frequency is None

    def test_missing_project(self, projects):
        """Unknown ids read as None and raise on update."""
        assert projects.get_by_id(404) is None
        with pytest.raises(ProjectNotFound):
            projects.update(404, {'name': "X"})

    def test_update_maps_fields_and_enums(self, projects):
        """Entity names map to columns and enums to their values."""
        parent = projects.create(ProjectEntity(id=None, name="Parent"))
        child = projects.create(ProjectEntity(id=None, name="Child"))

        updated = projects.update(child.id, {
            'parent_id': parent.id,
            'status': ProjectStatus.USER_TESTING,
            'frequency': ProjectFrequency.MONTHLY,
            'tools_used': [1, 2],
        })

        row = Project.objects.get(id=child.id)
        assert row.parent_project_id == parent.id
        assert row.status == 'User - Testing'
        assert updated.frequency == ProjectFrequency.MONTHLY
        assert updated.tools_used == [1, 2]

    def test_unknown_fields_are_skipped(self, projects):
        """Unknown fields are ignored, and nothing valid is an error."""
        project = projects.create(ProjectEntity(id=None, name="P"))

        updated = projects.update(project.id, {'name': "Q", 'colour': "red"})

        assert updated.name == "Q"
        with pytest.raises(ValueError, match="No valid fields"):
            projects.update(project.id, {'colour': "red"})

    def test_used_hours_are_clamped(self, projects):
        """Negative hours never reach the database."""
        project = projects.create(ProjectEntity(id=None, name="P"))

        projects.update(project.id, {'used_hours': -3})

        assert Project.objects.get(id=project.id).used_hours == 0

    def test_clamp_signal_on_direct_save(self):
        """Saving the model directly also clamps used hours."""
        row = Project.objects.create(name="P", used_hours=-1)

        row.refresh_from_db()
        assert row.used_hours == 0

    def test_timer_start_time_round_trip(self, projects):
        """The timer start is stored as naive local time."""
        project = projects.create(ProjectEntity(id=None, name="P"))
        start = datetime(2024, 6, 10, 9, 30)

        assert projects.update(project.id, {'timer_start_time': start}).timer_start_time == start
        assert projects.update(project.id, {'timer_start_time': None}).is_timer_running is False

    def test_delete_cascades_to_children_and_tasks(self, projects, tasks):
        """Deleting a parent removes sub-projects and every related task."""
        parent = projects.create(ProjectEntity(id=None, name="Parent"))
        child = projects.create(ProjectEntity(id=None, name="Child", parent_id=parent.id))
        other = projects.create(ProjectEntity(id=None, name="Other"))
        tasks.save(TaskEntity(id=None, title="T", project_id=child.id))
        kept = tasks.save(TaskEntity(id=None, title="U", project_id=other.id))

        deleted = projects.delete(parent.id)

        assert sorted(deleted) == sorted([parent.id, child.id])
        assert list(Project.objects.values_list('id', flat=True)) == [other.id]
        assert list(Task.objects.values_list('id', flat=True)) == [kept.id]

    def test_delete_missing(self, projects):
        """Deleting an unknown project raises."""
        with pytest.raises(ProjectNotFound):
            projects.delete(404)


class TestTaskRepository:
    """Tests for DjangoTaskRepository."""

    @pytest.fixture
    def project(self, projects):
        return projects.create(ProjectEntity(id=None, name="P"))

    def test_save_clears_severity_for_plain_tasks(self, tasks, project):
        """Only risks and issues keep a severity."""
        task = tasks.save(TaskEntity(id=None, title="T", project_id=project.id, severity=Severity.HIGH))
        risk = tasks.save(TaskEntity(id=None, title="R", project_id=project.id, type=TaskType.RISK,
                                     severity=Severity.HIGH))

        assert task.severity is None
        assert risk.severity == Severity.HIGH

    def test_filter_by_project(self, tasks, projects, project):
        """Tasks are filtered by project ids."""
        other = projects.create(ProjectEntity(id=None, name="O"))
        tasks.save(TaskEntity(id=None, title="A", project_id=project.id))
        tasks.save(TaskEntity(id=None, title="B", project_id=other.id))

        assert [t.title for t in tasks.filter_by_project([project.id])] == ["A"]

    def test_update_unknown_task(self, tasks):
        """Unknown task ids raise ValueError."""
        with pytest.raises(ValueError):
            tasks.update(404, {'title': "X"})

    def test_completion_is_stamped_once(self, tasks, project):
        """The first save as Completed stamps completed_at, later saves keep it."""
        task = tasks.save(TaskEntity(id=None, title="T", project_id=project.id))

        completed = tasks.update(task.id, {'status': TaskStatus.COMPLETED})
        stamp = completed.completed_at
        again = tasks.update(task.id, {'comments': "done"})

        assert stamp is not None
        assert again.completed_at == stamp

    def test_explicit_completion_time_is_kept(self, tasks, project):
        """A timestamp set by the caller is not overwritten."""
        task = tasks.save(TaskEntity(id=None, title="T", project_id=project.id))
        when = datetime(2024, 6, 10, 15, 0)

        completed = tasks.update(task.id, {'status': TaskStatus.COMPLETED, 'completed_at': when})

        assert completed.completed_at == when


class TestMembersAndAudit:
    """Tests for member creation and the audit trail."""

    def test_member_created_with_user(self):
        """Every new user gets a Staff member profile."""
        user = User.objects.create_user(username="sam", password="pw", first_name="Sam", last_name="Staff")

        assert user.member.name == "Sam Staff"
        assert user.member.as_current_user().role.value == "Staff"

    def test_audit_trail_writes_activity_log(self, projects, member):
        """Audit entries are stored against the target model."""
        project = projects.create(ProjectEntity(id=None, name="P"))

        DjangoAuditTrail().record(
            member.as_current_user(), AuditAction.STATUS_CHANGE, 'project', project.id,
            "Status changed to Started", {'new_status': 'Started'},
        )

        entries = ActivityLogger.recent(model_class=Project, object_id=project.id)
        assert len(entries) == 1
        assert entries[0].action_type == 'status_change'
        assert entries[0].actor_id == member.id
        assert entries[0].details == {'new_status': 'Started'}

    def test_audit_entry_survives_target_deletion(self, projects):
        """Entries stay after the target is deleted."""
        project = projects.create(ProjectEntity(id=None, name="P"))
        DjangoAuditTrail().record(None, AuditAction.DELETED, 'project', project.id, "Project deleted: P")

        projects.delete(project.id)

        assert ActivityLog.objects.count() == 1
        assert ActivityLog.objects.get().content_object is None

    def test_unknown_audit_target(self):
        """Only projects and tasks are audited."""
        with pytest.raises(ValueError):
            DjangoAuditTrail().record(None, AuditAction.UPDATED, 'store_item', 1)

"""HTTP tests for the JSON endpoints."""

import pytest

from apps.core.models import Member
from apps.projects.models import Project
from apps.reports.models import ActivityLog
from apps.tasks.models import Task

pytestmark = pytest.mark.django_db


def _login(client, django_user_model, username, role):
    user = django_user_model.objects.create_user(username=username, password="pw")
    Member.objects.filter(user=user).update(role=role, name=username.title())
    client.force_login(user)
    return Member.objects.get(user=user)


@pytest.fixture
def director(client, django_user_model):
    return _login(client, django_user_model, "dana", Member.RoleChoices.DIRECTOR)


@pytest.fixture
def staff(client, django_user_model):
    return _login(client, django_user_model, "sam", Member.RoleChoices.STAFF)


@pytest.fixture
def project(db):
    return Project.objects.create(name="Billing", code="B-1", status='Started', allocated_hours=10, used_hours=2)


class TestProjectViews:
    """Tests for project endpoints."""

    def test_login_required(self, client, project):
        """Anonymous users are redirected to the login page."""
        response = client.get('/projects/')

        assert response.status_code == 302

    def test_list(self, client, director, project):
        """The list returns stats for every project."""
        response = client.get('/projects/')

        rows = response.json()['projects']
        assert response.status_code == 200
        assert rows[0]['name'] == "Billing"
        assert rows[0]['used_hours'] == 2
        assert rows[0]['lead_name'] == "N/A"

    def test_detail(self, client, director, project):
        """The detail view includes the statuses the user may pick."""
        response = client.get(f'/projects/{project.id}/')

        data = response.json()
        assert data['project']['status'] == 'Started'
        assert 'Completed' in data['allowed_statuses']

    def test_detail_missing(self, client, director):
        """Unknown projects are 404."""
        assert client.get('/projects/404/').status_code == 404

    def test_wrong_method(self, client, director, project):
        """Mutations only accept POST."""
        assert client.get(f'/projects/{project.id}/status/').status_code == 405

    def test_block_without_risk_is_400(self, client, director, project):
        """A rejected transition is reported with its reason."""
        response = client.post(f'/projects/{project.id}/status/', {'status': 'Blocked'})

        assert response.status_code == 400
        assert response.json()['effect'] == 'reject'
        assert Project.objects.get(id=project.id).status == 'Started'

    def test_status_change_is_logged(self, client, director, project):
        """An applied change is written to the activity log."""
        response = client.post(f'/projects/{project.id}/status/', {'status': 'Update'})

        entry = ActivityLog.objects.get()
        assert response.json() == {'effect': 'apply', 'target_id': project.id, 'status': 'Update',
                                   'stamp_completed_at': False}
        assert entry.actor_id == director.id
        assert entry.details == {'old_status': 'Started', 'new_status': 'Update'}

    def test_unknown_status_is_400(self, client, director, project):
        """Unknown statuses are input errors."""
        assert client.post(f'/projects/{project.id}/status/', {'status': 'Archived'}).status_code == 400

    def test_stranger_is_403(self, client, staff, project):
        """Staff who do not lead the project are forbidden."""
        response = client.post(f'/projects/{project.id}/status/', {'status': 'Update'})

        assert response.status_code == 403

    def test_lead_runs_timer(self, client, staff, project):
        """The lead can start and hold the timer."""
        Project.objects.filter(id=project.id).update(lead=staff)

        started = client.post(f'/projects/{project.id}/timer/', {'action': 'start'})
        running = Project.objects.get(id=project.id).timer_start_time
        held = client.post(f'/projects/{project.id}/timer/', {'action': 'hold'})

        assert started.status_code == 200
        assert running is not None
        assert held.json()['status'] == 'Started'
        assert Project.objects.get(id=project.id).timer_start_time is None

    def test_create_requires_name(self, client, director):
        """Projects need a name."""
        response = client.post('/projects/new/', {'code': "X"})

        assert response.status_code == 400
        assert not Project.objects.exists()

    def test_create_and_edit(self, client, director):
        """Admins create projects and edit only the posted fields."""
        created = client.post('/projects/new/', {'name': "Payroll", 'allocated_hours': "8"})
        pk = created.json()['target_id']

        client.post(f'/projects/{pk}/edit/', {'phase': "Discovery"})

        row = Project.objects.get(id=pk)
        assert row.allocated_hours == 8
        assert row.phase == "Discovery"
        assert row.name == "Payroll"

    def test_edit_rejects_cycle(self, client, director, project):
        """A parent cannot be moved under its own sub-project."""
        child = Project.objects.create(name="Child", parent_project=project, status='Started')

        response = client.post(f'/projects/{project.id}/edit/', {'parent_id': child.id})

        assert response.status_code == 400
        assert Project.objects.get(id=project.id).parent_project_id is None

    def test_usage_on_open_project_is_400(self, client, staff, project):
        """Usage can only be logged on completed projects."""
        response = client.post(f'/projects/{project.id}/usage/', {'saved_hours': "2"})

        assert response.status_code == 400

    def test_delete(self, client, director, project):
        """Admins delete projects with their tasks."""
        Task.objects.create(title="T", project=project)

        response = client.post(f'/projects/{project.id}/delete/')

        assert response.json() == {'deleted_ids': [project.id]}
        assert not Task.objects.exists()

    def test_user_without_member_is_403(self, client, django_user_model, project):
        """Accounts not linked to a team member cannot act."""
        user = django_user_model.objects.create_user(username="ghost", password="pw")
        Member.objects.filter(user=user).delete()
        client.force_login(user)

        assert client.post(f'/projects/{project.id}/status/', {'status': 'Update'}).status_code == 403


class TestTaskViews:
    """Tests for task and risk endpoints."""

    def test_unassigned_task_is_400(self, client, staff, project):
        """An unassigned task cannot start."""
        task = Task.objects.create(title="T", project=project)

        response = client.post(f'/tasks/{task.id}/status/', {'status': '02.Task is started'})

        assert response.status_code == 400

    def test_complete_task(self, client, staff, project):
        """Completion records time spent and saved."""
        task = Task.objects.create(title="T", project=project, assignee=staff, status='02.Task is started')

        response = client.post(f'/tasks/{task.id}/complete/', {'time_spent': "2", 'time_saved': "1"})

        row = Task.objects.get(id=task.id)
        assert response.status_code == 200
        assert row.status == '05.Completed'
        assert row.completed_at is not None

    def test_staff_cannot_create_risk(self, client, staff, project):
        """Risk management is for leaders."""
        response = client.post('/tasks/risks/new/', {'title': "R", 'project_id': project.id})

        assert response.status_code == 403

    def test_create_and_filter_risks(self, client, director, project):
        """Leaders create risks, and the list filters them."""
        created = client.post('/tasks/risks/new/', {'title': "Vendor", 'project_id': project.id, 'type': 'risk'})
        Task.objects.create(title="Closed", project=project, type='issue', status='05.Completed')

        active = client.get('/tasks/risks/', {'active': 'true'}).json()['items']
        issues = client.get('/tasks/risks/', {'type': 'issue'}).json()['items']

        assert created.status_code == 201
        assert created.json()['task']['severity'] == 'Medium'
        assert [i['title'] for i in active] == ["Vendor"]
        assert [i['title'] for i in issues] == ["Closed"]

    def test_invalid_filter_is_400(self, client, director):
        """Invalid filter values are rejected."""
        assert client.get('/tasks/risks/', {'severity': 'Apocalyptic'}).status_code == 400

    def test_risk_for_missing_project_is_404(self, client, director):
        """Risks need an existing project."""
        response = client.post('/tasks/risks/new/', {'title': "R", 'project_id': 404})

        assert response.status_code == 404


class TestReportViews:
    """Tests for the summary and activity endpoints."""

    def test_summary(self, client, director, project):
        """The summary counts projects and members."""
        data = client.get('/reports/summary/').json()

        assert data['total_projects'] == 1
        assert data['team_members'] == 1
        assert data['rag'] == {'Red': 0, 'Yellow': 0, 'Green': 1}

    def test_activity_log(self, client, director, project):
        """Activity entries can be filtered by target."""
        client.post(f'/projects/{project.id}/status/', {'status': 'Update'})

        entries = client.get('/reports/activity/', {'target': 'project', 'object_id': project.id}).json()['entries']

        assert len(entries) == 1
        assert entries[0]['actor'] == "Dana"
        assert entries[0]['action_type'] == 'status_change'

    def test_activity_log_bad_params(self, client, director):
        """Bad parameters are 400."""
        assert client.get('/reports/activity/', {'limit': 'x'}).status_code == 400
        assert client.get('/reports/activity/', {'target': 'store'}).status_code == 400

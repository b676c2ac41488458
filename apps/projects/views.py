# apps/projects/views.py
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_http_methods

from apps.core.adapters.session import get_current_user, members_by_id
from apps.core.conf import dashboard_setting
from apps.core.domain.permissions import RoleAuthorizationPolicy
from apps.core.http import effect_response, handle_domain_errors, to_json
from apps.projects.domain.entities import RiskLevel
from apps.projects.domain.services import ProjectStatsService
from apps.projects.domain.time_tracking import TimeAccumulator
from apps.projects.ports.repositories import ProjectNotFound
from apps.reports.adapters.audit_trail import DjangoAuditTrail
from apps.tasks.adapters.orm_repositories import DjangoTaskRepository
from .adapters.orm_repositories import DjangoProjectRepository
from .application.use_cases import (
    ChangeProjectStatusInput,
    ChangeProjectStatusUseCase,
    CompletedBlockedUseCase,
    CompleteProjectInput,
    CompleteProjectUseCase,
    CreateProjectInput,
    CreateProjectUseCase,
    DeleteProjectUseCase,
    LogProjectUsageUseCase,
    NotSatisfiedUseCase,
    ProjectTimerUseCase,
    SelectToolsUseCase,
    UpdateProjectFieldsUseCase,
)
from .forms import ProjectForm


def _accumulator():
    return TimeAccumulator(dashboard_setting('LOCAL_TIME_ZONE'))


def _dependencies():
    """Złożenie zależności (Manual Dependency Injection)."""
    return {
        'project_repository': DjangoProjectRepository(),
        'task_repository': DjangoTaskRepository(),
        'audit': DjangoAuditTrail(),
    }


def _optional_int(value):
    return int(value) if value not in (None, '') else None


@require_http_methods(["GET"])
@login_required
@handle_domain_errors
def project_list_view(request):
    """Portfel: statystyki wszystkich projektów (ten sam serwis co szczegóły)."""
    projects = DjangoProjectRepository().list_all()
    tasks = DjangoTaskRepository().list_all()

    service = ProjectStatsService(accumulator=_accumulator())
    stats = service.build_all(projects, tasks, timezone.now(), members_by_id())

    return JsonResponse({'projects': [s.to_dict() for s in stats]})


@require_http_methods(["GET"])
@login_required
@handle_domain_errors
def project_detail_view(request, pk):
    """Dashboard konkretnego projektu."""
    actor = get_current_user(request)
    project_repo = DjangoProjectRepository()

    project = project_repo.get_by_id(pk)
    if project is None:
        raise ProjectNotFound(f"Project {pk} not found")

    projects = project_repo.list_all()
    children = [p for p in projects if p.parent_id == project.id]
    # Wystarczą zadania projektu i jego podprojektów
    tasks = DjangoTaskRepository().filter_by_project([project.id] + [c.id for c in children])
    members = members_by_id()
    now = timezone.now()

    service = ProjectStatsService(accumulator=_accumulator())
    cache = {}
    allowed = RoleAuthorizationPolicy().allowed_statuses(actor.role, project, actor.id)

    return JsonResponse({
        'project': to_json(project),
        'stats': service.build(project, projects, tasks, now, cache, members).to_dict(),
        'children': [service.build(c, projects, tasks, now, cache, members).to_dict() for c in children],
        'tasks': [to_json(t) for t in tasks if t.project_id == project.id],
        'allowed_statuses': [s.value for s in allowed],
    })


@require_http_methods(["POST"])
@login_required
@handle_domain_errors
def project_create_view(request):
    actor = get_current_user(request)
    form = ProjectForm(request.POST)
    if not form.is_valid():
        return JsonResponse({'errors': form.errors.get_json_data()}, status=400)

    data = form.cleaned_data
    use_case = CreateProjectUseCase(
        **_dependencies(), enforce_weights=dashboard_setting('ENFORCE_SUBPROJECT_WEIGHTS')
    )
    effect = use_case.execute(CreateProjectInput(
        name=data['name'],
        code=data['code'],
        parent_id=data['parent_id'],
        weight=data['weight'],
        allocated_hours=data['allocated_hours'] or 0.0,
        additional_hours=data['additional_hours'] or 0.0,
        milestone_date=data['milestone_date'],
        risk_level=data['risk_level'] or RiskLevel.LOW.value,
        overage_reason=data['overage_reason'],
        lead_id=data['lead_id'],
        phase=data['phase'],
    ), actor)
    return effect_response(effect)


@require_http_methods(["POST"])
@login_required
@handle_domain_errors
def project_edit_view(request, pk):
    actor = get_current_user(request)
    form = ProjectForm(request.POST)
    if not form.is_valid():
        return JsonResponse({'errors': form.errors.get_json_data()}, status=400)

    fields = form.submitted_fields()
    if 'name' in fields and not fields['name']:
        return JsonResponse({'errors': {'name': ["Project name cannot be empty"]}}, status=400)

    use_case = UpdateProjectFieldsUseCase(
        **_dependencies(), enforce_weights=dashboard_setting('ENFORCE_SUBPROJECT_WEIGHTS')
    )
    return effect_response(use_case.execute(pk, fields, actor, timezone.now()))


@require_http_methods(["POST"])
@login_required
@handle_domain_errors
def project_status_view(request, pk):
    actor = get_current_user(request)
    # Zmiana z listy projektów: blokadę uzasadnia też ryzyko na podprojekcie
    from_portfolio = request.POST.get('scope') == 'portfolio'

    use_case = ChangeProjectStatusUseCase(**_dependencies())
    effect = use_case.execute(
        ChangeProjectStatusInput(
            project_id=pk,
            new_status=request.POST.get('status'),
            actor=actor,
            include_children_risks=from_portfolio and dashboard_setting('PORTFOLIO_BLOCK_SCOPE'),
        ),
        timezone.now(),
    )
    return effect_response(effect)


@require_http_methods(["POST"])
@login_required
@handle_domain_errors
def project_timer_view(request, pk):
    actor = get_current_user(request)
    use_case = ProjectTimerUseCase(**_dependencies(), accumulator=_accumulator())
    effect = use_case.execute(pk, request.POST.get('action'), actor, timezone.now())
    return effect_response(effect)


@require_http_methods(["POST"])
@login_required
@handle_domain_errors
def project_complete_view(request, pk):
    actor = get_current_user(request)
    use_case = CompleteProjectUseCase(**_dependencies())
    effect = use_case.execute(
        CompleteProjectInput(
            project_id=pk,
            saved_hours=request.POST.get('saved_hours'),
            frequency=request.POST.get('frequency') or None,
            frequency_detail=request.POST.get('frequency_detail', ''),
            trigger_id=_optional_int(request.POST.get('trigger_id')),
        ),
        actor,
        timezone.now(),
    )
    return effect_response(effect)


@require_http_methods(["POST"])
@login_required
@handle_domain_errors
def project_not_satisfied_view(request, pk):
    actor = get_current_user(request)
    use_case = NotSatisfiedUseCase(**_dependencies())
    return effect_response(use_case.execute(pk, request.POST.get('comments'), actor, timezone.now()))


@require_http_methods(["POST"])
@login_required
@handle_domain_errors
def project_completed_blocked_view(request, pk):
    actor = get_current_user(request)
    use_case = CompletedBlockedUseCase(**_dependencies())
    return effect_response(use_case.execute(pk, request.POST.get('comments'), actor, timezone.now()))


@require_http_methods(["POST"])
@login_required
@handle_domain_errors
def project_tools_view(request, pk):
    actor = get_current_user(request)
    use_case = SelectToolsUseCase(**_dependencies())
    return effect_response(use_case.execute(pk, request.POST.getlist('tools'), actor, timezone.now()))


@require_http_methods(["POST"])
@login_required
@handle_domain_errors
def project_usage_view(request, pk):
    actor = get_current_user(request)
    use_case = LogProjectUsageUseCase(**_dependencies())
    return effect_response(use_case.execute(pk, request.POST.get('saved_hours'), actor, timezone.now()))


@require_http_methods(["POST"])
@login_required
@handle_domain_errors
def project_delete_view(request, pk):
    actor = get_current_user(request)
    deleted_ids = DeleteProjectUseCase(**_dependencies()).execute(pk, actor)
    return JsonResponse({'deleted_ids': deleted_ids})

# apps/tasks/views.py
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.utils import timezone
from django.utils.dateparse import parse_date
from django.views.decorators.http import require_http_methods

from apps.core.adapters.session import get_current_user
from apps.core.http import effect_response, handle_domain_errors, to_json
from apps.projects.adapters.orm_repositories import DjangoProjectRepository
from apps.reports.adapters.audit_trail import DjangoAuditTrail
from .adapters.orm_repositories import DjangoTaskRepository
from .application.use_cases import (
    ChangeTaskStatusUseCase,
    CompleteTaskInput,
    CompleteTaskUseCase,
    CreateRiskIssueInput,
    CreateRiskIssueUseCase,
    UpdateRiskIssueUseCase,
    UpdateTaskNotesUseCase,
)
from .domain.entities import Severity, TaskPriority, TaskType
from .filters import RiskIssueFilter
from .models import Task

RISK_ISSUE_POST_FIELDS = ('title', 'description', 'severity', 'priority', 'assignee_id', 'deadline', 'status_reason')


def _optional_int(value):
    return int(value) if value not in (None, '') else None


def _optional_date(value):
    if not value:
        return None
    parsed = parse_date(value)
    if parsed is None:
        raise ValueError(f"Invalid date: {value}")
    return parsed


def _float(value, name):
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number")


@require_http_methods(["POST"])
@login_required
@handle_domain_errors
def task_status_view(request, pk):
    actor = get_current_user(request)
    use_case = ChangeTaskStatusUseCase(DjangoTaskRepository(), audit=DjangoAuditTrail())
    effect = use_case.execute(pk, request.POST.get('status'), actor)
    return effect_response(effect)


@require_http_methods(["POST"])
@login_required
@handle_domain_errors
def task_complete_view(request, pk):
    """Koniec okna "Complete task" - czas pracy i czas zaoszczędzony."""
    actor = get_current_user(request)
    use_case = CompleteTaskUseCase(DjangoTaskRepository(), audit=DjangoAuditTrail())
    task = use_case.execute(
        CompleteTaskInput(
            task_id=pk,
            time_spent=_float(request.POST.get('time_spent'), "Time spent"),
            time_saved=_float(request.POST.get('time_saved'), "Time saved"),
            completion_reference=request.POST.get('completion_reference', ''),
        ),
        actor,
        timezone.now(),
    )
    return JsonResponse({'task': to_json(task)})


@require_http_methods(["POST"])
@login_required
@handle_domain_errors
def task_notes_view(request, pk):
    actor = get_current_user(request)
    use_case = UpdateTaskNotesUseCase(DjangoTaskRepository(), audit=DjangoAuditTrail())
    task = use_case.execute(pk, request.POST.dict(), actor)
    return JsonResponse({'task': to_json(task)})


@require_http_methods(["GET"])
@login_required
def risk_list_view(request):
    """Lista ryzyk i problemów z filtrami (django-filter)."""
    qs = Task.objects.filter(
        type__in=[TaskType.RISK.value, TaskType.ISSUE.value]
    ).select_related('project', 'assignee')

    f = RiskIssueFilter(request.GET, queryset=qs)
    if not f.is_valid():
        return JsonResponse({'errors': f.errors.get_json_data()}, status=400)

    repo = DjangoTaskRepository()
    return JsonResponse({'items': [to_json(repo.to_entity(t)) for t in f.qs]})


@require_http_methods(["POST"])
@login_required
@handle_domain_errors
def risk_create_view(request):
    actor = get_current_user(request)
    project_id = _optional_int(request.POST.get('project_id'))
    if project_id is None:
        raise ValueError("project_id is required")

    use_case = CreateRiskIssueUseCase(
        DjangoTaskRepository(), DjangoProjectRepository(), audit=DjangoAuditTrail()
    )
    task = use_case.execute(
        CreateRiskIssueInput(
            title=request.POST.get('title', ''),
            project_id=project_id,
            type=request.POST.get('type', TaskType.RISK.value),
            severity=request.POST.get('severity') or Severity.MEDIUM.value,
            description=request.POST.get('description', ''),
            priority=request.POST.get('priority') or TaskPriority.MEDIUM.value,
            assignee_id=_optional_int(request.POST.get('assignee_id')),
            deadline=_optional_date(request.POST.get('deadline')),
        ),
        actor,
    )
    return JsonResponse({'task': to_json(task)}, status=201)


@require_http_methods(["POST"])
@login_required
@handle_domain_errors
def risk_edit_view(request, pk):
    actor = get_current_user(request)

    fields = {name: request.POST[name] for name in RISK_ISSUE_POST_FIELDS if name in request.POST}
    if 'assignee_id' in fields:
        fields['assignee_id'] = _optional_int(fields['assignee_id'])
    if 'deadline' in fields:
        fields['deadline'] = _optional_date(fields['deadline'])

    use_case = UpdateRiskIssueUseCase(DjangoTaskRepository(), audit=DjangoAuditTrail())
    task = use_case.execute(pk, fields, actor)
    return JsonResponse({'task': to_json(task)})

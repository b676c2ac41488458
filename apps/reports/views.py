# apps/reports/views.py
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_http_methods

from apps.core.conf import dashboard_setting
from apps.core.models import Member
from apps.projects.adapters.orm_repositories import DjangoProjectRepository
from apps.projects.models import Project
from apps.tasks.adapters.orm_repositories import DjangoTaskRepository
from apps.tasks.models import Task
from .domain.services import ExecutiveSummaryService
from .services import ActivityLogger

TARGET_MODELS = {'project': Project, 'task': Task}


@require_http_methods(["GET"])
@login_required
def executive_summary_view(request):
    """
    API zwracające dane dashboardu portfela (liczniki, RAG, "wymaga uwagi").
    """
    service = ExecutiveSummaryService(local_timezone=dashboard_setting('LOCAL_TIME_ZONE'))
    summary = service.build(
        DjangoProjectRepository().list_all(),
        DjangoTaskRepository().list_all(),
        Member.objects.count(),
        timezone.now(),
    )
    return JsonResponse(summary.to_dict())


@require_http_methods(["GET"])
@login_required
def activity_log_view(request):
    """Ostatnie wpisy dziennika zmian (opcjonalnie dla jednego obiektu)."""
    try:
        limit = min(int(request.GET.get('limit', 50)), 500)
        object_id = int(request.GET['object_id']) if request.GET.get('object_id') else None
    except ValueError:
        return JsonResponse({'error': "limit and object_id must be integers"}, status=400)

    target = request.GET.get('target')
    if target and target not in TARGET_MODELS:
        return JsonResponse({'error': f"Unknown target: {target}"}, status=400)

    entries = ActivityLogger.recent(limit, TARGET_MODELS.get(target), object_id)
    return JsonResponse({'entries': [
        {
            'id': e.id,
            'actor': e.actor.name if e.actor else None,
            'action_type': e.action_type,
            'target': e.content_type.model,
            'object_id': e.object_id,
            'description': e.description,
            'details': e.details,
            'timestamp': e.timestamp,
        }
        for e in entries
    ]})

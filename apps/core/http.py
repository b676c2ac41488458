# apps/core/http.py
from dataclasses import asdict, is_dataclass
from enum import Enum
from functools import wraps

from django.http import JsonResponse
from loguru import logger

from apps.core.domain.permissions import AuthorizationError
from apps.projects.domain.transitions import Reject, effect_to_dict
from apps.projects.ports.repositories import ProjectNotFound


def to_json(value):
    """Encje (dataclass + Enum) -> dane dla JsonResponse."""
    if is_dataclass(value):
        value = asdict(value)
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    return value


def effect_response(effect):
    status = 400 if isinstance(effect, Reject) else 200
    return JsonResponse(effect_to_dict(effect), status=status)


def handle_domain_errors(view):
    """Błędy domenowe -> odpowiedzi JSON (403 / 404 / 400)."""

    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except AuthorizationError as e:
            logger.warning(f"Brak uprawnień ({request.user}): {e}")
            return JsonResponse({'error': str(e)}, status=403)
        except ProjectNotFound as e:
            return JsonResponse({'error': str(e)}, status=404)
        except ValueError as e:
            return JsonResponse({'error': str(e)}, status=400)

    return wrapper

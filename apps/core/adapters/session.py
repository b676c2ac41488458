# apps/core/adapters/session.py
from apps.core.domain.permissions import AuthorizationError
from apps.core.domain.roles import CurrentUser
from apps.core.models import Member


def get_current_user(request) -> CurrentUser:
    """Zalogowany użytkownik jako {id, role} dla polityki uprawnień."""
    member = getattr(request.user, 'member', None)
    if member is None:
        raise AuthorizationError("This account is not linked to a team member")
    return member.as_current_user()


def members_by_id() -> dict:
    return dict(Member.objects.values_list('id', 'name'))

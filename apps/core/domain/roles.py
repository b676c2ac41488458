# apps/core/domain/roles.py
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Role(str, Enum):
    MD = 'MD'
    DIRECTOR = 'Director'
    ADMIN_MANAGER = 'Admin Manager'
    OPERATION_MANAGER = 'Operation Manager'
    SUPER_LEADER = 'Super Leader'
    TEAM_LEADER = 'Team Leader'
    SUB_TEAM_LEADER = 'Sub-team Leader'
    STAFF = 'Staff'


# Grupy ról (kolejność = ranga)
ADMIN_ROLES = frozenset({
    Role.MD,
    Role.DIRECTOR,
    Role.ADMIN_MANAGER,
    Role.OPERATION_MANAGER,
    Role.SUPER_LEADER,
})
LEADER_ROLES = ADMIN_ROLES | {Role.TEAM_LEADER, Role.SUB_TEAM_LEADER}


def is_admin(role: Optional[Role]) -> bool:
    return role in ADMIN_ROLES


def is_leader(role: Optional[Role]) -> bool:
    return role in LEADER_ROLES


@dataclass(frozen=True)
class CurrentUser:
    """Zalogowany członek zespołu (to, czego potrzebuje polityka uprawnień)."""
    id: int
    role: Role
    name: str = ""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional
from flask import abort
from flask_jwt_extended import get_jwt_identity
from sqlalchemy import select
from studio.models.authz import User, ROLE_USER, ALL_ROLES
from studio.constants.roles import ROLE_NAV, ROLE_ACTIONS, ROUTE_DASHBOARD
from studio import get_db


@dataclass(frozen=True)
class NavItem:
    route: str
    label: str

    def to_json(self):
        return {'route': self.route, 'label': self.label}


def normalize_role(role: Optional[str]) -> str:
    # unknown or missing profile roles fall back to the least privileged set
    return role if role in ALL_ROLES else ROLE_USER


def visible_nav_items(role: Optional[str]) -> List[NavItem]:
    return [NavItem(route, label) for route, label in ROLE_NAV[normalize_role(role)]]


def _known_routes():
    return {route for items in ROLE_NAV.values() for route, _ in items}


def can_access_route(role: Optional[str], route: str) -> bool:
    """Advisory screen gate used to shape the UI; writes are checked separately.

    The most specific known screen prefix decides. Unknown screens are denied.
    """
    route = route.rstrip('/') or '/'
    matches = [r for r in _known_routes() if route == r or route.startswith(r + '/')]
    if not matches:
        return False
    best = max(matches, key=len)
    if best == ROUTE_DASHBOARD and route != ROUTE_DASHBOARD:
        return False
    return best in {item.route for item in visible_nav_items(role)}


def roles_for(action: str):
    return ROLE_ACTIONS.get(action, ())


def role_allows(role: Optional[str], action: str) -> bool:
    return normalize_role(role) in roles_for(action)


def load_current_user() -> Optional[User]:
    """Resolve the JWT identity to its stored profile.

    The role used for authorization always comes from the database, never
    from token claims or request bodies.
    """
    ident = get_jwt_identity()
    if ident is None:
        return None
    try:
        user_id = int(ident)
    except (TypeError, ValueError):
        return None
    return get_db().execute(select(User).where(User.id==user_id)).scalar_one_or_none()


def current_role() -> str:
    user = load_current_user()
    return normalize_role(user.role if user else None)


def assert_can_view_job(job) -> None:
    user = load_current_user()
    if role_allows(user.role, 'JOB.READ_ALL'):
        return
    if job.staff_id != user.id:
        abort(403, description='Job is assigned to another staff member')


def assert_can_transition_job(job) -> None:
    user = load_current_user()
    if role_allows(user.role, 'JOB.STATUS_ANY'):
        return
    if job.staff_id != user.id:
        abort(403, description='Only the assigned staff member can update this job')


__all__ = [
    'NavItem', 'normalize_role', 'visible_nav_items', 'can_access_route', 'roles_for', 'role_allows',
    'load_current_user', 'current_role', 'assert_can_view_job', 'assert_can_transition_job',
]

# File: app/core/policies.py
"""Authorization predicates.

These mirror the row-level rules of the data layer: routers use them to gate
views and the service layer re-checks them on every mutation against roles
and departments loaded from the database, never from a token claim.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from app.models.user import AppRole


@dataclass(frozen=True)
class Actor:
    id: int
    department_id: Optional[int] = None
    roles: frozenset = field(default_factory=frozenset)

    def has_role(self, role: AppRole) -> bool:
        return role in self.roles


def can_set_status(actor: Actor, issue) -> bool:
    if actor.has_role(AppRole.principal):
        return True
    return (
        actor.has_role(AppRole.hod)
        and actor.department_id is not None
        and actor.department_id == issue.department_id
    )


def can_delete(actor: Actor, issue) -> bool:
    return actor.id == issue.reporter_id


def can_edit_profile(actor: Actor, profile_id: int) -> bool:
    return actor.id == profile_id


def can_view_hod_dashboard(actor: Actor) -> bool:
    return actor.has_role(AppRole.hod)


def can_view_principal_dashboard(actor: Actor) -> bool:
    return actor.has_role(AppRole.principal)


def can_view_all_roles(actor: Actor) -> bool:
    return actor.has_role(AppRole.principal)

# File: app/services/dashboards.py
from typing import Optional

from sqlalchemy.orm import Session

from app.core.errors import NotFound
from app.core.policies import Actor
from app.models.department import Department
from app.schemas.issue import (
    DepartmentBreakdown,
    DepartmentLite,
    HodDashboardOut,
    IssueOut,
    IssueStats,
    PrincipalDashboardOut,
)
from app.services.issues import SORT_RECENT, list_issues


def issue_stats(items: list[IssueOut], with_priority: bool = False) -> IssueStats:
    return IssueStats(
        total=len(items),
        pending=sum(1 for i in items if i.status == "pending"),
        acknowledged=sum(1 for i in items if i.status == "acknowledged"),
        resolved=sum(1 for i in items if i.status == "work_done"),
        priority=sum(1 for i in items if i.is_priority) if with_priority else None,
    )


def hod_dashboard(db: Session, actor: Actor) -> HodDashboardOut:
    """Issues of the HoD's own department, newest first."""
    if actor.department_id is None:
        return HodDashboardOut(department=None, stats=issue_stats([]), items=[])
    dept = db.get(Department, actor.department_id)
    items = list_issues(db, actor.id, SORT_RECENT, department_id=actor.department_id)
    return HodDashboardOut(
        department=DepartmentLite(name=dept.name, code=dept.code) if dept else None,
        stats=issue_stats(items),
        items=items,
    )


def principal_dashboard(db: Session, actor: Actor, department_id: Optional[int] = None) -> PrincipalDashboardOut:
    departments = db.query(Department).order_by(Department.name.asc()).all()
    if department_id is not None and department_id not in {d.id for d in departments}:
        raise NotFound("Department not found")

    items = list_issues(db, actor.id, SORT_RECENT, department_id=department_id)
    # breakdown always covers every department, independent of the filter
    everything = items if department_id is None else list_issues(db, actor.id, SORT_RECENT)
    breakdown = [
        DepartmentBreakdown(
            id=d.id,
            name=d.name,
            code=d.code,
            total=sum(1 for i in everything if i.department_id == d.id),
            pending=sum(1 for i in everything if i.department_id == d.id and i.status == "pending"),
        )
        for d in departments
    ]
    return PrincipalDashboardOut(
        stats=issue_stats(items, with_priority=True),
        departments=breakdown,
        items=items,
    )

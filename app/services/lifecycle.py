# File: app/services/lifecycle.py
"""Issue status transitions and deadline arithmetic."""
import math
from datetime import datetime, timedelta, timezone

from app.core.config import settings
from app.models.issue import Issue, IssueStatus

DUE_SOON_DAYS = 7


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def deadline_for(reported_at: datetime) -> datetime:
    return reported_at + timedelta(days=settings.issue_deadline_days)


def days_remaining(deadline: datetime, now: datetime | None = None) -> int:
    now = now or utcnow()
    seconds = (as_utc(deadline) - as_utc(now)).total_seconds()
    return math.ceil(seconds / 86400)


def is_due_soon(issue: Issue, now: datetime | None = None) -> bool:
    if issue.status == IssueStatus.work_done:
        return False
    return days_remaining(issue.deadline, now) <= DUE_SOON_DAYS


def apply_status(issue: Issue, new_status: IssueStatus, now: datetime | None = None,
                 clear_on_reopen: bool | None = None) -> None:
    """Set ``issue.status`` and keep ``resolved_at`` in step with it.

    Every state is reachable from every state. Entering ``work_done`` stamps
    ``resolved_at``. Leaving it keeps the first resolution time unless
    ``clear_on_reopen`` (default: the CLEAR_RESOLVED_ON_REOPEN setting) is set.
    The caller commits, so both columns land in one transaction.
    """
    now = now or utcnow()
    if clear_on_reopen is None:
        clear_on_reopen = settings.clear_resolved_on_reopen
    issue.status = new_status
    if new_status == IssueStatus.work_done:
        issue.resolved_at = now
    elif clear_on_reopen:
        issue.resolved_at = None

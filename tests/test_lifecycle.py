from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from app.models.issue import Issue, IssueStatus
from app.services.issues import rank_by_upvotes
from app.services.lifecycle import apply_status, days_remaining, deadline_for, is_due_soon

NOW = datetime(2025, 11, 10, 12, 0, tzinfo=timezone.utc)


def _issue(status=IssueStatus.pending, deadline=None):
    return Issue(status=status, deadline=deadline or deadline_for(NOW), resolved_at=None)


def test_work_done_sets_resolved_at():
    issue = _issue()
    apply_status(issue, IssueStatus.work_done, now=NOW)
    assert issue.status == IssueStatus.work_done
    assert issue.resolved_at == NOW


def test_pending_straight_to_work_done_and_back_to_acknowledged():
    issue = _issue()
    apply_status(issue, IssueStatus.work_done, now=NOW)
    apply_status(issue, IssueStatus.acknowledged, now=NOW + timedelta(hours=1), clear_on_reopen=False)
    assert issue.status == IssueStatus.acknowledged


def test_reopening_keeps_first_resolution_by_default():
    issue = _issue()
    apply_status(issue, IssueStatus.work_done, now=NOW)
    apply_status(issue, IssueStatus.pending, now=NOW + timedelta(days=1), clear_on_reopen=False)
    assert issue.resolved_at == NOW


def test_reopening_clears_resolution_when_configured():
    issue = _issue()
    apply_status(issue, IssueStatus.work_done, now=NOW)
    apply_status(issue, IssueStatus.pending, now=NOW + timedelta(days=1), clear_on_reopen=True)
    assert issue.resolved_at is None


def test_acknowledge_does_not_set_resolved_at():
    issue = _issue()
    apply_status(issue, IssueStatus.acknowledged, now=NOW)
    assert issue.resolved_at is None


def test_days_remaining_counts_down_daily():
    deadline = deadline_for(NOW)
    assert days_remaining(deadline, NOW) == 30
    assert days_remaining(deadline, NOW + timedelta(seconds=1)) == 30
    assert days_remaining(deadline, NOW + timedelta(days=1)) == 29
    assert days_remaining(deadline, NOW + timedelta(days=1, seconds=1)) == 29
    assert days_remaining(deadline, NOW + timedelta(days=31)) == -1


def test_days_remaining_accepts_naive_utc():
    deadline = deadline_for(NOW).replace(tzinfo=None)
    assert days_remaining(deadline, NOW) == 30


def test_due_soon_only_for_open_issues():
    deadline = NOW + timedelta(days=5)
    assert is_due_soon(_issue(deadline=deadline), NOW)
    assert not is_due_soon(_issue(IssueStatus.work_done, deadline), NOW)
    assert not is_due_soon(_issue(), NOW)


def test_rank_by_upvotes_is_stable():
    items = [SimpleNamespace(id=i, upvote_count=c) for i, c in enumerate([3, 5, 3, 1])]
    ranked = rank_by_upvotes(items)
    assert [i.id for i in ranked] == [1, 0, 2, 3]

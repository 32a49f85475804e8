# File: app/services/issues.py
"""Issue feed, submission, upvotes, status changes and deletion.

Every mutation re-checks its authorization predicate here, against an
``Actor`` built from database rows, so a route that forgets a check still
cannot write what the policy forbids.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConstraintViolation, NotFound, PermissionDenied, ValidationError
from app.core.policies import Actor, can_delete, can_set_status
from app.models.department import Department
from app.models.issue import Issue, IssueStatus
from app.models.upvote import Upvote
from app.models.user import Profile
from app.schemas.issue import DepartmentLite, IssueOut, ReporterLite, UpvoteOut
from app.services import lifecycle
from app.services.storage import make_object_key, upload_image

logger = logging.getLogger(__name__)

MAX_PHOTO_BYTES = 5 * 1024 * 1024
ALLOWED_PHOTO_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}

SORT_UPVOTES = "upvotes"
SORT_RECENT = "recent"


@dataclass
class PhotoUpload:
    data: bytes
    content_type: str
    filename: str


def _base_query(db: Session):
    return (
        db.query(Issue, Profile.full_name, Profile.college_id, Department.name, Department.code)
        .outerjoin(Profile, Profile.id == Issue.reporter_id)
        .outerjoin(Department, Department.id == Issue.department_id)
    )


def upvote_summary(db: Session, issue_ids: list[int], viewer_id: int) -> tuple[dict[int, int], set[int]]:
    """Counts per issue and the ids the viewer upvoted, in two queries total."""
    if not issue_ids:
        return {}, set()
    counts = dict(
        db.query(Upvote.issue_id, func.count(Upvote.id))
        .filter(Upvote.issue_id.in_(issue_ids))
        .group_by(Upvote.issue_id)
        .all()
    )
    mine = {
        r[0]
        for r in db.query(Upvote.issue_id)
        .filter(Upvote.user_id == viewer_id, Upvote.issue_id.in_(issue_ids))
        .all()
    }
    return counts, mine


def _to_out(row, counts: dict[int, int], mine: set[int], now: datetime) -> IssueOut:
    issue, full_name, college_id, dept_name, dept_code = row
    return IssueOut(
        id=issue.id,
        reporter_id=issue.reporter_id,
        department_id=issue.department_id,
        room_no=issue.room_no,
        item_id=issue.item_id,
        title=issue.title,
        description=issue.description,
        photo_url=issue.photo_url,
        status=issue.status.value,
        is_priority=issue.is_priority,
        reported_at=lifecycle.as_utc(issue.reported_at),
        deadline=lifecycle.as_utc(issue.deadline),
        resolved_at=lifecycle.as_utc(issue.resolved_at) if issue.resolved_at else None,
        upvote_count=counts.get(issue.id, 0),
        has_upvoted=issue.id in mine,
        days_remaining=lifecycle.days_remaining(issue.deadline, now),
        due_soon=lifecycle.is_due_soon(issue, now),
        reporter=ReporterLite(full_name=full_name, college_id=college_id),
        department=DepartmentLite(name=dept_name, code=dept_code),
    )


def annotate(db: Session, rows: list, viewer_id: int) -> list[IssueOut]:
    counts, mine = upvote_summary(db, [r[0].id for r in rows], viewer_id)
    now = lifecycle.utcnow()
    return [_to_out(r, counts, mine, now) for r in rows]


def rank_by_upvotes(items: Iterable[IssueOut]) -> list[IssueOut]:
    # sorted() is stable, including with reverse=True: ties keep arrival order
    return sorted(items, key=lambda i: i.upvote_count, reverse=True)


def list_issues(
    db: Session,
    viewer_id: int,
    sort: str = SORT_RECENT,
    reporter_id: Optional[int] = None,
    department_id: Optional[int] = None,
) -> list[IssueOut]:
    q = _base_query(db)
    if reporter_id is not None:
        q = q.filter(Issue.reporter_id == reporter_id)
    if department_id is not None:
        q = q.filter(Issue.department_id == department_id)

    if sort == SORT_UPVOTES:
        rows = q.order_by(Issue.id.asc()).all()
        return rank_by_upvotes(annotate(db, rows, viewer_id))
    if sort != SORT_RECENT:
        raise ValidationError(f"Unknown sort mode: {sort}")
    rows = q.order_by(Issue.reported_at.desc(), Issue.id.desc()).all()
    return annotate(db, rows, viewer_id)


def get_issue(db: Session, issue_id: int, viewer_id: int) -> IssueOut:
    row = _base_query(db).filter(Issue.id == issue_id).first()
    if not row:
        raise NotFound("Issue not found")
    return annotate(db, [row], viewer_id)[0]


def _required(name: str, value: Optional[str]) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{name} is required")
    return value


def submit_issue(
    db: Session,
    reporter_id: int,
    department_id: Optional[int],
    room_no: Optional[str],
    item_id: Optional[str],
    title: Optional[str],
    description: Optional[str] = None,
    photo: Optional[PhotoUpload] = None,
) -> IssueOut:
    if department_id is None:
        raise ValidationError("department_id is required")
    room_no = _required("room_no", room_no)
    item_id = _required("item_id", item_id)
    title = _required("title", title)
    description = (description or "").strip() or None

    if photo is not None:
        if photo.content_type not in ALLOWED_PHOTO_TYPES:
            raise ValidationError("Unsupported image type")
        if len(photo.data) > MAX_PHOTO_BYTES:
            raise ValidationError("Image exceeds 5MB")
        if not photo.data:
            raise ValidationError("Image is empty")

    if not db.get(Department, department_id):
        raise NotFound("Department not found")

    photo_url = None
    if photo is not None:
        # raises StorageError before anything is written
        key = make_object_key(reporter_id, photo.filename or "upload.jpg")
        photo_url = upload_image(photo.data, photo.content_type, key)

    now = lifecycle.utcnow()
    obj = Issue(
        reporter_id=reporter_id,
        department_id=department_id,
        room_no=room_no,
        item_id=item_id,
        title=title,
        description=description,
        photo_url=photo_url,
        status=IssueStatus.pending,
        is_priority=False,
        reported_at=now,
        deadline=lifecycle.deadline_for(now),
    )
    db.add(obj)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        # any uploaded photo stays orphaned in the bucket
        raise ConstraintViolation("Issue could not be saved") from e
    db.refresh(obj)
    logger.info("issue %s reported by %s in department %s", obj.id, reporter_id, department_id)
    return get_issue(db, obj.id, reporter_id)


def _insert_upvote(db: Session, issue_id: int, user_id: int) -> None:
    db.add(Upvote(issue_id=issue_id, user_id=user_id))
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConstraintViolation("Already upvoted") from e


def toggle_upvote(db: Session, issue_id: int, user_id: int) -> UpvoteOut:
    if not db.get(Issue, issue_id):
        raise NotFound("Issue not found")
    existing = db.query(Upvote).filter(Upvote.issue_id == issue_id, Upvote.user_id == user_id).first()
    if existing:
        db.delete(existing)
        db.commit()
        has_upvoted = False
    else:
        try:
            _insert_upvote(db, issue_id, user_id)
        except ConstraintViolation:
            # a concurrent request inserted the same pair first
            pass
        has_upvoted = True
    count = db.query(func.count(Upvote.id)).filter(Upvote.issue_id == issue_id).scalar() or 0
    return UpvoteOut(issue_id=issue_id, has_upvoted=has_upvoted, upvote_count=count)


def set_status(db: Session, actor: Actor, issue_id: int, new_status: IssueStatus) -> IssueOut:
    issue = db.get(Issue, issue_id)
    if not issue:
        raise NotFound("Issue not found")
    if not can_set_status(actor, issue):
        raise PermissionDenied("Only the HoD of this department or the principal can update status")
    old = issue.status
    lifecycle.apply_status(issue, new_status)
    db.commit()
    logger.info("issue %s status %s -> %s by %s", issue_id, old.value, new_status.value, actor.id)
    return get_issue(db, issue_id, actor.id)


def delete_issue(db: Session, actor: Actor, issue_id: int) -> None:
    issue = db.get(Issue, issue_id)
    if not issue:
        raise NotFound("Issue not found")
    if not can_delete(actor, issue):
        raise PermissionDenied("You are not the reporter of this issue")

    db.query(Issue).filter(Issue.id == issue_id, Issue.reporter_id == actor.id).delete(
        synchronize_session=False
    )
    db.commit()
    db.expire_all()

    remaining = db.query(func.count(Issue.id)).filter(Issue.id == issue_id).scalar()
    if remaining:
        raise PermissionDenied("Delete did not apply due to permissions")
    logger.info("issue %s deleted by reporter %s", issue_id, actor.id)

# File: app/routers/issues.py
from fastapi import APIRouter, Depends, Query, UploadFile, File, Request, Form, Response
from sqlalchemy.orm import Session
from typing import Optional
from app.db.session import get_db
from app.models.issue import IssueStatus
from app.models.user import Profile
from app.schemas.issue import IssueOut, IssueStatusPatch, SortMode, UpvoteOut
from app.core.policies import Actor
from app.core.ratelimit import limiter
from app.core.security import get_current_user, get_current_actor
from app.services import issues as issue_service
from app.services.issues import MAX_PHOTO_BYTES, PhotoUpload

router = APIRouter(prefix="/issues", tags=["issues"])


@router.post("", response_model=IssueOut, status_code=201)
@limiter.limit("10/minute")
def create_issue(
    request: Request,
    department_id: int = Form(...),
    room_no: str = Form(...),
    item_id: str = Form(...),
    title: str = Form(...),
    description: Optional[str] = Form(None),
    photo: UploadFile | None = File(default=None),
    db: Session = Depends(get_db),
    user: Profile = Depends(get_current_user),
):
    upload = None
    if photo is not None and photo.filename:
        upload = PhotoUpload(
            data=photo.file.read(MAX_PHOTO_BYTES + 1),
            content_type=photo.content_type or "",
            filename=photo.filename,
        )
    return issue_service.submit_issue(
        db,
        reporter_id=user.id,
        department_id=department_id,
        room_no=room_no,
        item_id=item_id,
        title=title,
        description=description,
        photo=upload,
    )


@router.get("", response_model=list[IssueOut])
@limiter.limit("60/minute")
def list_issues(
    request: Request,
    sort: SortMode = Query(default="upvotes"),
    mine_only: int = Query(default=0, ge=0, le=1),
    db: Session = Depends(get_db),
    user: Profile = Depends(get_current_user),
):
    # --------- MINE ONLY (the reporter's own-issues view) ---------
    reporter_id = user.id if mine_only else None
    return issue_service.list_issues(db, user.id, sort, reporter_id=reporter_id)


@router.get("/{issue_id}", response_model=IssueOut)
def get_issue(issue_id: int, db: Session = Depends(get_db), user: Profile = Depends(get_current_user)):
    return issue_service.get_issue(db, issue_id, user.id)


@router.post("/{issue_id}/upvote", response_model=UpvoteOut)
def toggle_upvote(issue_id: int, db: Session = Depends(get_db), user: Profile = Depends(get_current_user)):
    return issue_service.toggle_upvote(db, issue_id, user.id)


@router.patch("/{issue_id}/status", response_model=IssueOut)
def update_status(
    issue_id: int,
    body: IssueStatusPatch,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return issue_service.set_status(db, actor, issue_id, IssueStatus(body.status))


@router.delete("/{issue_id}", status_code=204)
def delete_issue(issue_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    issue_service.delete_issue(db, actor, issue_id)
    return Response(status_code=204)

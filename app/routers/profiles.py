# File: app/routers/profiles.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.core.errors import NotFound, PermissionDenied
from app.core.policies import Actor, can_edit_profile, can_view_all_roles
from app.core.security import get_current_user, get_current_actor, require
from app.models.department import Department
from app.models.user import Profile
from app.schemas.auth import ProfileUpdate
from app.schemas.profile import ProfileOut, ProfilePublic, RoleRowOut
from app.services.roles import get_roles, list_all_roles

router = APIRouter(tags=["profiles"])

def profile_out(db: Session, user: Profile) -> ProfileOut:
    out = ProfileOut.model_validate(user)
    out.roles = sorted(r.value for r in get_roles(db, user.id))
    return out

def apply_profile_update(db: Session, user: Profile, body: ProfileUpdate) -> Profile:
    if body.full_name is not None:
        user.full_name = body.full_name.strip()
    if "department_id" in body.model_fields_set:
        if body.department_id is not None and not db.get(Department, body.department_id):
            raise NotFound("Department not found")
        user.department_id = body.department_id
    db.commit(); db.refresh(user)
    return user

@router.get("/profiles/{profile_id}", response_model=ProfilePublic)
def get_profile(profile_id: int, db: Session = Depends(get_db), _=Depends(get_current_user)):
    p = db.get(Profile, profile_id)
    if not p:
        raise NotFound("Profile not found")
    return p

@router.put("/profiles/{profile_id}", response_model=ProfileOut)
def update_profile(profile_id: int, body: ProfileUpdate,
                   db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    if not can_edit_profile(actor, profile_id):
        raise PermissionDenied("You can only edit your own profile")
    p = db.get(Profile, profile_id)
    if not p:
        raise NotFound("Profile not found")
    return profile_out(db, apply_profile_update(db, p, body))

@router.get("/admin/roles", response_model=list[RoleRowOut])
def all_roles(db: Session = Depends(get_db),
              _=Depends(require(can_view_all_roles, "Only the principal can view all roles"))):
    return [RoleRowOut(user_id=r.user_id, role=r.role.value) for r in list_all_roles(db)]

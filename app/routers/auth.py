# File: app/routers/auth.py

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import logging
from app.db.session import get_db
from app.models.department import Department
from app.models.user import Profile
from app.schemas.auth import RegisterIn, LoginIn, RefreshIn, TokenPair, ProfileUpdate
from app.schemas.profile import ProfileOut
from app.core.errors import ConstraintViolation, NotFound
from app.core.security import hash_password, verify_password, make_tokens, decode_token, get_current_user
from app.routers.profiles import apply_profile_update, profile_out

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)

@router.post("/register", response_model=TokenPair, status_code=201)
def register(body: RegisterIn, db: Session = Depends(get_db)):
    email = body.email.lower()
    college_id = body.college_id.strip()
    if db.query(Profile).filter(Profile.email == email).first():
        raise ConstraintViolation("Email already registered")
    if db.query(Profile).filter(Profile.college_id == college_id).first():
        raise ConstraintViolation("College ID already registered")
    if body.department_id is not None and not db.get(Department, body.department_id):
        raise NotFound("Department not found")

    # the profile row is the identity: created together with the credentials
    user = Profile(
        college_id=college_id,
        full_name=body.full_name.strip(),
        email=email,
        hashed_password=hash_password(body.password),
        department_id=body.department_id,
        is_active=True,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConstraintViolation("Email or college ID already registered") from e
    db.refresh(user)
    logger.info("profile %s registered (%s)", user.id, user.college_id)

    # Sign-in immediately
    return make_tokens(user.id)

@router.post("/login", response_model=TokenPair)
def login(body: LoginIn, db: Session = Depends(get_db)):
    user = db.query(Profile).filter(Profile.email == body.email.lower()).first()
    if not user or not user.hashed_password:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not verify_password(body.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Your account has been deactivated. Please contact the administrator.")
    return make_tokens(user.id)

@router.post("/refresh", response_model=TokenPair)
def refresh(body: RefreshIn, db: Session = Depends(get_db)):
    profile_id = decode_token(body.refresh_token, kind="refresh")
    user = db.get(Profile, profile_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="User not found")
    return make_tokens(user.id)

@router.get("/me", response_model=ProfileOut)
def me(user: Profile = Depends(get_current_user), db: Session = Depends(get_db)):
    return profile_out(db, user)

@router.put("/profile", response_model=ProfileOut)
def update_own_profile(
    body: ProfileUpdate,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return profile_out(db, apply_profile_update(db, user, body))

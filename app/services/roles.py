# File: app/services/roles.py
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.policies import Actor
from app.models.user import AppRole, Profile, UserRoleAssignment

logger = logging.getLogger(__name__)


def get_roles(db: Session, user_id: int) -> set[AppRole]:
    """Role labels held by ``user_id``; empty when the lookup fails."""
    try:
        rows = db.query(UserRoleAssignment.role).filter(UserRoleAssignment.user_id == user_id).all()
    except SQLAlchemyError:
        logger.warning("role lookup failed for user %s, treating as no role", user_id, exc_info=True)
        db.rollback()
        return set()
    return {r[0] for r in rows}


def load_actor(db: Session, profile: Profile) -> Actor:
    return Actor(
        id=profile.id,
        department_id=profile.department_id,
        roles=frozenset(get_roles(db, profile.id)),
    )


def list_all_roles(db: Session) -> list[UserRoleAssignment]:
    return db.query(UserRoleAssignment).order_by(UserRoleAssignment.user_id, UserRoleAssignment.role).all()


def grant_role(db: Session, user_id: int, role: AppRole) -> bool:
    """Adds the role if missing; returns False when it was already held."""
    exists = (
        db.query(UserRoleAssignment)
        .filter(UserRoleAssignment.user_id == user_id, UserRoleAssignment.role == role)
        .first()
    )
    if exists:
        return False
    db.add(UserRoleAssignment(user_id=user_id, role=role))
    db.commit()
    return True

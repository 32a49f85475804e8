# File: seed_test_users.py
# Project: college-issue-portal

"""Create the default departments and the demo student / HoD / principal accounts.

Usage: python seed_test_users.py
"""
from dotenv import load_dotenv

load_dotenv(override=True)

import logging

from sqlalchemy.orm import Session

from app.core.security import hash_password
from app.db.session import SessionLocal
from app.models.department import Department
from app.models.user import AppRole, Profile
from app.services.roles import grant_role

logger = logging.getLogger("seed_test_users")

DEFAULT_DEPARTMENTS = [
    ("Computer Science", "CS"),
    ("Electronics", "EC"),
    ("Mechanical", "ME"),
    ("Civil", "CE"),
    ("Electrical", "EE"),
]

TEST_PASSWORD = "password123"

TEST_USERS = [
    {"email": "student@bitdurg.ac.in", "college_id": "STU001", "full_name": "Test Student",
     "role": AppRole.student, "department": "CS"},
    {"email": "principal@bitdurg.ac.in", "college_id": "PRIN001", "full_name": "Test Principal",
     "role": AppRole.principal, "department": None},
    {"email": "hod@bitdurg.ac.in", "college_id": "HOD001", "full_name": "HOD Computer Science",
     "role": AppRole.hod, "department": "CS"},
]


def ensure_departments(db: Session) -> dict[str, Department]:
    by_code = {d.code: d for d in db.query(Department).all()}
    for name, code in DEFAULT_DEPARTMENTS:
        if code not in by_code:
            dept = Department(name=name, code=code)
            db.add(dept)
            by_code[code] = dept
    db.commit()
    return by_code


def seed(db: Session) -> list[dict]:
    departments = ensure_departments(db)
    results = []
    for entry in TEST_USERS:
        try:
            user = db.query(Profile).filter(Profile.email == entry["email"]).first()
            if not user:
                dept = departments.get(entry["department"]) if entry["department"] else None
                user = Profile(
                    email=entry["email"],
                    college_id=entry["college_id"],
                    full_name=entry["full_name"],
                    hashed_password=hash_password(TEST_PASSWORD),
                    department_id=dept.id if dept else None,
                )
                db.add(user)
                db.commit()
                db.refresh(user)
        except Exception as e:
            db.rollback()
            logger.error("Error creating user %s: %s", entry["email"], e)
            results.append({"email": entry["email"], "status": "error", "error": str(e)})
            continue

        try:
            grant_role(db, user.id, entry["role"])
        except Exception as e:
            db.rollback()
            logger.error("Error assigning role for %s: %s", entry["email"], e)
            results.append({"email": entry["email"], "status": "partial",
                            "message": "User created but role assignment failed", "error": str(e)})
            continue
        results.append({"email": entry["email"], "status": "success", "role": entry["role"].value, "user_id": user.id})
    return results


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    db = SessionLocal()
    try:
        for r in seed(db):
            print(r)
    finally:
        db.close()

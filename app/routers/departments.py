# File: app/routers/departments.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.core.security import get_current_user
from app.models.department import Department
from app.schemas.profile import DepartmentOut

router = APIRouter(prefix="/departments", tags=["departments"])

@router.get("", response_model=list[DepartmentOut])
def list_departments(db: Session = Depends(get_db), _=Depends(get_current_user)):
    return db.query(Department).order_by(Department.name.asc()).all()

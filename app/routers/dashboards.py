# File: app/routers/dashboards.py
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.core.policies import Actor, can_view_hod_dashboard, can_view_principal_dashboard
from app.core.security import require
from app.schemas.issue import HodDashboardOut, PrincipalDashboardOut
from app.services.dashboards import hod_dashboard, principal_dashboard

router = APIRouter(prefix="/dashboards", tags=["dashboards"])

@router.get("/hod", response_model=HodDashboardOut)
def hod(db: Session = Depends(get_db),
        actor: Actor = Depends(require(can_view_hod_dashboard, "You do not have HoD access"))):
    return hod_dashboard(db, actor)

@router.get("/principal", response_model=PrincipalDashboardOut)
def principal(department_id: Optional[int] = Query(default=None),
              db: Session = Depends(get_db),
              actor: Actor = Depends(require(can_view_principal_dashboard, "You do not have principal access"))):
    return principal_dashboard(db, actor, department_id)

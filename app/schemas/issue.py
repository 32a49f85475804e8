from pydantic import BaseModel
from typing import Optional, Literal, List
from datetime import datetime

Status = Literal["pending", "acknowledged", "work_done"]
SortMode = Literal["upvotes", "recent"]


class ReporterLite(BaseModel):
    """Reporter info embedded in feed cards."""
    full_name: Optional[str] = None
    college_id: Optional[str] = None


class DepartmentLite(BaseModel):
    name: Optional[str] = None
    code: Optional[str] = None


class IssueOut(BaseModel):
    id: int
    reporter_id: int
    department_id: int
    room_no: str
    item_id: str
    title: str
    description: Optional[str] = None
    photo_url: Optional[str] = None
    status: Status
    is_priority: bool = False

    reported_at: datetime
    deadline: datetime
    resolved_at: Optional[datetime] = None

    # Derived per viewer / per request
    upvote_count: int = 0
    has_upvoted: bool = False
    days_remaining: int
    due_soon: bool = False

    reporter: Optional[ReporterLite] = None
    department: Optional[DepartmentLite] = None


class IssueStatusPatch(BaseModel):
    status: Status


class UpvoteOut(BaseModel):
    issue_id: int
    has_upvoted: bool
    upvote_count: int


class IssueStats(BaseModel):
    total: int
    pending: int
    acknowledged: int
    resolved: int
    priority: Optional[int] = None


class DepartmentBreakdown(BaseModel):
    id: int
    name: str
    code: str
    total: int
    pending: int


class HodDashboardOut(BaseModel):
    department: Optional[DepartmentLite] = None
    stats: IssueStats
    items: List[IssueOut]


class PrincipalDashboardOut(BaseModel):
    stats: IssueStats
    departments: List[DepartmentBreakdown]
    items: List[IssueOut]

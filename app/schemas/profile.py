# File: app/schemas/profile.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

class DepartmentOut(BaseModel):
    id: int
    name: str
    code: str

    class Config:
        from_attributes = True

class ProfilePublic(BaseModel):
    """What any signed-in user may see about another profile."""
    id: int
    college_id: str
    full_name: str
    department_id: Optional[int] = None

    class Config:
        from_attributes = True

class ProfileOut(ProfilePublic):
    email: str
    is_active: bool
    created_at: Optional[datetime] = None
    roles: List[str] = []

class RoleRowOut(BaseModel):
    user_id: int
    role: str

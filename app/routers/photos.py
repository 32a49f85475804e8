# File: app/routers/photos.py
from fastapi import APIRouter, Depends, Response
from app.core.security import get_current_user
from app.models.user import Profile
from app.services.storage import delete_object

router = APIRouter(prefix="/photos", tags=["photos"])

@router.delete("/{path:path}", status_code=204)
def delete_photo(path: str, user: Profile = Depends(get_current_user)):
    delete_object(user.id, path)
    return Response(status_code=204)

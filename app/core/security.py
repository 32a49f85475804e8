# app/core/security.py
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Callable, Optional
import time, jwt
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.errors import PermissionDenied
from app.core.policies import Actor
from passlib.hash import bcrypt_sha256
from app.db.session import get_db
from app.models.user import Profile
from app.services.roles import load_actor

ALGO = "HS256"
ACCESS_TTL = 15 * 60
REFRESH_TTL = 7 * 24 * 3600
bearer = HTTPBearer(auto_error=False)

def hash_password(raw: str) -> str:
    return bcrypt_sha256.hash(raw)

def verify_password(raw: str, hashed: str) -> bool:
    return bcrypt_sha256.verify(raw, hashed)

def _make_token(sub: str, kind: str, ttl: int) -> str:
    now = int(time.time())
    payload = {"sub": sub, "kind": kind, "iat": now, "exp": now + ttl}
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGO)

def make_tokens(profile_id: int) -> dict:
    # no role claims; roles are re-read from the database on each request
    return {
        "access_token": _make_token(str(profile_id), "access", ACCESS_TTL),
        "refresh_token": _make_token(str(profile_id), "refresh", REFRESH_TTL),
        "token_type": "bearer",
        "expires_in": ACCESS_TTL,
    }

def decode_token(token: str, kind: str = "access") -> int:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[ALGO])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except jwt.PyJWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    sub = payload.get("sub")
    if payload.get("kind") != kind or not sub or not str(sub).isdigit():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")
    return int(sub)

def get_current_user(creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
                     db: Session = Depends(get_db)) -> Profile:
    if not creds:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    profile_id = decode_token(creds.credentials)
    user = db.get(Profile, profile_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="user_inactive")
    return user

def get_current_actor(user: Profile = Depends(get_current_user),
                      db: Session = Depends(get_db)) -> Actor:
    return load_actor(db, user)

def require(check: Callable[[Actor], bool], detail: str = "forbidden"):
    """Dependency gating a route on one of the predicates in app.core.policies."""
    def _dep(actor: Actor = Depends(get_current_actor)):
        if not check(actor):
            raise PermissionDenied(detail)
        return actor
    return _dep

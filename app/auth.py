"""Password hashing, JWT issuance and the request principals built from them."""
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from app import config
from app.database import get_db
from app.db.crud import user as user_crud
from app.db.models.user import User
from app.db.models.enums import UserRole
from app.errors import Forbidden, Unauthorized

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)

ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _encode(claims: dict, secret: str, expires: timedelta) -> str:
    to_encode = claims.copy()
    to_encode.update({"exp": datetime.utcnow() + expires})
    return jwt.encode(to_encode, secret, algorithm=ALGORITHM)


def create_access_token(user: User) -> str:
    role = user.role.value if isinstance(user.role, UserRole) else user.role
    return _encode(
        {"sub": user.id, "email": user.email, "role": role},
        config.JWT_SECRET,
        timedelta(minutes=config.JWT_EXPIRES_MINUTES),
    )


def create_refresh_token(user: User) -> str:
    return _encode(
        {"sub": user.id, "type": "refresh"},
        config.REFRESH_TOKEN_SECRET,
        timedelta(days=config.REFRESH_TOKEN_EXPIRES_DAYS),
    )


def create_stream_token(camera_id: str, user_id: str, store_id: str) -> str:
    return _encode(
        {"cameraId": camera_id, "userId": user_id, "storeId": store_id, "type": "stream"},
        config.JWT_SECRET,
        timedelta(minutes=config.STREAM_TOKEN_EXPIRES_MINUTES),
    )


def decode_token(token: str, secret: Optional[str] = None) -> dict:
    try:
        return jwt.decode(token, secret or config.JWT_SECRET, algorithms=[ALGORITHM])
    except JWTError:
        raise Unauthorized("Invalid token")


def user_from_token(db: Session, token: str) -> User:
    """Resolve a bearer token to a live user; used by HTTP and WebSocket auth alike."""
    payload = decode_token(token)
    user_id = payload.get("sub")
    if user_id is None:
        raise Unauthorized("Invalid token")
    user = user_crud.get_user(db, user_id)
    if user is None:
        raise Unauthorized("User not found")
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthorized("No token provided")
    return user_from_token(db, credentials.credentials)


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.ADMIN:
        raise Forbidden("Admin access required")
    return user


def require_client(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.CLIENT:
        raise Forbidden("Client access required")
    return user


def is_admin(user: User) -> bool:
    return user.role == UserRole.ADMIN

import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app import auth as auth_utils
from app import config
from app.dependencies import get_db
from app.db.crud import user as user_crud
from app.db.models.enums import UserRole
from app.db.schemas.common import Envelope, MessageOut, ok
from app.db.schemas.user import AuthResponse, LoginRequest, RefreshRequest, RegisterRequest, TokenOut, UserWithStore
from app.errors import Conflict, Unauthorized

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/auth",
    tags=["auth"]
)

def _auth_payload(user) -> AuthResponse:
    return AuthResponse(
        user=UserWithStore.model_validate(user),
        token=auth_utils.create_access_token(user),
        refresh_token=auth_utils.create_refresh_token(user),
    )

@router.post("/register", response_model=Envelope[AuthResponse], status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """Self-service signup; always creates a CLIENT account"""
    if user_crud.get_user_by_email_or_phone(db, data.email, data.phone):
        raise Conflict("User with this email or phone already exists", code="USER_EXISTS")
    user = user_crud.create_user(
        db,
        email=data.email,
        phone=data.phone,
        password_hash=auth_utils.hash_password(data.password),
        role=UserRole.CLIENT,
    )
    logger.info(f"Registered client {user.id}")
    return ok(_auth_payload(user))

@router.post("/login", response_model=Envelope[AuthResponse])
def login(data: LoginRequest, db: Session = Depends(get_db)):
    user = user_crud.get_user_by_login(db, data.email_or_phone, data.role)
    if user is None or not auth_utils.verify_password(data.password, user.password_hash):
        raise Unauthorized("Invalid email/phone or password", code="INVALID_CREDENTIALS")
    return ok(_auth_payload(user))

@router.post("/refresh", response_model=Envelope[TokenOut])
def refresh(data: RefreshRequest, db: Session = Depends(get_db)):
    if not data.refresh_token:
        raise Unauthorized("Refresh token required")
    payload = auth_utils.decode_token(data.refresh_token, config.REFRESH_TOKEN_SECRET)
    user = user_crud.get_user(db, payload.get("sub", ""))
    if user is None:
        raise Unauthorized("User not found")
    return ok(TokenOut(token=auth_utils.create_access_token(user)))

@router.post("/logout", response_model=Envelope[MessageOut])
def logout():
    """Tokens are stateless; the client just drops them"""
    return ok(MessageOut(message="Logged out successfully"))

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.exceptions import AuthenticationError, ConflictError
from core.logging import get_logger
from database import get_db
from modules.auth.dependencies import get_current_user
from modules.auth.services.auth_service import AuthService
from modules.auth.schemas.auth_schemas import LoginRequest, RegisterRequest, TokenResponse
from modules.users.models.user import User
from modules.users.schemas.user_schemas import UserResponse

router = APIRouter(prefix="/auth", tags=["authentication"])
logger = get_logger(__name__)


@router.post("/login", response_model=TokenResponse)
def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    """Exchange email + password for a bearer token"""
    user = AuthService.authenticate_user(db, login_data.email, login_data.password)
    if not user:
        raise AuthenticationError("Incorrect email or password")

    access_token = AuthService.create_access_token(data={"sub": str(user.id)})
    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        user_id=user.id,
        user_name=user.name,
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register_user(user_data: RegisterRequest, db: Session = Depends(get_db)):
    if db.query(User).filter(User.email == user_data.email).first():
        raise ConflictError("Email is already registered")

    user = AuthService.register_user(db, user_data.name, user_data.email, user_data.password)
    logger.info("User registered", extra={"user_id": user.id})
    return user


@router.get("/me", response_model=UserResponse)
def get_current_user_info(current_user: User = Depends(get_current_user)):
    return current_user

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from modules.auth.dependencies import get_current_user
from modules.users.models.user import User
from modules.users.schemas.user_schemas import InitialEnableRequest, UserEnvelope, UserUpdate
from modules.users.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.put("", response_model=UserEnvelope)
def update_profile(
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = UserService.update_profile(
        db, current_user,
        name=payload.name,
        email=payload.email,
        password=payload.password,
    )
    return {"message": "User updated successfully", "user": user}


@router.post("/initial-enable", response_model=UserEnvelope)
def initial_enable(
    payload: InitialEnableRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Bind a wallet to the account and enable it"""
    user = UserService.initial_enable(
        db, current_user, payload.wallet_address, payload.initial_transaction_hash
    )
    return {"message": "User enabled successfully", "user": user}

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from modules.auth.schemas.auth_schemas import CamelModel


class UserSummary(CamelModel):
    id: int
    name: str
    email: str
    wallet_address: Optional[str] = None


class UserResponse(UserSummary):
    enabled: bool
    initial_transaction_hash: Optional[str] = None
    created_at: Optional[datetime] = None


class UserUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=8)


class InitialEnableRequest(CamelModel):
    wallet_address: Optional[str] = None
    initial_transaction_hash: Optional[str] = None


class UserEnvelope(CamelModel):
    message: str
    user: UserResponse

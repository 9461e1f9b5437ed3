from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from core.exceptions import AuthenticationError
from database import get_db
from modules.auth.services.auth_service import AuthService, JWTTokenVerifier, TokenVerifier
from modules.users.models.user import User

security = HTTPBearer(auto_error=False)


def get_token_verifier() -> TokenVerifier:
    return JWTTokenVerifier()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> User:
    """Dependency resolving the authenticated principal"""
    if credentials is None:
        raise AuthenticationError("Missing bearer token")
    user = AuthService.get_current_user(db, credentials.credentials, verifier)
    if user is None:
        raise AuthenticationError("Invalid token")
    return user

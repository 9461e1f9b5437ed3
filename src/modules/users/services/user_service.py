from typing import Optional

from sqlalchemy.orm import Session

from core.exceptions import ConflictError, ValidationError
from core.logging import get_logger
from modules.auth.services.auth_service import AuthService
from modules.users.models.user import User

logger = get_logger(__name__)


class UserService:

    @staticmethod
    def update_profile(
        session: Session,
        user: User,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> User:
        """Updates the caller's own profile; only the given fields change."""
        if email and email != user.email:
            taken = session.query(User).filter(User.email == email, User.id != user.id).first()
            if taken:
                raise ConflictError("Email is already registered")
            user.email = email
        if name:
            user.name = name
        if password:
            user.password_hash = AuthService.get_password_hash(password)

        session.commit()
        session.refresh(user)
        return user

    @staticmethod
    def initial_enable(
        session: Session,
        user: User,
        wallet_address: Optional[str],
        initial_transaction_hash: Optional[str],
    ) -> User:
        """Binds the user's wallet and marks the account enabled."""
        if not wallet_address or not initial_transaction_hash:
            raise ValidationError("Missing required fields: walletAddress, initialTransactionHash")

        user.wallet_address = wallet_address
        user.initial_transaction_hash = initial_transaction_hash
        user.enabled = True
        session.commit()
        session.refresh(user)

        logger.info("User enabled", extra={"user_id": user.id})
        return user

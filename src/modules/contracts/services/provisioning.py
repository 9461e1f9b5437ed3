import secrets
import string
from typing import NamedTuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.config import settings
from core.exceptions import ConflictError
from core.logging import get_logger
from modules.auth.services.auth_service import AuthService
from modules.users.models.user import User

logger = get_logger(__name__)

PASSWORD_ALPHABET = string.ascii_letters + string.digits


class ProvisionedSigner(NamedTuple):
    id: int
    email: str
    plain_password: str


def generate_temporary_password(length: int = settings.TEMP_PASSWORD_LENGTH) -> str:
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


def provision_signer(session: Session, email: str, wallet_address: str) -> ProvisionedSigner:
    """
    Creates a placeholder account for an invited signer who has none.

    The account starts disabled and borrows the inviter's wallet until the
    signer binds their own. Runs inside the caller's transaction; the caller
    commits or rolls back. The plaintext password is only returned, never
    stored.
    """
    plain_password = generate_temporary_password()
    user = User(
        name=email,
        email=email,
        password_hash=AuthService.get_password_hash(plain_password),
        wallet_address=wallet_address,
        enabled=False,
    )
    session.add(user)
    try:
        session.flush()
    except IntegrityError as exc:
        # Another invitation created the same address first.
        raise ConflictError(f"An account for {email} already exists", details={"email": email}) from exc

    logger.info("Provisioned signer account", extra={"user_id": user.id, "email": email})
    return ProvisionedSigner(id=user.id, email=email, plain_password=plain_password)

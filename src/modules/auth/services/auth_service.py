from datetime import datetime, timedelta
from typing import Optional, Protocol
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from core.config import settings
from modules.users.models.user import User

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.PASSWORD_HASH_ROUNDS,
)


class TokenVerifier(Protocol):
    """Turns a bearer token into the subject (user id) it was issued for."""

    def verify(self, token: str) -> Optional[str]:
        ...


class JWTTokenVerifier:

    def __init__(self, secret_key: str = settings.SECRET_KEY, algorithm: str = settings.ALGORITHM):
        self.secret_key = secret_key
        self.algorithm = algorithm

    def verify(self, token: str) -> Optional[str]:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None
        return payload.get("sub")


class AuthService:

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Checks a plaintext password against its bcrypt hash"""
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def get_password_hash(password: str) -> str:
        """Hashes a password with bcrypt"""
        return pwd_context.hash(password)

    @staticmethod
    def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
        """Authenticates a user by email and password.

        Accounts that have not bound a wallet yet (``enabled`` is false) can
        still log in; that is how invited signers reach /users/initial-enable.
        """
        user = db.query(User).filter(User.email == email).first()
        if not user:
            return None
        if not AuthService.verify_password(password, user.password_hash):
            return None
        return user

    @staticmethod
    def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
        """Creates a signed JWT"""
        to_encode = data.copy()
        expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def get_current_user(db: Session, token: str, verifier: TokenVerifier) -> Optional[User]:
        """Resolves the user a token was issued for"""
        subject = verifier.verify(token)
        if subject is None:
            return None
        try:
            user_id = int(subject)
        except (TypeError, ValueError):
            return None
        return db.get(User, user_id)

    @staticmethod
    def register_user(db: Session, name: str, email: str, password: str) -> User:
        user = User(
            name=name,
            email=email,
            password_hash=AuthService.get_password_hash(password),
            enabled=False,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

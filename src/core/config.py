"""
core/config.py

Application configuration.

Values come from the environment and from a `.env` file next to the
process working directory. The file is read once, when this module is
first imported.
"""

from typing import List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # Database
    DATABASE_URL: str = Field(
        default="postgresql://postgres:root@db:5432/contracts-db",
        description="SQLAlchemy database URL"
    )

    # Auth
    SECRET_KEY: str = Field(
        default="change-me-in-production",
        description="Key used to sign access tokens"
    )
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    PASSWORD_HASH_ROUNDS: int = Field(
        default=12,
        ge=10,
        description="bcrypt cost factor"
    )
    TEMP_PASSWORD_LENGTH: int = Field(
        default=16,
        ge=12,
        description="Length of the temporary password given to invited signers"
    )

    # SMTP
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_FROM: Optional[str] = None
    SMTP_USE_TLS: bool = True
    SMTP_TIMEOUT: int = 10

    FRONTEND_URL: str = "http://localhost:3000"

    # Contracts
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10 MB
    CONTRACT_TX_TIMEOUT_SECONDS: float = 10.0

    # Application
    PORT: int = 3100
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    @field_validator("SECRET_KEY")
    @classmethod
    def validate_secret_key(cls, v, info):
        if info.data.get("ENVIRONMENT") == "production" and v == "change-me-in-production":
            raise ValueError("SECRET_KEY must be changed in production environment")
        return v

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def mail_from(self) -> Optional[str]:
        return self.SMTP_FROM or self.SMTP_USER


settings = Settings()

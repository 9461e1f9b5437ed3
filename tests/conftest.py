import io
import os

# Settings are read on first import; point them at throwaway values first.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "10")

import pytest
from fastapi.testclient import TestClient
from reportlab.pdfgen import canvas
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app
from modules.auth.services.auth_service import AuthService
from modules.notifications.dependencies import get_email_sender
from modules.notifications.services.notification_service import NotificationService
from modules.users.models.user import User

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class RecordingEmailSender:
    """Stands in for SMTP; keeps every email it is asked to deliver."""

    def __init__(self):
        self.sent = []

    def send(self, email):
        self.sent.append(email)
        return True

    @property
    def recipients(self):
        return [email.to for email in self.sent]


@pytest.fixture(autouse=True)
def clean_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def other_session():
    """A second, independent session, for interleaving two callers."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def email_sender():
    return RecordingEmailSender()


@pytest.fixture
def notifier(email_sender):
    return NotificationService(email_sender)


@pytest.fixture
def client(email_sender):
    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    counter = {"n": 0}

    def _make_user(email=None, name=None, wallet_address="0xWALLET", password="password123", enabled=True):
        counter["n"] += 1
        user = User(
            name=name or f"User {counter['n']}",
            email=email or f"user{counter['n']}@mail.com",
            password_hash=AuthService.get_password_hash(password),
            wallet_address=wallet_address,
            enabled=enabled,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


def auth_headers(user):
    token = AuthService.create_access_token(data={"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture(scope="session")
def example_pdf():
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer)
    c.drawString(100, 750, "Service agreement between the parties.")
    c.save()
    buffer.seek(0)
    return buffer.read()

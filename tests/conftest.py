import os

# Configure the application before anything imports it
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["EMAILS_ENABLED"] = "false"
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key"

from dataclasses import dataclass  # noqa: E402
from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import List  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from leaderboard_backend.core.clock import Clock, get_clock  # noqa: E402
from leaderboard_backend.core.database import Base, get_db  # noqa: E402
from leaderboard_backend.core.exceptions import EmailFailedException  # noqa: E402
from leaderboard_backend.core.security import SecurityUtils  # noqa: E402
from leaderboard_backend.main import app  # noqa: E402
from leaderboard_backend.models import Category, Leaderboard, RunType, SortDirection, User, UserRole  # noqa: E402
from leaderboard_backend.services.email import EmailService, get_email_service  # noqa: E402

START = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
PASSWORD = "P4ssword"


class FakeClock(Clock):
    def __init__(self, now: datetime):
        self._now = now

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs) -> None:
        self._now += timedelta(**kwargs)


@dataclass
class SentEmail:
    recipient: str
    subject: str
    body: str


class RecordingEmailService(EmailService):
    def __init__(self):
        self.sent: List[SentEmail] = []
        self.fail = False

    async def send(self, recipient: str, subject: str, body: str) -> None:
        if self.fail:
            raise EmailFailedException(details={"recipient": recipient})
        self.sent.append(SentEmail(recipient, subject, body))


def parse_time(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.fixture
def clock():
    return FakeClock(START)


@pytest.fixture
def emails():
    return RecordingEmailService()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine, clock):
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    def make_session():
        session = factory()
        session.info["clock"] = clock
        return session

    return make_session


@pytest.fixture
def db(session_factory):
    """Session for arranging and checking state outside of requests"""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory, clock, emails):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_email_service] = lambda: emails

    yield TestClient(app)

    app.dependency_overrides.clear()


def make_user(db, username: str, role: UserRole = UserRole.CONFIRMED, password: str = PASSWORD) -> User:
    user = User(
        username=username,
        email=f"{username.lower()}@example.com",
        password=SecurityUtils.get_password_hash(password),
        role=role,
    )
    db.add(user)
    db.commit()
    return user


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {SecurityUtils.create_access_token(user)}"}


@pytest.fixture
def admin(db):
    return make_user(db, "admin", UserRole.ADMINISTRATOR)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def leaderboard(db):
    board = Leaderboard(name="Super Mario 64", slug="sm64")
    db.add(board)
    db.commit()
    return board


def make_category(db, leaderboard, slug: str, **kwargs) -> Category:
    fields = {
        "name": slug.replace("-", " ").title(),
        "sort_direction": SortDirection.ASCENDING,
        "type": RunType.TIME,
    }
    fields.update(kwargs)
    category = Category(leaderboard_id=leaderboard.id, slug=slug, **fields)
    db.add(category)
    db.commit()
    return category

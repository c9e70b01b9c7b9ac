import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from waste_rewards.config import settings
from waste_rewards.db import get_session
from waste_rewards.dependencies import verifier_dependency
from waste_rewards.main import app
from waste_rewards.models import RewardOffer, User
from waste_rewards.security import create_access_token
from waste_rewards.services.verification import VerificationResult

DATABASE_URL = "sqlite://"
engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False}, poolclass=StaticPool)


class FakeVerifier:
    def __init__(self, match: bool = True, confidence: float = 0.95, error: Exception | None = None):
        self.match = match
        self.confidence = confidence
        self.error = error
        self.calls = []

    def verify(self, image: bytes, mime_type: str, waste_type: str) -> VerificationResult:
        self.calls.append((image, mime_type, waste_type))
        if self.error:
            raise self.error
        return VerificationResult(waste_type_match=self.match, confidence=self.confidence)


@pytest.fixture(name="session")
def session_fixture():
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="verifier")
def verifier_fixture():
    return FakeVerifier()


@pytest.fixture(name="client")
def client_fixture(session: Session, verifier: FakeVerifier):
    def get_session_override():
        yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[verifier_dependency] = lambda: verifier
    client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
    yield client
    app.dependency_overrides.clear()


def _make_user(session: Session, email: str, name: str, role: str = "user") -> User:
    user = User(email=email, name=name, role=role)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture(name="user")
def user_fixture(session: Session) -> User:
    return _make_user(session, "riley@example.com", "Riley")


@pytest.fixture(name="collector")
def collector_fixture(session: Session) -> User:
    return _make_user(session, "casey@example.com", "Casey")


@pytest.fixture(name="admin")
def admin_fixture(session: Session) -> User:
    return _make_user(session, "admin@example.com", "Alex", role="admin")


@pytest.fixture(name="offer")
def offer_fixture(session: Session) -> RewardOffer:
    offer = RewardOffer(name="Tote Bag", cost=5, description="Cotton tote")
    session.add(offer)
    session.commit()
    session.refresh(offer)
    return offer


@pytest.fixture(name="auth_headers")
def auth_headers_fixture():
    def make(user: User) -> dict[str, str]:
        token = create_access_token({"sub": str(user.id), "email": user.email})
        return {"Cookie": f"{settings.AUTH_COOKIE_NAME}={token}"}

    return make

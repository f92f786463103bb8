import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_tunely.db")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test")

from tunely.main import app as fastapi_app  # noqa: E402
from tunely.database import Base  # noqa: E402
from tunely.models import ArtistAccount, ArtistSession, Profile  # noqa: E402
import tunely.auth  # noqa: E402

CUSTOMER_ID = "fan-1"
ARTIST_ID = "artist-1"

engine = create_engine(os.environ["DATABASE_URL"], connect_args={
                       "check_same_thread": False})
TestingSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db():
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def other_db():
    """A second, independent connection for interleaving transactions."""
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def caller():
    """Id the overridden auth dependency reports; tests may reassign ``caller["id"]``."""
    return {"id": CUSTOMER_ID}


@pytest.fixture
def client(monkeypatch, caller):
    # Route handlers and the webhook open sessions against the test database
    monkeypatch.setattr("tunely.routes.SessionLocal", TestingSessionLocal)
    monkeypatch.setattr("tunely.main.SessionLocal", TestingSessionLocal)

    fastapi_app.dependency_overrides[tunely.auth.verify_token] = lambda: caller["id"]

    with TestClient(fastapi_app) as c:
        yield c

    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def artist(db):
    """An onboarded artist whose Stripe account can take charges."""
    db.add(Profile(id=ARTIST_ID, email="artist@example.com", display_name="The Band", role="artist"))
    db.add(ArtistAccount(
        user_id=ARTIST_ID,
        stripe_account_id="acct_artist_1",
        stripe_account_status="active",
        charges_enabled=True,
        payouts_enabled=True,
        details_submitted=True,
        onboarding_completed=True,
    ))
    db.commit()
    return ARTIST_ID


@pytest.fixture
def live_session(db, artist):
    session = ArtistSession(id="session-1", artist_id=artist, session_code="GIG12345", is_active=True)
    db.add(session)
    db.commit()
    return session.id

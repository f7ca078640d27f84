"""
Integration test configuration
"""
import pytest
from fastapi.testclient import TestClient
from passlib.context import CryptContext
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from leadflow.app.dependencies import get_notification_service, get_otp_service
from leadflow.app.main import app
from leadflow.db.base import Base, get_db
from leadflow.models import UserRole
from leadflow.repositories.user_repo import UserRepository
from leadflow.services.messaging import InMemoryOTPStore, NotificationService, OTPService
import leadflow.models  # noqa: F401  registers every table

OTP_CODE = "246810"
PASSWORD = "password123"


@pytest.fixture(autouse=True)
def fast_hashing(mocker):
    """Cheap bcrypt rounds so every test can create users."""
    mocker.patch(
        "leadflow.core.security.pwd_context",
        CryptContext(schemes=["bcrypt_sha256", "bcrypt"], deprecated="auto", bcrypt__rounds=4, bcrypt_sha256__rounds=4),
    )


@pytest.fixture(autouse=True)
def no_redis(mocker):
    mocker.patch("leadflow.core.rate_limiter.r", None)


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session = Session()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def notifier(mocker):
    """Real templates, no network: only ``send_email`` is mocked."""
    notifier = NotificationService(api_key="", from_email="noreply@leadflow.test", max_retries=1)
    mocker.patch.object(notifier, "send_email", mocker.AsyncMock(return_value=True))
    return notifier


@pytest.fixture
def otp_store():
    return InMemoryOTPStore()


@pytest.fixture
def otp_service(otp_store, notifier, mocker):
    mocker.patch("leadflow.services.messaging.otp_service.generate_otp", return_value=OTP_CODE)
    return OTPService(otp_store, notifier)


@pytest.fixture
def client(db_session, otp_store, otp_service, notifier):
    """FastAPI test client with dependency overrides."""
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_otp_service] = lambda: otp_service
    app.dependency_overrides[get_notification_service] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    def _make_user(email="user@example.com", name="Test User", role=UserRole.user, two_factor=False, password=PASSWORD):
        return UserRepository(db_session).create_user(
            email, password, name, role=role, two_factor_enabled=two_factor,
        )
    return _make_user


@pytest.fixture
def login(client):
    """Log in a user without 2FA and return bearer headers."""
    def _login(email="user@example.com", password=PASSWORD):
        response = client.post("/api/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['accessToken']}"}
    return _login


@pytest.fixture
def auth_headers(make_user, login):
    make_user()
    return login()


@pytest.fixture
def admin_headers(make_user, login):
    make_user(email="admin@example.com", name="Admin User", role=UserRole.admin)
    return login("admin@example.com")


@pytest.fixture
def otp_code(otp_service):
    """The code every issued OTP carries in these tests."""
    return OTP_CODE

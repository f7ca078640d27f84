import pytest

from leadflow.models import UserRole
from leadflow.repositories.session_repo import LoginSessionRepository
from leadflow.repositories.user_repo import UserRepository
from leadflow.services.messaging import PromotionError
from leadflow.services.session_service import SessionPromoter


@pytest.fixture
def user(db_session, fast_hashing):
    return UserRepository(db_session).create_user(
        "user@example.com", "password123", "Test User", role=UserRole.manager, two_factor_enabled=True,
    )


@pytest.fixture
def sessions(db_session):
    return LoginSessionRepository(db_session)


def test_promote_marks_pending_session_authenticated(db_session, user, sessions):
    pending = sessions.open_session(user.id, pending_2fa=True, ip_address="10.0.0.1")

    identity = SessionPromoter(db_session).promote("user@example.com")

    assert identity.user_id == user.id
    assert identity.session_id == pending.id
    assert identity.role == UserRole.manager
    db_session.refresh(pending)
    assert pending.is_authenticated()
    assert pending.authenticated_at is not None


def test_promote_is_idempotent(db_session, user, sessions):
    sessions.open_session(user.id, pending_2fa=True)
    promoter = SessionPromoter(db_session)

    first = promoter.promote("user@example.com")
    second = promoter.promote("user@example.com")

    assert first.session_id == second.session_id


def test_promote_uses_latest_session(db_session, user, sessions):
    sessions.open_session(user.id, pending_2fa=False)
    latest = sessions.open_session(user.id, pending_2fa=True)

    assert SessionPromoter(db_session).promote("user@example.com").session_id == latest.id


def test_promote_ignores_revoked_sessions(db_session, user, sessions):
    pending = sessions.open_session(user.id, pending_2fa=True)
    sessions.revoke(pending.id)

    with pytest.raises(PromotionError):
        SessionPromoter(db_session).promote("user@example.com")


def test_promote_unknown_user(db_session):
    with pytest.raises(PromotionError) as exc_info:
        SessionPromoter(db_session).promote("ghost@example.com")
    assert exc_info.value.status_code == 401


def test_promote_inactive_user(db_session, user, sessions):
    sessions.open_session(user.id, pending_2fa=True)
    UserRepository(db_session).update(user.id, {"is_active": False})

    with pytest.raises(PromotionError):
        SessionPromoter(db_session).promote("user@example.com")


def test_promote_without_session(db_session, user):
    with pytest.raises(PromotionError):
        SessionPromoter(db_session).promote("user@example.com")


def test_revoke_pending_for_user(db_session, user, sessions):
    first = sessions.open_session(user.id, pending_2fa=True)
    second = sessions.open_session(user.id, pending_2fa=True)
    done = sessions.open_session(user.id, pending_2fa=False)

    assert sessions.revoke_pending_for_user(user.id) == 2

    db_session.expire_all()
    assert sessions.get(first.id).is_revoked
    assert sessions.get(second.id).is_revoked
    assert not sessions.get(done.id).is_revoked


def test_promote_never_unlocks_password_only_session(db_session, user, sessions):
    password_login = sessions.open_session(user.id, pending_2fa=False)

    with pytest.raises(PromotionError):
        SessionPromoter(db_session).promote("user@example.com")

    db_session.refresh(password_login)
    assert password_login.two_factor_login is False


def test_promote_skips_newer_password_session(db_session, user, sessions):
    pending = sessions.open_session(user.id, pending_2fa=True)
    sessions.open_session(user.id, pending_2fa=False)

    assert SessionPromoter(db_session).promote("user@example.com").session_id == pending.id


def test_latest_pending_for_user(db_session, user, sessions):
    assert sessions.latest_pending_for_user(user.id) is None

    pending = sessions.open_session(user.id, pending_2fa=True)
    sessions.open_session(user.id, pending_2fa=False)
    assert sessions.latest_pending_for_user(user.id).id == pending.id

    SessionPromoter(db_session).promote("user@example.com")
    assert sessions.latest_pending_for_user(user.id) is None

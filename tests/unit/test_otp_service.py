import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from leadflow.services.messaging import (
    AttemptsExhausted,
    Expired,
    InMemoryOTPStore,
    InvalidInput,
    Mismatch,
    NotFound,
    OTPService,
)
from leadflow.services.messaging.otp_store import OTPRecord
from leadflow.services.messaging.errors import GENERIC_INVALID_MESSAGE


class FakeClock:
    """Controllable UTC clock."""

    def __init__(self):
        self.now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryOTPStore()


@pytest.fixture
def notifier(mocker):
    notifier = mocker.Mock()
    notifier.send_otp_email = mocker.AsyncMock(return_value=True)
    return notifier


@pytest.fixture
def service(store, notifier, clock):
    return OTPService(store, notifier, clock=clock)


def run(coro):
    return asyncio.run(coro)


def last_code(notifier) -> str:
    return notifier.send_otp_email.call_args.args[1]


def wrong_code(code: str) -> str:
    return "000000" if code != "000000" else "111111"


def test_issue_stores_record_and_sends_code(service, store, notifier, clock):
    result = run(service.issue("User@Example.com", name="User"))

    assert result.email == "user@example.com"
    assert result.expires_at == clock.now + timedelta(minutes=10)

    record = run(store.get("user@example.com"))
    assert record.remaining_attempts == 5
    assert record.code == last_code(notifier)
    assert len(record.code) == 6 and record.code.isdigit()

    to, code, expires_minutes, max_attempts, name = notifier.send_otp_email.call_args.args
    assert to == "user@example.com"
    assert (expires_minutes, max_attempts, name) == (10, 5, "User")


def test_issue_rejects_malformed_email(service, notifier):
    with pytest.raises(InvalidInput):
        run(service.issue("not-an-email"))
    notifier.send_otp_email.assert_not_called()


def test_verify_correct_code_consumes_record(service, store, notifier):
    run(service.issue("user@example.com"))
    code = last_code(notifier)

    assert run(service.verify("user@example.com", code)) == "user@example.com"
    assert run(store.get("user@example.com")) is None

    # single use
    with pytest.raises(NotFound):
        run(service.verify("user@example.com", code))


def test_verify_is_case_insensitive_on_email(service, notifier):
    run(service.issue("user@example.com"))
    assert run(service.verify("  USER@example.COM ", last_code(notifier))) == "user@example.com"


def test_reissue_invalidates_previous_code(service, notifier, mocker):
    mocker.patch(
        "leadflow.services.messaging.otp_service.generate_otp",
        side_effect=["111111", "222222"],
    )
    run(service.issue("user@example.com"))
    run(service.issue("user@example.com"))

    with pytest.raises(Mismatch) as exc_info:
        run(service.verify("user@example.com", "111111"))
    assert exc_info.value.remaining_attempts == 4

    assert run(service.verify("user@example.com", "222222")) == "user@example.com"


def test_reissue_resets_attempts(service, store, notifier):
    run(service.issue("user@example.com"))
    with pytest.raises(Mismatch):
        run(service.verify("user@example.com", wrong_code(last_code(notifier))))

    run(service.issue("user@example.com"))
    assert run(store.get("user@example.com")).remaining_attempts == 5


def test_wrong_then_right_reports_remaining_attempts(service, notifier):
    run(service.issue("user@example.com"))
    code = last_code(notifier)

    with pytest.raises(Mismatch) as exc_info:
        run(service.verify("user@example.com", wrong_code(code)))
    assert exc_info.value.remaining_attempts == 4
    assert exc_info.value.to_response() == {
        "error": "Invalid code. 4 attempts remaining.",
        "remainingAttempts": 4,
    }
    assert exc_info.value.status_code == 401

    assert run(service.verify("user@example.com", code)) == "user@example.com"


def test_attempts_exhausted_after_max_mismatches(service, store, notifier):
    run(service.issue("user@example.com"))
    code = last_code(notifier)
    bad = wrong_code(code)

    for remaining in (4, 3, 2, 1):
        with pytest.raises(Mismatch) as exc_info:
            run(service.verify("user@example.com", bad))
        assert exc_info.value.remaining_attempts == remaining

    with pytest.raises(AttemptsExhausted) as exc_info:
        run(service.verify("user@example.com", bad))
    assert exc_info.value.status_code == 429
    assert run(store.get("user@example.com")) is None

    # even the right code is refused until a new one is issued
    with pytest.raises(NotFound):
        run(service.verify("user@example.com", code))


def test_stale_zero_attempt_record_is_exhausted_and_dropped(service, store, clock):
    run(store.put(OTPRecord(
        email="user@example.com",
        code="123456",
        expires_at=clock.now + timedelta(minutes=5),
        remaining_attempts=0,
    )))

    with pytest.raises(AttemptsExhausted):
        run(service.verify("user@example.com", "123456"))
    assert run(store.get("user@example.com")) is None


def test_expired_code_is_rejected_and_dropped(service, store, notifier, clock):
    run(service.issue("user@example.com"))
    code = last_code(notifier)

    clock.advance(minutes=10)

    with pytest.raises(Expired) as exc_info:
        run(service.verify("user@example.com", code))
    assert exc_info.value.status_code == 401
    assert run(store.get("user@example.com")) is None

    with pytest.raises(NotFound):
        run(service.verify("user@example.com", code))


def test_code_still_valid_just_before_expiry(service, notifier, clock):
    run(service.issue("user@example.com"))
    clock.advance(minutes=9, seconds=59)
    assert run(service.verify("user@example.com", last_code(notifier))) == "user@example.com"


def test_not_found_and_expired_share_message():
    assert NotFound().message == Expired().message == GENERIC_INVALID_MESSAGE


@pytest.mark.parametrize("code", ["12345", "1234567", "12a456", "", "١٢٣٤٥٦"])
def test_malformed_code_is_invalid_input(service, notifier, code):
    run(service.issue("user@example.com"))
    with pytest.raises(InvalidInput):
        run(service.verify("user@example.com", code))


def test_malformed_code_does_not_spend_attempts(service, store, notifier):
    run(service.issue("user@example.com"))
    with pytest.raises(InvalidInput):
        run(service.verify("user@example.com", "abc"))
    assert run(store.get("user@example.com")).remaining_attempts == 5


def test_verify_without_issue_is_not_found(service):
    with pytest.raises(NotFound):
        run(service.verify("nobody@example.com", "123456"))


def test_failed_dispatch_does_not_fail_issue(service, store, notifier):
    notifier.send_otp_email.side_effect = RuntimeError("smtp down")

    result = run(service.issue("user@example.com"))

    assert result.email == "user@example.com"
    assert run(store.get("user@example.com")) is not None


def test_undelivered_dispatch_does_not_fail_issue(service, store, notifier):
    notifier.send_otp_email.return_value = False
    run(service.issue("user@example.com"))
    assert run(store.get("user@example.com")) is not None


def test_slow_dispatch_times_out_without_failing_issue(store, notifier, clock):
    async def slow_send(*args):
        await asyncio.sleep(0.5)
        return True

    notifier.send_otp_email.side_effect = slow_send
    service = OTPService(store, notifier, clock=clock, dispatch_timeout=0.01)

    async def scenario():
        result = await service.issue("user@example.com")
        await service.drain()
        return result

    result = run(scenario())
    assert result.email == "user@example.com"
    assert notifier.send_otp_email.await_count == 1


def test_issue_without_waiting_returns_before_send_finishes(store, notifier, clock):
    async def scenario():
        release = asyncio.Event()

        async def slow_send(*args):
            await release.wait()
            return True

        notifier.send_otp_email.side_effect = slow_send
        service = OTPService(store, notifier, clock=clock)

        result = await service.issue("user@example.com", wait_for_dispatch=False)
        still_sending = len(service._pending_dispatches)
        record = await store.get("user@example.com")

        release.set()
        await service.drain()
        return result, still_sending, record

    result, still_sending, record = run(scenario())

    assert result.email == "user@example.com"
    assert still_sending == 1
    assert record is not None
    assert notifier.send_otp_email.await_count == 1


def test_cancel_drops_pending_code(service, store, notifier):
    run(service.issue("User@example.com"))
    code = last_code(notifier)

    run(service.cancel("USER@example.com"))

    assert run(store.get("user@example.com")) is None
    with pytest.raises(NotFound):
        run(service.verify("user@example.com", code))

    # cancelling with nothing pending is fine
    run(service.cancel("user@example.com"))


def test_sweep_purges_expired_records(service, store, clock):
    run(service.issue("a@example.com"))
    clock.advance(minutes=5)
    run(service.issue("b@example.com"))
    clock.advance(minutes=6)

    assert run(service.sweep()) == 1
    assert run(store.get("a@example.com")) is None
    assert run(store.get("b@example.com")) is not None


def test_concurrent_wrong_guesses_spend_one_attempt_each(service, store, notifier):
    run(service.issue("user@example.com"))
    bad = wrong_code(last_code(notifier))

    async def guess_three_times():
        return await asyncio.gather(
            *(service.verify("user@example.com", bad) for _ in range(3)),
            return_exceptions=True,
        )

    results = run(guess_three_times())

    assert sorted(r.remaining_attempts for r in results) == [2, 3, 4]
    assert run(store.get("user@example.com")).remaining_attempts == 2


def test_from_settings_uses_configured_values(store, notifier, mocker):
    settings = mocker.Mock(
        OTP_LENGTH=8,
        OTP_EXPIRE_MINUTES=3,
        OTP_MAX_ATTEMPTS=2,
        OTP_DISPATCH_TIMEOUT_SECS=1.5,
    )
    service = OTPService.from_settings(store, notifier, settings)
    assert (service.code_length, service.expire_minutes, service.max_attempts, service.dispatch_timeout) == (8, 3, 2, 1.5)

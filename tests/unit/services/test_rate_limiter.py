from concurrent.futures import ThreadPoolExecutor

import pytest

from src.app.services.rate_limiter import RateLimiter
from src.app.services.security_config import RateLimitPolicy


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    return RateLimiter(
        {
            "login": RateLimitPolicy(max_attempts=5, window_seconds=900, block_seconds=1800),
            "password_reset": RateLimitPolicy(max_attempts=3, window_seconds=3600),
        },
        clock=clock,
    )


def test_fifth_attempt_allowed_sixth_denied(limiter, clock):
    decisions = [limiter.check("login", "10.0.0.1") for _ in range(6)]

    assert [d.allowed for d in decisions] == [True] * 5 + [False]
    assert [d.remaining for d in decisions[:5]] == [4, 3, 2, 1, 0]
    assert decisions[0].reset_at == clock.now + 900

    denied = decisions[5]
    assert denied.remaining == 0
    assert denied.block_until == clock.now + 1800
    assert denied.retry_after == 1800


def test_blocked_key_stays_denied_past_window(limiter, clock):
    for _ in range(6):
        limiter.check("login", "10.0.0.1")

    clock.advance(1000)  # window over, block still running
    still_blocked = limiter.check("login", "10.0.0.1")
    assert not still_blocked.allowed
    assert still_blocked.retry_after == 800

    clock.advance(801)
    reopened = limiter.check("login", "10.0.0.1")
    assert reopened.allowed
    assert reopened.remaining == 4


def test_purpose_without_block_denies_until_window_resets(limiter, clock):
    for _ in range(3):
        assert limiter.check("password_reset", "parent@quizschool.com").allowed

    denied = limiter.check("password_reset", "parent@quizschool.com")
    assert not denied.allowed
    assert denied.block_until is None
    assert denied.retry_after == 3600

    clock.advance(3601)
    assert limiter.check("password_reset", "parent@quizschool.com").allowed


def test_keys_are_independent(limiter):
    for _ in range(6):
        limiter.check("login", "10.0.0.1")

    assert limiter.check("login", "10.0.0.2").allowed
    assert limiter.check("password_reset", "10.0.0.1").allowed


def test_reset_clears_key(limiter):
    for _ in range(6):
        limiter.check("login", "10.0.0.1")

    limiter.reset("login", "10.0.0.1")

    decision = limiter.check("login", "10.0.0.1")
    assert decision.allowed
    assert decision.remaining == 4


def test_sweep_keeps_live_windows_and_blocks(limiter, clock):
    limiter.check("password_reset", "a")
    for _ in range(6):
        limiter.check("login", "b")
    limiter.check("login", "c")

    clock.advance(901)  # c expired, b blocked, a live
    assert limiter.sweep() == 1
    assert len(limiter) == 2

    clock.advance(1000)  # b's block over
    assert limiter.sweep() == 1
    assert len(limiter) == 1


def test_unknown_purpose_raises(limiter):
    with pytest.raises(ValueError):
        limiter.check("signup", "10.0.0.1")


def test_concurrent_checks_admit_exactly_max_attempts():
    limiter = RateLimiter({"api": RateLimitPolicy(max_attempts=20, window_seconds=60)})

    with ThreadPoolExecutor(max_workers=8) as pool:
        decisions = list(pool.map(lambda _: limiter.check("api", "10.0.0.9"), range(100)))

    assert sum(1 for d in decisions if d.allowed) == 20

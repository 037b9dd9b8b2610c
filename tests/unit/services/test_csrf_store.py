from src.app.services.csrf_store import CSRFTokenStore


class FakeClock:
    def __init__(self, now: float = 50_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_issued_token_validates_for_its_session():
    store = CSRFTokenStore()
    token = store.issue("session-a")

    assert len(token) == 64
    int(token, 16)  # hex encoded
    assert store.validate("session-a", token)


def test_token_for_other_session_fails():
    store = CSRFTokenStore()
    token = store.issue("session-a")
    store.issue("session-b")

    assert not store.validate("session-b", token)
    assert not store.validate("session-c", token)


def test_length_mismatch_never_matches():
    store = CSRFTokenStore()
    token = store.issue("session-a")

    assert not store.validate("session-a", token[:-1])
    assert not store.validate("session-a", token + "0")
    assert not store.validate("session-a", "")
    assert not store.validate("session-a", None)


def test_reissue_replaces_previous_token():
    store = CSRFTokenStore()
    old = store.issue("session-a")
    new = store.issue("session-a")

    assert not store.validate("session-a", old)
    assert store.validate("session-a", new)
    assert store.get("session-a") == new


def test_expired_token_is_dropped_on_validate():
    clock = FakeClock()
    store = CSRFTokenStore(ttl_seconds=60, clock=clock)
    token = store.issue("session-a")

    clock.now += 60
    assert not store.validate("session-a", token)
    assert len(store) == 0


def test_expiry_is_capped_at_session_end():
    clock = FakeClock()
    store = CSRFTokenStore(ttl_seconds=3600, clock=clock)
    token = store.issue("session-a", not_after=clock.now + 10)

    clock.now += 9
    assert store.validate("session-a", token)
    clock.now += 1
    assert store.get("session-a") is None


def test_revoke():
    store = CSRFTokenStore()
    token = store.issue("session-a")

    store.revoke("session-a")
    store.revoke("session-a")

    assert not store.validate("session-a", token)


def test_sweep_removes_only_expired():
    clock = FakeClock()
    store = CSRFTokenStore(ttl_seconds=60, clock=clock)
    store.issue("short", not_after=clock.now + 5)
    store.issue("long")

    clock.now += 30
    assert store.sweep() == 1
    assert store.get("long") is not None

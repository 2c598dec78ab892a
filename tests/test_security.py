import threading

import pytest

from csrfguard import security
from csrfguard.security import InvalidToken, SessionExpired, TokenStore


def test_issued_token_is_immediately_valid(store) -> None:
    token = store.issue()
    assert token.isdigit()
    assert 0 <= int(token) < 2 ** 64
    store.validate(token)
    assert len(store) == 1


@pytest.mark.parametrize("token", [None, "", "does-not-exist", "12345", "' OR 1=1 --"])
def test_unknown_tokens_are_invalid(store, token) -> None:
    store.issue()
    with pytest.raises(InvalidToken) as exc:
        store.validate(token)
    assert exc.value.status_code == 403
    assert exc.value.detail == "Invalid CSRF token"


def test_validation_within_window_refreshes(store, clock) -> None:
    token = store.issue()
    clock.advance(29.9)
    store.validate(token)
    # a full window from the refresh, not from issuance
    clock.advance(29.9)
    store.validate(token)


def test_token_expires_after_idle_window(store, clock) -> None:
    token = store.issue()
    clock.advance(30)
    with pytest.raises(SessionExpired) as exc:
        store.validate(token)
    assert exc.value.status_code == 401
    assert exc.value.detail == "Session expired"
    # rejection does not remove the record, only the sweep does
    assert len(store) == 1
    with pytest.raises(SessionExpired):
        store.validate(token)


def test_regular_use_keeps_token_alive(store, clock) -> None:
    token = store.issue()
    for _ in range(100):
        clock.advance(29)
        store.validate(token)


def test_sweep_removes_only_stale_tokens(store, clock) -> None:
    old = store.issue()
    clock.advance(20)
    fresh = store.issue()
    clock.advance(10)
    assert store.sweep() == 1
    assert len(store) == 1
    with pytest.raises(InvalidToken):
        store.validate(old)
    clock.advance(19.5)
    store.validate(fresh)


def test_sweep_leaves_timestamps_untouched(store, clock) -> None:
    token = store.issue()
    clock.advance(25)
    assert store.sweep() == 0
    clock.advance(5)
    with pytest.raises(SessionExpired):
        store.validate(token)


def test_end_to_end_lifecycle(store, clock) -> None:
    token = store.issue()
    clock.advance(1)
    store.validate(token)
    clock.advance(31)
    with pytest.raises(SessionExpired):
        store.validate(token)
    store.sweep()
    with pytest.raises(InvalidToken):
        store.validate(token)
    with pytest.raises(InvalidToken):
        store.validate("does-not-exist")


def test_collision_is_regenerated(monkeypatch, store) -> None:
    values = iter(["42", "42", "43"])
    monkeypatch.setattr(security, "generate_token", lambda: next(values))
    assert store.issue() == "42"
    assert store.issue() == "43"
    assert len(store) == 2


def test_ttl_must_be_positive() -> None:
    with pytest.raises(ValueError):
        TokenStore(ttl=0)


def test_default_ttl_comes_from_config() -> None:
    assert TokenStore().ttl == security.config.CSRF_TTL


def test_concurrent_issue_yields_distinct_valid_tokens() -> None:
    store = TokenStore(ttl=30)
    tokens = []
    lock = threading.Lock()

    def worker():
        for _ in range(200):
            t = store.issue()
            with lock:
                tokens.append(t)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for th in threads:
        th.start()
    for th in threads:
        th.join()

    assert len(tokens) == 1600
    assert len(set(tokens)) == 1600
    assert len(store) == 1600
    for t in tokens:
        store.validate(t)


def test_rejections_are_audited_without_full_token(store, caplog) -> None:
    # csrf.audit does not propagate once logging.setup() ran; attach directly
    audit = security.audit
    audit.addHandler(caplog.handler)
    try:
        with caplog.at_level("INFO", logger="csrf.audit"):
            with pytest.raises(InvalidToken):
                store.validate("1234567890")
    finally:
        audit.removeHandler(caplog.handler)
    messages = [r.getMessage() for r in caplog.records if r.name == "csrf.audit"]
    assert messages
    assert "1234..." in messages[0]
    assert "1234567890" not in messages[0]

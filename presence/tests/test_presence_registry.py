"""Registry lifecycle, TTL and count-consistency tests."""

from __future__ import annotations

from typing import Iterator, List

import pytest

pytestmark = pytest.mark.unit

from presence.core.presence.errors import InvalidArgument, SessionIdExhausted
from presence.core.presence.models import PresenceSession
from presence.core.presence.registry import PresenceRegistry
from presence.core.presence.session_ids import SessionIdGenerator


class SequenceIdGenerator(SessionIdGenerator):
    """Hands out ids from a fixed list so collisions can be forced."""

    def __init__(self, ids: List[str], max_attempts: int = 8) -> None:
        super().__init__(max_attempts=max_attempts)
        self._ids: Iterator[str] = iter(ids)

    def generate(self) -> str:
        return next(self._ids)


def _distinct_users(registry: PresenceRegistry) -> set:
    return {s.user_id for s in registry.sessions()}


# ==================== Lifecycle ====================


def test_single_user_lifecycle(registry):
    s1 = registry.login("alice")
    assert registry.count() == 1
    assert registry.heartbeat(s1) is True
    assert registry.list_users() == ["alice"]

    registry.logout(s1)

    assert registry.count() == 0
    assert registry.validate(s1) is False
    assert registry.list_users() == []


def test_two_devices_one_user(registry):
    s1 = registry.login("bob")
    s2 = registry.login("bob")
    assert s1 != s2
    assert registry.count() == 1
    assert registry.list_users() == ["bob"]
    assert sorted(registry.sessions_for("bob")) == sorted([s1, s2])

    registry.logout(s1)
    assert registry.count() == 1  # still online via s2
    assert registry.validate(s2) is True

    registry.logout(s2)
    assert registry.count() == 0
    assert registry.list_users() == []


def test_login_rejects_empty_user_id(registry):
    registry.login("someone")
    with pytest.raises(InvalidArgument):
        registry.login("")
    assert registry.count() == 1
    assert registry.session_count() == 1


def test_whitespace_user_id_is_accepted(registry):
    sid = registry.login("   ")
    assert registry.validate(sid) is True
    assert registry.list_users() == ["   "]


def test_logout_is_idempotent(registry):
    keep = registry.login("carol")
    gone = registry.login("dave")

    assert registry.logout(gone) is True
    before = (registry.count(), registry.list_users(), registry.session_count())
    assert registry.logout(gone) is False
    after = (registry.count(), registry.list_users(), registry.session_count())

    assert before == after
    assert registry.validate(keep) is True


def test_unknown_session_is_soft_miss(registry):
    assert registry.heartbeat("sess_does_not_exist") is False
    assert registry.logout("sess_does_not_exist") is False
    assert registry.validate("sess_does_not_exist") is False
    assert registry.get("sess_does_not_exist") is None
    assert registry.session_count() == 0


def test_heartbeat_does_not_create_sessions(registry):
    registry.heartbeat("sess_123_0001")
    assert registry.session_count() == 0
    assert registry.count() == 0


def test_list_users_matches_session_table(registry):
    for user in ["u1", "u2", "u1", "u3", "u2", "u1"]:
        registry.login(user)
    users = registry.list_users()
    assert len(users) == len(set(users))
    assert set(users) == _distinct_users(registry) == {"u1", "u2", "u3"}
    assert registry.count() == 3


def test_get_returns_copy(registry, clock):
    sid = registry.login("erin")
    record = registry.get(sid)
    assert record.user_id == "erin"
    assert record.last_active == clock.now()

    record.last_active = -1
    assert registry.get(sid).last_active == clock.now()


def test_stats_and_clear(registry):
    registry.login("a")
    registry.login("a")
    registry.login("b")
    stats = registry.stats()
    assert stats.online_count == 2
    assert stats.session_count == 3
    assert stats.ttl_seconds == 60

    registry.clear()
    assert registry.count() == 0
    assert registry.session_count() == 0
    assert registry.list_users() == []


def test_ttl_must_be_positive():
    with pytest.raises(ValueError):
        PresenceRegistry(ttl_seconds=0)


# ==================== Session ids ====================


def test_login_retries_on_colliding_id(clock):
    registry = PresenceRegistry(clock=clock, id_generator=SequenceIdGenerator(["sess_a", "sess_a", "sess_b"]))
    assert registry.login("x") == "sess_a"
    assert registry.login("y") == "sess_b"
    assert registry.count() == 2


def test_login_gives_up_when_ids_exhausted(clock):
    registry = PresenceRegistry(
        clock=clock,
        id_generator=SequenceIdGenerator(["sess_a"] * 4, max_attempts=3),
    )
    registry.login("x")
    with pytest.raises(SessionIdExhausted):
        registry.login("y")
    assert registry.count() == 1
    assert registry.session_count() == 1


# ==================== Expiry ====================


def test_expiry_by_silence(registry, clock):
    sid = registry.login("carol")
    clock.advance(61)

    assert registry.sweep() == 1
    assert registry.validate(sid) is False
    assert registry.count() == 0


def test_idle_exactly_ttl_is_kept(registry, clock):
    sid = registry.login("frank")
    clock.advance(60)
    assert registry.sweep() == 0
    assert registry.validate(sid) is True


def test_heartbeat_defers_expiry(registry, clock):
    t0 = clock.now()
    sid = registry.login("dan")

    clock.set(t0 + 50)
    assert registry.heartbeat(sid) is True

    clock.set(t0 + 100)  # 50s since last active
    assert registry.sweep() == 0
    assert registry.validate(sid) is True

    clock.set(t0 + 170)  # no further heartbeats
    assert registry.sweep() == 1
    assert registry.validate(sid) is False


def test_validate_does_not_refresh(registry, clock):
    sid = registry.login("gina")
    clock.advance(40)
    assert registry.validate(sid) is True
    clock.advance(21)
    registry.sweep()
    assert registry.validate(sid) is False


def test_sweep_accepts_explicit_now(registry, clock):
    sid = registry.login("hank")
    assert registry.sweep(now=clock.now() + 30) == 0
    assert registry.sweep(now=clock.now() + 90) == 1
    assert registry.validate(sid) is False


def test_sweep_keeps_user_online_while_another_session_is_fresh(registry, clock):
    old = registry.login("ivy")
    clock.advance(45)
    fresh = registry.login("ivy")
    clock.advance(20)  # old idle 65s, fresh idle 20s

    report = registry.sweep_detailed()

    assert report.evicted == [(old, "ivy")]
    assert report.users_offline == []
    assert report.online_count == 1
    assert registry.validate(fresh) is True
    assert registry.list_users() == ["ivy"]


def test_sweep_reports_users_going_offline(registry, clock):
    registry.login("jack")
    registry.login("kate")
    clock.advance(61)
    report = registry.sweep_detailed()
    assert report.evicted_count == 2
    assert sorted(report.users_offline) == ["jack", "kate"]
    assert report.online_count == 0


def test_sweep_skips_malformed_entry_and_continues(registry, clock):
    stale = registry.login("lena")
    # test-only direct mutation: a record the sweep cannot evaluate
    registry._sessions["sess_broken"] = PresenceSession(
        session_id="sess_broken", user_id="mike", last_active=None, created_at=0.0
    )
    registry._user_refs["mike"] = 1
    clock.advance(61)

    report = registry.sweep_detailed()

    assert report.errors == 1
    assert report.evicted == [(stale, "lena")]
    assert registry.list_users() == ["mike"]
    assert registry.count() == 1


def test_logout_after_sweep_is_noop(registry, clock):
    sid = registry.login("nina")
    clock.advance(61)
    registry.sweep()
    assert registry.logout(sid) is False
    assert registry.count() == 0

"""Tests for Compile Guard."""

import pytest

from adcompose.core.errors import CompileInProgress
from adcompose.services.compile_guard import CompileGuard


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def guard(clock):
    """Create CompileGuard with a controllable clock."""
    return CompileGuard(timeout_seconds=600, clock=clock)


def test_second_acquire_rejected(guard):
    """Test a project can only have one compile in flight."""
    guard.acquire("proj_1")

    with pytest.raises(CompileInProgress):
        guard.acquire("proj_1")


def test_projects_are_independent(guard):
    """Test compiles for different projects do not block each other."""
    guard.acquire("proj_1")
    guard.acquire("proj_2")

    assert guard.is_in_flight("proj_1")
    assert guard.is_in_flight("proj_2")


def test_release_clears_flag(guard):
    """Test releasing allows a new compile."""
    token = guard.acquire("proj_1")

    assert guard.release("proj_1", token) is True
    assert not guard.is_in_flight("proj_1")
    guard.acquire("proj_1")


def test_release_with_wrong_token_ignored(guard):
    """Test a stale holder cannot clear a newer compile's flag."""
    guard.acquire("proj_1")

    assert guard.release("proj_1", "not-the-token") is False
    assert guard.is_in_flight("proj_1")


def test_stale_flag_can_be_taken_over(guard, clock):
    """Test a flag older than the timeout no longer blocks compiles."""
    old_token = guard.acquire("proj_1")
    clock.advance(600)

    new_token = guard.acquire("proj_1")

    assert new_token != old_token
    assert guard.release("proj_1", old_token) is False
    assert guard.is_in_flight("proj_1")


def test_sweep_clears_only_stale_flags(guard, clock):
    """Test the watchdog sweep removes expired flags."""
    guard.acquire("proj_old")
    clock.advance(500)
    guard.acquire("proj_new")
    clock.advance(100)

    assert guard.sweep() == ["proj_old"]
    assert not guard.is_in_flight("proj_old")
    assert guard.is_in_flight("proj_new")


def test_hold_releases_on_error(guard):
    """Test the flag is cleared when the held block raises."""
    with pytest.raises(RuntimeError):
        with guard.hold("proj_1"):
            assert guard.is_in_flight("proj_1")
            raise RuntimeError("render exploded")

    assert not guard.is_in_flight("proj_1")

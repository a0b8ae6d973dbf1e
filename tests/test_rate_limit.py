"""Tests for the sliding window rate limiter."""
import pytest

from playlist_analyzer.utils.rate_limit import SlidingWindowLimiter

from conftest import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    return SlidingWindowLimiter(max_requests=3, window_seconds=1.0, clock=clock)


def test_allows_requests_within_limit(limiter):
    remaining = [limiter.allow("user").remaining for _ in range(3)]
    assert remaining == [2, 1, 0]


def test_denies_when_limit_exceeded(limiter):
    for _ in range(3):
        assert limiter.allow("user").allowed

    decision = limiter.allow("user")
    assert decision.allowed is False
    assert decision.remaining == 0
    assert decision.retry_after is not None and decision.retry_after > 0


def test_window_slides_after_time_passes(limiter, clock):
    for _ in range(3):
        limiter.allow("user")
    assert not limiter.allow("user").allowed

    clock.advance(1.1)

    decision = limiter.allow("user")
    assert decision.allowed is True
    assert decision.remaining == 2


def test_keys_are_independent(limiter):
    for _ in range(3):
        limiter.allow("user-1")

    assert limiter.allow("user-1").allowed is False
    other = limiter.allow("user-2")
    assert other.allowed is True
    assert other.remaining == 2


def test_retry_after_counts_down_from_oldest_request(clock):
    limiter = SlidingWindowLimiter(max_requests=2, window_seconds=10.0, clock=clock)
    limiter.allow("user")
    clock.advance(2.0)
    limiter.allow("user")
    clock.advance(1.0)

    # oldest request leaves the window 7 seconds from now
    assert limiter.allow("user").retry_after == 7


def test_denied_requests_do_not_extend_the_window(limiter, clock):
    for _ in range(3):
        limiter.allow("user")
    for _ in range(5):
        clock.advance(0.1)
        assert not limiter.allow("user").allowed

    clock.advance(0.6)
    assert limiter.allow("user").allowed


def test_reset_forgets_history(limiter):
    for _ in range(3):
        limiter.allow("user")
    limiter.reset("user")
    assert limiter.allow("user").remaining == 2


@pytest.mark.parametrize("max_requests,window", [(0, 1.0), (1, 0)])
def test_rejects_invalid_configuration(max_requests, window):
    with pytest.raises(ValueError):
        SlidingWindowLimiter(max_requests=max_requests, window_seconds=window)


def test_idle_keys_are_dropped(limiter, clock):
    limiter.allow("idle-1")
    limiter.allow("idle-2")
    assert len(limiter) == 2

    clock.advance(1.5)
    limiter.allow("active")

    assert len(limiter) == 1


def test_sweep_keeps_keys_still_in_window(limiter, clock):
    limiter.allow("old")
    clock.advance(0.9)
    limiter.allow("recent")
    clock.advance(0.2)
    limiter.allow("new")

    assert len(limiter) == 2
    assert limiter.allow("recent").remaining == 1

"""Tests for retry logic."""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from advlock import retry
from advlock.retry import poll, wait


@pytest.fixture
def sleeps(monkeypatch):
    recorded = []
    monkeypatch.setattr(retry.time, "sleep", recorded.append)
    return recorded


class TestWait:
    def test_sub_second(self, sleeps):
        wait(0.25)
        assert sleeps == [0.25]

    def test_at_threshold_keeps_precision(self, sleeps):
        wait(300)
        assert sleeps == [300]

    def test_long_wait_whole_seconds(self, sleeps):
        wait(300.9)
        assert sleeps == [300]
        assert isinstance(sleeps[0], int)


class TestPoll:
    def test_succeeds_first_try(self, sleeps):
        call_count = {"n": 0}

        def succeed():
            call_count["n"] += 1
            return True

        assert poll(succeed, 3, 0.1)
        assert call_count["n"] == 1
        assert sleeps == []

    def test_succeeds_on_third(self, sleeps):
        call_count = {"n": 0}

        def third():
            call_count["n"] += 1
            return call_count["n"] == 3

        assert poll(third, 5, 0.01)
        assert call_count["n"] == 3
        assert sleeps == [0.01, 0.01]

    def test_gives_up_after_max_attempts(self, sleeps):
        call_count = {"n": 0}

        def never():
            call_count["n"] += 1
            return False

        assert not poll(never, 4, 0.01)
        assert call_count["n"] == 4
        # no wait after the last attempt
        assert len(sleeps) == 3

    def test_single_attempt_never_sleeps(self, sleeps):
        assert not poll(lambda: False, 1, 10.0)
        assert sleeps == []

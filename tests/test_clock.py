"""Tests for clock sources."""

import pytest

from connectsquares.core.clock import ManualClock, SystemClock


class TestManualClock:
    def test_starts_where_told(self):
        c = ManualClock(tick=5, timestamp=1_700_000_000)
        assert c.current_tick() == 5
        assert c.unix_timestamp() == 1_700_000_000

    def test_advance(self):
        c = ManualClock()
        c.advance(240, seconds=96)
        c.advance()
        assert c.current_tick() == 241
        assert c.unix_timestamp() == 96

    def test_cannot_go_backwards(self):
        c = ManualClock(tick=10)
        with pytest.raises(ValueError):
            c.advance(-1)
        assert c.current_tick() == 10


class TestSystemClock:
    def test_monotonic(self):
        c = SystemClock(slot_ms=1)
        ticks = [c.current_tick() for _ in range(50)]
        assert ticks == sorted(ticks)

    def test_start_tick_offset(self):
        c = SystemClock(slot_ms=60_000, start_tick=1000)
        assert c.current_tick() >= 1000

    def test_timestamp_is_int(self):
        assert isinstance(SystemClock().unix_timestamp(), int)

    def test_rejects_bad_slot(self):
        with pytest.raises(ValueError):
            SystemClock(slot_ms=0)

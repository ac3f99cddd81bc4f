"""Tests for utils.dates module."""

import time
from datetime import datetime, timedelta, timezone

from utils.dates import day_bounds_ms, now_ms


class TestDayBounds:
    """Tests for day_bounds_ms()."""

    def test_utc_day(self):
        moment = datetime(2025, 6, 1, 15, 30, tzinfo=timezone.utc)
        start_ms, end_ms = day_bounds_ms(moment)

        assert start_ms == int(datetime(2025, 6, 1, tzinfo=timezone.utc).timestamp() * 1000)
        assert end_ms - start_ms == 24 * 60 * 60 * 1000

    def test_offset_zone_uses_its_own_midnight(self):
        zone = timezone(timedelta(hours=-5))
        start_ms, _ = day_bounds_ms(datetime(2025, 6, 1, 23, 0, tzinfo=zone))

        assert start_ms == int(datetime(2025, 6, 1, 5, tzinfo=timezone.utc).timestamp() * 1000)

    def test_moment_inside_bounds(self):
        moment = datetime(2025, 1, 15, 0, 0, 0)
        start_ms, end_ms = day_bounds_ms(moment)
        assert start_ms <= int(moment.timestamp() * 1000) < end_ms

    def test_consecutive_days_share_boundary(self):
        today = datetime(2025, 3, 10, 12)
        _, end_today = day_bounds_ms(today)
        start_tomorrow, _ = day_bounds_ms(today + timedelta(days=1))
        assert end_today == start_tomorrow

    def test_defaults_to_now(self):
        start_ms, end_ms = day_bounds_ms()
        assert start_ms <= now_ms() < end_ms


class TestNowMs:
    def test_close_to_wall_clock(self):
        assert abs(now_ms() - time.time() * 1000) < 1000

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from latency_api.core.clock import FixedClock, StoreClock, SystemClock


def _engine_returning(now: datetime, tz: str) -> MagicMock:
    engine = MagicMock()
    conn = engine.connect.return_value.__enter__.return_value
    conn.execute.return_value.mappings.return_value.one.return_value = {"now": now, "tz": tz}
    return engine


class TestStoreClock:

    def test_returns_instant_in_store_zone(self):
        instant = datetime(2026, 10, 19, 1, 30, tzinfo=timezone.utc)
        clock = StoreClock(_engine_returning(instant, "Europe/Madrid"))

        now = clock.now()

        assert now == instant
        # Madrid en octubre (antes del cambio): UTC+2
        assert now.utcoffset() == timedelta(hours=2)
        assert now.date() == datetime(2026, 10, 19).date()

    def test_unknown_zone_keeps_returned_offset(self):
        instant = datetime(2026, 10, 19, 4, 0, tzinfo=timezone(timedelta(hours=3)))
        clock = StoreClock(_engine_returning(instant, "<+03>-03"))

        now = clock.now()

        assert now == instant
        assert now.utcoffset() == timedelta(hours=3)

    def test_naive_value_read_as_utc(self):
        clock = StoreClock(_engine_returning(datetime(2026, 10, 19, 4, 0), "UTC"))
        assert clock.now() == datetime(2026, 10, 19, 4, 0, tzinfo=timezone.utc)


class TestLocalClocks:

    def test_system_clock_is_aware(self):
        assert SystemClock().now().tzinfo is not None

    def test_fixed_clock_advance(self):
        clock = FixedClock(datetime(2026, 10, 19, 3, 0, tzinfo=timezone.utc))
        clock.advance(minutes=5)
        assert clock.now() == datetime(2026, 10, 19, 3, 5, tzinfo=timezone.utc)

    def test_fixed_clock_requires_aware(self):
        with pytest.raises(ValueError):
            FixedClock(datetime(2026, 10, 19, 3, 0))

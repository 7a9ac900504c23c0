"""Ventanas temporales de lectura.

Dos formas de ventana, ambas calculadas a partir del instante ``now`` que
entrega el reloj al momento de ejecutar la consulta:

- overnight: fecha calendario de ``now`` (en su zona), horas [0, 6)
- rolling:   intervalo cerrado [now - 1h, now]
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone

OVERNIGHT_START_HOUR = 0
OVERNIGHT_END_HOUR = 6
ROLLING_SPAN = timedelta(hours=1)


@dataclass(frozen=True)
class TimeWindow:
    start: datetime
    end: datetime
    end_inclusive: bool

    def contains(self, instant: datetime) -> bool:
        if instant < self.start:
            return False
        return instant <= self.end if self.end_inclusive else instant < self.end

    def as_utc_params(self) -> dict:
        return {
            "start": self.start.astimezone(timezone.utc),
            "end": self.end.astimezone(timezone.utc),
        }


def overnight_window(now: datetime) -> TimeWindow:
    if now.tzinfo is None:
        raise ValueError("overnight_window requires an aware datetime")
    day = now.date()
    return TimeWindow(
        start=datetime.combine(day, time(OVERNIGHT_START_HOUR), tzinfo=now.tzinfo),
        end=datetime.combine(day, time(OVERNIGHT_END_HOUR), tzinfo=now.tzinfo),
        end_inclusive=False,
    )


def rolling_window(now: datetime, span: timedelta = ROLLING_SPAN) -> TimeWindow:
    if now.tzinfo is None:
        raise ValueError("rolling_window requires an aware datetime")
    # Aritmética en UTC: restar en hora local falla en los cambios de horario.
    now_utc = now.astimezone(timezone.utc)
    return TimeWindow(start=now_utc - span, end=now_utc, end_inclusive=True)

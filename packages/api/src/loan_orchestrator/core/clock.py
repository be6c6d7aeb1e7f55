# This project was developed with assistance from AI tools.
"""Injectable wall clock.

Services never call ``datetime.now()`` directly; they receive a ``Clock`` so
timestamps and the year used for application numbers are controllable.
"""

from datetime import UTC, datetime


class Clock:
    """System clock returning timezone-aware UTC datetimes."""

    def now(self) -> datetime:
        return datetime.now(UTC)


_clock = Clock()


def get_clock() -> Clock:
    """FastAPI dependency returning the process-wide clock."""
    return _clock

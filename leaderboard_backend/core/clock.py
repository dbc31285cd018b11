"""Wall clock abstraction so request handlers and tests agree on "now"."""

from datetime import datetime, timezone


class Clock:
    """Returns the current UTC instant."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


system_clock = Clock()


def get_clock() -> Clock:
    """Dependency returning the application clock"""
    return system_clock

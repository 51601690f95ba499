"""Session countdown timer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from torchtime.core.exceptions import ValidationError


TIMES_UP = "Time's up!"


@dataclass(frozen=True)
class Countdown:
    """A countdown running until a fixed end time."""

    started_at: datetime
    ends_at: datetime

    @classmethod
    def start(
        cls,
        minutes: int | str | None,
        *,
        now: datetime | None = None,
        max_minutes: int = 720,
    ) -> Countdown:
        """Start a countdown of ``minutes`` minutes.

        Raises:
            ValidationError: If minutes is not a whole number in 1..max_minutes.
        """
        try:
            value = int(minutes)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            raise ValidationError(
                "Please enter a positive number of minutes.",
                field_name="minutes",
                invalid_value=minutes,
            ) from None
        if value <= 0 or value > max_minutes:
            raise ValidationError(
                f"Please enter between 1 and {max_minutes} minutes.",
                field_name="minutes",
                invalid_value=value,
            )
        started = now or datetime.now()
        return cls(started_at=started, ends_at=started + timedelta(minutes=value))

    def remaining(self, now: datetime | None = None) -> timedelta:
        """Time left, never negative."""
        left = self.ends_at - (now or datetime.now())
        return max(left, timedelta(0))

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.remaining(now) <= timedelta(0)

    def display(self, now: datetime | None = None) -> str:
        """Remaining time as MM:SS, or "Time's up!" once expired."""
        if self.is_expired(now):
            return TIMES_UP
        total_seconds = int(self.remaining(now).total_seconds())
        return f"{total_seconds // 60:02d}:{total_seconds % 60:02d}"


__all__ = [
    "TIMES_UP",
    "Countdown",
]

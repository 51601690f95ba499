"""Tests for the session countdown timer."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from torchtime.core.exceptions import ValidationError
from torchtime.engine.timer import TIMES_UP, Countdown


START = datetime(2025, 3, 7, 19, 0, 0)


class TestCountdown:
    def test_start(self) -> None:
        countdown = Countdown.start(90, now=START)

        assert countdown.ends_at == START + timedelta(minutes=90)
        assert countdown.display(START) == "90:00"

    def test_string_minutes(self) -> None:
        assert Countdown.start("5", now=START).display(START) == "05:00"

    def test_display_counts_down(self) -> None:
        countdown = Countdown.start(2, now=START)

        assert countdown.display(START + timedelta(seconds=65)) == "00:55"

    def test_times_up(self) -> None:
        countdown = Countdown.start(1, now=START)
        later = START + timedelta(minutes=5)

        assert countdown.is_expired(later)
        assert countdown.remaining(later) == timedelta(0)
        assert countdown.display(later) == TIMES_UP

    @pytest.mark.parametrize("minutes", [0, -5, 721, "abc", None, ""])
    def test_invalid_minutes(self, minutes) -> None:
        with pytest.raises(ValidationError):
            Countdown.start(minutes, now=START)

    def test_custom_max(self) -> None:
        with pytest.raises(ValidationError):
            Countdown.start(31, now=START, max_minutes=30)

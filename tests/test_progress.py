"""
Tests for time formatting and run reporters.

Validates:
1. format_time unit buckets and their boundaries
2. progress_percent, including zero-step runs
3. LoggingReporter messages
4. RecordingReporter event capture
"""

import logging

import pytest

from kepler.progress import (
    ONE_DAY,
    ONE_HOUR,
    ONE_MINUTE,
    ONE_MONTH,
    ONE_YEAR,
    LoggingReporter,
    RecordingReporter,
    format_time,
    progress_percent,
)


class TestFormatTime:
    """Tests for human-readable durations."""

    @pytest.mark.parametrize("seconds, expected", [
        (0, "0.00s"),
        (5, "5.00s"),
        (59, "59.00s"),
        (60, "1.00min"),
        (360, "6.00min"),
        (3599, "59.98min"),
        (3600, "1.00h"),
        (86_300, "23.97h"),
        (86_399, "24.00h"),
        (86_400, "1.00days"),
        (2_500_000, "28.94days"),
        (2_592_000, "1.00months"),
        (31_103_999, "12.00months"),
        (31_104_000, "1.00y"),
        (int(31_104_000 * 15.5), "15.50y"),
        (1_234_567_890, "39.69y"),
    ])
    def test_buckets(self, seconds, expected):
        assert format_time(seconds) == expected

    def test_unit_constants(self):
        """Months are 30 days, years 12 months."""
        assert ONE_MINUTE == 60
        assert ONE_HOUR == 3_600
        assert ONE_DAY == 86_400
        assert ONE_MONTH == 30 * ONE_DAY
        assert ONE_YEAR == 12 * ONE_MONTH

    def test_fractional_seconds_truncated(self):
        assert format_time(59.9) == "59.00s"

    def test_negative_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            format_time(-1)


class TestProgressPercent:

    def test_midway(self):
        assert progress_percent(5, 10) == pytest.approx(50.0)

    def test_start_and_end(self):
        assert progress_percent(0, 8) == 0.0
        assert progress_percent(8, 8) == pytest.approx(100.0)

    def test_zero_step_run_is_complete(self):
        assert progress_percent(0, 0) == 100.0


class TestLoggingReporter:

    def test_progress_message(self, caplog):
        caplog.set_level(logging.INFO, logger="kepler.simulation")

        LoggingReporter().tick_completed(5, 1800.0, 50.0, format_time(1800))

        assert "Progress: 50.00%, time: 30.00min" in caplog.messages

    def test_tick_details_only_at_debug(self, caplog):
        caplog.set_level(logging.INFO, logger="kepler.simulation")

        LoggingReporter().tick_started(3, 10.0)

        assert caplog.messages == []

    def test_failure_logged_as_error(self, caplog):
        caplog.set_level(logging.INFO, logger="kepler.simulation")

        LoggingReporter().run_failed(7, OSError("disk full"))

        assert caplog.records[-1].levelno == logging.ERROR
        assert "step 7" in caplog.messages[-1]
        assert "disk full" in caplog.messages[-1]

    def test_custom_logger(self, caplog):
        log = logging.getLogger("kepler.tests.custom")
        caplog.set_level(logging.INFO, logger="kepler.tests.custom")

        LoggingReporter(log).plot_completed("out/run_Energy.svg")

        assert caplog.records[-1].name == "kepler.tests.custom"


class TestRecordingReporter:

    def test_events_in_call_order(self):
        reporter = RecordingReporter()
        reporter.tick_started(0, 0.0)
        reporter.tick_completed(0, 0.0, 0.0, "0.00s")
        reporter.plot_failed(RuntimeError("boom"))

        assert reporter.names() == ["tick_started", "tick_completed", "plot_failed"]
        assert reporter.events[1] == ("tick_completed", 0, 0.0, 0.0, "0.00s")

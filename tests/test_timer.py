import time

import pytest

from housing_portal.core.errors import ValidationError
from housing_portal.views import TimeEntriesView
from housing_portal.views.timer import Stopwatch, Ticker


def _run(watch, seconds):
    for _ in range(seconds):
        watch.tick()


class TestStopwatch:

    def test_start_requires_project(self):
        watch = Stopwatch()
        with pytest.raises(ValidationError):
            watch.start(None)
        with pytest.raises(ValidationError):
            watch.start("  ")
        assert not watch.running

    def test_tick_while_stopped_is_ignored(self):
        watch = Stopwatch()
        watch.tick()
        assert watch.seconds == 0

    def test_stop_without_elapsed_time(self):
        watch = Stopwatch()
        watch.start(3)
        assert watch.stop() is None
        assert not watch.running

    def test_ninety_seconds(self):
        watch = Stopwatch()
        watch.start(3)
        _run(watch, 90)
        assert watch.elapsed_display == "00:01:30"

        patch = watch.stop()
        assert patch == {"project_id": 3, "hours": 0.03, "task_description": "Timer session"}
        assert watch.seconds == 0
        assert watch.elapsed_display == "00:00:00"

    def test_restart_resets_elapsed(self):
        watch = Stopwatch()
        watch.start(1)
        _run(watch, 40)
        watch.start(2)
        assert watch.project_id == 2
        assert watch.seconds == 0


class TestTicker:

    def test_ticks_in_background(self):
        watch = Stopwatch()
        watch.start(1)
        ticker = Ticker(watch, interval=0.01)
        ticker.start()
        try:
            deadline = time.monotonic() + 2
            while watch.seconds < 3 and time.monotonic() < deadline:
                time.sleep(0.01)
        finally:
            ticker.stop()
            ticker.join(timeout=1)

        assert watch.seconds >= 3
        assert not ticker.is_alive()


class TestTimeEntriesTimer:

    def test_stop_opens_prefilled_draft(self, resources):
        view = TimeEntriesView(resources, default_hourly_rate=150)
        view.start_timer(7)
        _run(view.stopwatch, 3600)

        assert view.stop_timer() is True
        assert view.create_open
        assert view.draft["project_id"] == 7
        assert view.draft["hours"] == 1.0
        assert view.draft["task_description"] == "Timer session"
        assert view.draft["hourly_rate"] == "150"

    def test_stop_without_time_opens_nothing(self, resources):
        view = TimeEntriesView(resources)
        view.start_timer(7)
        assert view.stop_timer() is False
        assert not view.create_open

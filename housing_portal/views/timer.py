"""
Single-slot stopwatch for time tracking.

Only one timer runs at a time. Stopping a timer that has counted at least
one second yields a pre-filled time-entry draft.
"""

import logging
import threading
from typing import Any, Dict, Optional

from housing_portal.core.errors import ValidationError
from housing_portal.core.time_utils import format_elapsed, seconds_to_hours


logger = logging.getLogger(__name__)

TIMER_TASK_DESCRIPTION = "Timer session"


class Stopwatch:
    """
    Stopped(0) → Running(project, n) → Stopped(0).

    Usage:
        watch = Stopwatch()
        watch.start(project_id=3)
        watch.tick()
        patch = watch.stop()   # {"project_id", "hours", "task_description"} or None
    """

    def __init__(self):
        self.project_id: Optional[int] = None
        self.seconds = 0
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self.project_id is not None

    @property
    def elapsed_display(self) -> str:
        return format_elapsed(self.seconds)

    def start(self, project_id) -> None:
        if project_id is None or (isinstance(project_id, str) and not project_id.strip()):
            raise ValidationError("Select a project before starting the timer", field="project_id")

        with self._lock:
            if self.running:
                logger.info(f"Restarting timer: project {self.project_id} → {project_id}")
            self.project_id = project_id
            self.seconds = 0

    def tick(self) -> None:
        with self._lock:
            if self.running:
                self.seconds += 1

    def stop(self) -> Optional[Dict[str, Any]]:
        with self._lock:
            project_id, seconds = self.project_id, self.seconds
            self.project_id = None
            self.seconds = 0

        if project_id is None or seconds <= 0:
            return None

        hours = seconds_to_hours(seconds)
        logger.info(f"Timer stopped for project {project_id}: {format_elapsed(seconds)} ({hours}h)")
        return {
            "project_id": project_id,
            "hours": hours,
            "task_description": TIMER_TASK_DESCRIPTION,
        }


class Ticker(threading.Thread):
    """Background thread calling stopwatch.tick() once per interval."""

    def __init__(self, stopwatch: Stopwatch, interval: float = 1.0):
        super().__init__(daemon=True)
        self.stopwatch = stopwatch
        self.interval = interval
        self._stopped = threading.Event()

    def run(self) -> None:
        while not self._stopped.wait(self.interval):
            self.stopwatch.tick()

    def stop(self) -> None:
        self._stopped.set()

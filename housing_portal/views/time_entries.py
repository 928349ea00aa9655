"""
Time entries list, billing totals and the stopwatch hand-off.
"""

from typing import Any, Dict, List

from housing_portal.core.config import DEFAULT_HOURLY_RATE
from housing_portal.core.domain_models import Project, TimeEntry, total_of
from housing_portal.core.money import coerce_int, safe_sum
from housing_portal.core.time_utils import today_iso, within_last_days
from housing_portal.views.base import ListView
from housing_portal.views.timer import Stopwatch


class TimeEntriesView(ListView):
    resource = "time-entries"
    model = TimeEntry
    search_fields = ("task_description", "project_name")
    filter_fields = ("project_id",)
    required_fields = ("project_id", "task_description", "hours")
    int_fields = ("project_id",)
    float_fields = ("hours", "hourly_rate")
    refresh_strategy = "refetch"

    def __init__(self, resources, default_hourly_rate: float = DEFAULT_HOURLY_RATE,
                 stopwatch: Stopwatch = None):
        self.default_hourly_rate = default_hourly_rate
        super().__init__(resources)
        self.projects: List[Project] = []
        self.stopwatch = stopwatch or Stopwatch()

    def default_draft(self) -> Dict[str, Any]:
        return {
            "project_id": "",
            "task_description": "",
            "hours": "",
            "hourly_rate": str(self.default_hourly_rate),
            "date": today_iso(),
            "billable": True,
            "notes": "",
        }

    def fetch_related(self) -> Dict[str, List[Any]]:
        return {"projects": [Project.from_dict(r) for r in self.resources.list("projects")]}

    def filter_matches(self, record, name, value) -> bool:
        if name == "project_id":
            return record.project_id == coerce_int(value)
        return super().filter_matches(record, name, value)

    def summary(self) -> Dict[str, Any]:
        entries = self.items
        this_week = [e for e in entries if within_last_days(e.date, 7)]
        return {
            "total_entries": len(entries),
            "total_hours": total_of(entries, "hours"),
            "total_billable": safe_sum(e.amount for e in entries if e.billable),
            "this_week_hours": total_of(this_week, "hours"),
        }

    # ---------------------------------------------------------
    # TIMER
    # ---------------------------------------------------------
    def start_timer(self, project_id) -> None:
        self.stopwatch.start(project_id)

    def stop_timer(self) -> bool:
        """
        Stop the timer; with elapsed time, open the create form pre-filled.

        Returns:
            True if a draft was opened
        """
        patch = self.stopwatch.stop()
        if patch is None:
            return False

        self.open_create(**patch)
        return True

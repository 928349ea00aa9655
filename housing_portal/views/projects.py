"""
Projects list: search by name/location, filter by phase, portfolio totals.
"""

from typing import Any, Dict

from housing_portal.core.domain_models import PHASES, Project, total_of
from housing_portal.views.base import ListView


class ProjectsView(ListView):
    resource = "projects"
    model = Project
    search_fields = ("name", "city", "state")
    filter_fields = ("phase",)
    draft_defaults = {
        "name": "",
        "description": "",
        "address": "",
        "city": "",
        "state": "",
        "zip_code": "",
        "total_units": "",
        "affordable_units": "",
        "total_cost": "",
        "phase": PHASES[0],
        "client_id": 1,
    }
    required_fields = ("name",)
    int_fields = ("total_units", "affordable_units", "client_id")
    float_fields = ("total_cost",)
    refresh_strategy = "append"

    def summary(self) -> Dict[str, Any]:
        projects = self.items
        phase_counts = {phase: 0 for phase in PHASES}
        for project in projects:
            phase_counts[project.phase] = phase_counts.get(project.phase, 0) + 1

        return {
            "total_projects": len(projects),
            "total_units": total_of(projects, "total_units"),
            "affordable_units": total_of(projects, "affordable_units"),
            "total_cost": total_of(projects, "total_cost"),
            "funding_secured": total_of(projects, "funding_secured"),
            "funding_gap": total_of(projects, "funding_gap"),
            "phase_counts": phase_counts,
        }

"""
Funding applications list with status and funding-source filters.

Loads projects and funding sources alongside applications so the create
form can offer pickers.
"""

from typing import Any, Dict, List, Optional

from housing_portal.core.domain_models import (
    APPLICATION_STATUSES, Application, FundingSource, Project, total_of,
)
from housing_portal.core.money import coerce_int
from housing_portal.core.time_utils import days_until, deadline_label
from housing_portal.views.base import ListView


APPROVED_STATUSES = ("Approved", "Awarded")
PENDING_STATUSES = ("Submitted", "Under Review")


class ApplicationsView(ListView):
    resource = "applications"
    model = Application
    search_fields = ("project_name", "funding_source_name")
    filter_fields = ("status", "funding_source_id")
    draft_defaults = {
        "project_id": "",
        "funding_source_id": "",
        "amount_requested": "",
        "application_deadline": "",
        "status": APPLICATION_STATUSES[0],
        "notes": "",
    }
    required_fields = ("project_id", "funding_source_id", "amount_requested", "application_deadline")
    int_fields = ("project_id", "funding_source_id")
    float_fields = ("amount_requested",)
    refresh_strategy = "refetch"

    def __init__(self, resources):
        super().__init__(resources)
        self.projects: List[Project] = []
        self.funding_sources: List[FundingSource] = []

    def fetch_related(self) -> Dict[str, List[Any]]:
        return {
            "projects": [Project.from_dict(r) for r in self.resources.list("projects")],
            "funding_sources": [FundingSource.from_dict(r) for r in self.resources.list("funding-sources")],
        }

    def filter_matches(self, record, name, value) -> bool:
        if name == "funding_source_id":
            # Picker values arrive as text
            return record.funding_source_id == coerce_int(value)
        return super().filter_matches(record, name, value)

    def summary(self) -> Dict[str, Any]:
        apps = self.items
        return {
            "total_applications": len(apps),
            "approved": sum(1 for a in apps if a.status in APPROVED_STATUSES),
            "pending": sum(1 for a in apps if a.status in PENDING_STATUSES),
            "total_requested": total_of(apps, "amount_requested"),
        }

    @staticmethod
    def deadline_info(application: Application) -> Optional[str]:
        return deadline_label(days_until(application.application_deadline))

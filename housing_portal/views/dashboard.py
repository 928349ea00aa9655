"""
Portfolio dashboard: server-side stats plus the most recent projects.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple

from housing_portal.api.client import ResourceClient
from housing_portal.core.domain_models import Project
from housing_portal.core.errors import PortalError
from housing_portal.core.money import percent


logger = logging.getLogger(__name__)

RECENT_LIMIT = 5


class DashboardView:
    """
    Three independent fetches; one failing does not blank the others.
    """

    def __init__(self, resources: ResourceClient):
        self.resources = resources
        self.project_stats: Optional[Dict[str, Any]] = None
        self.application_stats: Optional[Dict[str, Any]] = None
        self.recent_projects: List[Project] = []
        self.errors: Dict[str, PortalError] = {}

    def load(self) -> bool:
        """
        Fetch stats and recent projects.

        Returns:
            True if every part loaded
        """
        self.errors = {}

        try:
            self.project_stats = self.resources.dashboard_stats("projects")
        except PortalError as e:
            logger.error(f"Error fetching project stats: {e}")
            self.project_stats = None
            self.errors["project_stats"] = e

        try:
            self.application_stats = self.resources.dashboard_stats("applications")
        except PortalError as e:
            logger.error(f"Error fetching application stats: {e}")
            self.application_stats = None
            self.errors["application_stats"] = e

        try:
            rows = self.resources.list("projects", limit=RECENT_LIMIT)
            self.recent_projects = [Project.from_dict(r) for r in rows[:RECENT_LIMIT]]
        except PortalError as e:
            logger.error(f"Error fetching recent projects: {e}")
            self.recent_projects = []
            self.errors["recent_projects"] = e

        return not self.errors

    @staticmethod
    def _distribution(counts: Optional[Dict[str, int]], total: Optional[int]) -> Iterator[Tuple[str, int, int]]:
        for label, count in (counts or {}).items():
            yield label, count, percent(count, total)

    def phase_distribution(self) -> List[Tuple[str, int, int]]:
        stats = self.project_stats or {}
        return list(self._distribution(stats.get("phase_distribution"), stats.get("total_projects")))

    def status_distribution(self) -> List[Tuple[str, int, int]]:
        stats = self.application_stats or {}
        return list(self._distribution(stats.get("status_distribution"), stats.get("total_applications")))

    @property
    def financial_summary(self) -> Dict[str, Any]:
        return (self.project_stats or {}).get("financial_summary") or {}

    @property
    def success_rate(self) -> float:
        return (self.application_stats or {}).get("success_rate") or 0

"""
Funding sources catalogue (read-only).
"""

from typing import Any, Dict

from housing_portal.core.domain_models import FundingSource, total_of
from housing_portal.views.base import ListView


class FundingSourcesView(ListView):
    resource = "funding-sources"
    model = FundingSource
    search_fields = ("name",)
    filter_fields = ("type",)
    read_only = True

    def summary(self) -> Dict[str, Any]:
        sources = self.items
        return {
            "total_sources": len(sources),
            "available": sum(1 for s in sources if s.currently_available),
            "total_applications": total_of(sources, "application_count"),
        }

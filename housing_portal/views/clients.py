"""
Client organizations list.
"""

from typing import Any, Dict

from housing_portal.core.domain_models import Client, total_of
from housing_portal.views.base import ListView


class ClientsView(ListView):
    resource = "clients"
    model = Client
    search_fields = ("name", "contact_person", "email")
    draft_defaults = {
        "name": "",
        "contact_person": "",
        "email": "",
        "phone": "",
        "address": "",
        "city": "",
        "state": "",
        "zip_code": "",
        "notes": "",
    }
    required_fields = ("name",)
    refresh_strategy = "append"

    def summary(self) -> Dict[str, Any]:
        return {
            "total_clients": len(self.items),
            "total_projects": total_of(self.items, "project_count"),
        }

"""
Canonical domain models for the housing portal client.

These are transient copies of records owned by the backend API. A view
holds its own snapshot of each entity until the next fetch or until a
successful write patches it locally.
"""

from dataclasses import dataclass, field, fields, replace, asdict
from datetime import datetime
from typing import Optional, Dict, Any

from housing_portal.core.money import format_usd, percent, safe_sum


# Categorical filter sentinel: bypasses the predicate
ALL = "all"

PHASES = (
    "Pre-Development",
    "Application/Financing",
    "Construction",
    "Lease-Up",
    "Operations",
)

APPLICATION_STATUSES = (
    "Draft",
    "Submitted",
    "Under Review",
    "Approved",
    "Rejected",
    "Awarded",
)

FUNDING_SOURCE_TYPES = (
    "Federal",
    "State",
    "Local",
    "Private",
    "Tax Credit",
    "Congressional",
)


def _known_fields(cls, payload: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Keep only the keys the dataclass declares."""
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in (payload or {}).items() if k in names}


class _Record:
    """Shared dict conversion for API records."""

    @classmethod
    def from_dict(cls, payload: Optional[Dict[str, Any]]):
        return cls(**_known_fields(cls, payload))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def merged(self, **changes):
        """Return a patched copy; the original is left untouched."""
        return replace(self, **changes)


@dataclass
class Project(_Record):
    """
    Housing development project.

    funding_gap is reported by the server; computed_funding_gap is the
    client-side derivation used only for display checks.
    """
    id: Optional[int] = None
    name: str = ""
    description: Optional[str] = None

    # Location
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None

    # Size and money
    total_units: Optional[int] = None
    affordable_units: Optional[int] = None
    total_cost: Optional[float] = None
    funding_secured: Optional[float] = None
    funding_gap: Optional[float] = None

    phase: str = PHASES[0]
    client_id: Optional[int] = None

    # SharePoint linkage
    sharepoint_site_url: Optional[str] = None
    sharepoint_email: Optional[str] = None
    sharepoint_group_id: Optional[str] = None

    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def has_sharepoint_site(self) -> bool:
        return bool(self.sharepoint_site_url and self.sharepoint_site_url.strip())

    @property
    def computed_funding_gap(self) -> float:
        return (self.total_cost or 0) - (self.funding_secured or 0)

    @property
    def funding_progress(self) -> int:
        return percent(self.funding_secured, self.total_cost)

    @property
    def sharepoint_badge(self) -> str:
        return "SharePoint" if self.has_sharepoint_site else "No SharePoint"


@dataclass
class Application(_Record):
    """Funding application linking a project to a funding source."""
    id: Optional[int] = None
    project_id: Optional[int] = None
    project_name: Optional[str] = None
    funding_source_id: Optional[int] = None
    funding_source_name: Optional[str] = None
    amount_requested: Optional[float] = None
    application_deadline: Optional[str] = None
    status: str = APPLICATION_STATUSES[0]
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class Client(_Record):
    id: Optional[int] = None
    name: str = ""
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    notes: Optional[str] = None
    project_count: Optional[int] = None
    created_at: Optional[str] = None


@dataclass
class FundingSource(_Record):
    id: Optional[int] = None
    name: str = ""
    type: Optional[str] = None
    description: Optional[str] = None
    typical_amount_min: Optional[float] = None
    typical_amount_max: Optional[float] = None
    currently_available: bool = False
    application_deadline: Optional[str] = None
    application_frequency: Optional[str] = None
    website_url: Optional[str] = None
    application_count: Optional[int] = None

    @property
    def amount_range_display(self) -> str:
        if self.typical_amount_min and self.typical_amount_max:
            return f"{format_usd(self.typical_amount_min)} - {format_usd(self.typical_amount_max)}"
        if self.typical_amount_min:
            return f"{format_usd(self.typical_amount_min)}+"
        return "Varies"


@dataclass
class TimeEntry(_Record):
    id: Optional[int] = None
    project_id: Optional[int] = None
    project_name: Optional[str] = None
    task_description: str = ""
    hours: Optional[float] = None
    hourly_rate: Optional[float] = None
    date: Optional[str] = None
    billable: bool = True
    notes: Optional[str] = None

    @property
    def amount(self) -> float:
        return (self.hours or 0) * (self.hourly_rate or 0)


@dataclass
class ChatMessage:
    """
    Transcript entry shown to the user.

    Error entries (is_error=True) exist only in the transcript and are
    never sent back to the assistant as context.
    """
    id: int
    role: str  # "user" or "assistant"
    content: str
    timestamp: datetime = field(default_factory=datetime.now)
    is_error: bool = False


@dataclass
class ChatHistoryTurn:
    """Role/content pair sent to the assistant endpoint as context."""
    role: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


def total_of(records, attr: str) -> float:
    """Sum a numeric attribute across records, treating missing as zero."""
    return safe_sum(getattr(r, attr, None) for r in records)

"""
List-view controllers for each backend resource, plus the dashboard.
"""

from .applications import ApplicationsView
from .base import ListView, LoadState
from .clients import ClientsView
from .dashboard import DashboardView
from .funding_sources import FundingSourcesView
from .projects import ProjectsView
from .time_entries import TimeEntriesView

__all__ = [
    'ApplicationsView',
    'ClientsView',
    'DashboardView',
    'FundingSourcesView',
    'ListView',
    'LoadState',
    'ProjectsView',
    'TimeEntriesView',
]

#!/usr/bin/env python3
"""
Command-line dashboard for the housing portal API.

Usage:
    housing-portal dashboard
    housing-portal projects --phase Construction
    housing-portal projects create --name "Mill Station" --city Dallas --state OR
    housing-portal timer 3
    housing-portal sharepoint create-site 3 owner@example.org
    housing-portal chat -m "What are the upcoming deadlines?"

Reads HOUSING_API_URL (and friends) from the environment or a .env file.
"""

import argparse
import logging
import sys
import time
from typing import Any, Callable, Dict, List, Optional

from tqdm import tqdm

from housing_portal.api.client import ApiClient, ResourceClient
from housing_portal.chat.session import QUICK_QUESTIONS, ChatSession
from housing_portal.core.action_state import Failed, Succeeded
from housing_portal.core.config import Settings, load_settings
from housing_portal.core.domain_models import (
    APPLICATION_STATUSES, FUNDING_SOURCE_TYPES, PHASES, Project,
)
from housing_portal.core.errors import ConfigError, ValidationError
from housing_portal.core.money import format_usd
from housing_portal.sharepoint.provisioning import SiteProvisioningWorkflow
from housing_portal.views import (
    ApplicationsView, ClientsView, DashboardView, FundingSourcesView,
    ListView, LoadState, ProjectsView, TimeEntriesView,
)
from housing_portal.views.timer import Ticker


logger = logging.getLogger(__name__)

MONEY_KEYS = ("cost", "funding", "requested", "billable")


# =============================================================================
# OUTPUT HELPERS
# =============================================================================

def _print_summary(summary: Dict[str, Any]) -> None:
    print("\n📊 Summary")
    for key, value in summary.items():
        label = key.replace("_", " ").title()
        if isinstance(value, dict):
            parts = ", ".join(f"{k}: {v}" for k, v in value.items())
            print(f"   {label}: {parts}")
        elif any(token in key for token in MONEY_KEYS):
            decimals = 2 if "billable" in key else 0
            print(f"   {label}: {format_usd(value, decimals)}")
        elif isinstance(value, float):
            print(f"   {label}: {value:.1f}")
        else:
            print(f"   {label}: {value}")


def _report(state, success_prefix: str = "✅") -> int:
    if isinstance(state, Succeeded):
        print(f"{success_prefix} {state.message or 'Done'}")
        return 0
    if isinstance(state, Failed):
        print(f"❌ {state.message}")
        return 1
    return 0


def _render_list(view: ListView, render: Callable[[Any], str]) -> int:
    view.load()
    if view.state is LoadState.ERRORED:
        print(f"❌ Could not load {view.resource}: {view.last_error}")
        return 1

    rows = view.visible
    if not rows:
        print(f"No {view.resource} found.")
    for record in rows:
        print(render(record))

    _print_summary(view.summary())
    return 0


def _submit(view: ListView) -> int:
    state = view.submit_create()
    if isinstance(state, Succeeded):
        print(f"✅ Created {view.resource} record #{state.value.id}")
        return 0
    return _report(state)


def _draft_from_args(args, names: List[str]) -> Dict[str, Any]:
    return {name: getattr(args, name) for name in names if getattr(args, name, None) is not None}


# =============================================================================
# RENDERERS
# =============================================================================

def render_project(p: Project) -> str:
    return (f"#{p.id!s:<4} {(p.name or '')[:30]:30} {p.phase or '':22} "
            f"{format_usd(p.total_cost):>14}  {p.funding_progress:>3}% funded  [{p.sharepoint_badge}]")


def render_application(a) -> str:
    label = ApplicationsView.deadline_info(a)
    due = f"due {a.application_deadline}" + (f" ({label})" if label else "")
    return (f"#{a.id!s:<4} {a.project_name or '?'} → {a.funding_source_name or '?'} | "
            f"{a.status} | {format_usd(a.amount_requested)} | {due}")


def render_client(c) -> str:
    contact = " / ".join(v for v in (c.contact_person, c.email, c.phone) if v)
    return f"#{c.id!s:<4} {(c.name or '')[:30]:30} {contact}  ({c.project_count or 0} projects)"


def render_funding_source(s) -> str:
    availability = "Available" if s.currently_available else "Closed"
    return (f"#{s.id!s:<4} {(s.name or '')[:34]:34} {s.type or '':14} {availability:9} "
            f"{s.amount_range_display}  ({s.application_count or 0} submitted)")


def render_time_entry(e) -> str:
    billable = "Billable" if e.billable else "Non-billable"
    return (f"{e.date or '':10} {(e.project_name or '')[:24]:24} {(e.task_description or '')[:30]:30} "
            f"{e.hours or 0:>6.2f}h  {format_usd(e.amount, 2):>12}  {billable}")


# =============================================================================
# COMMANDS
# =============================================================================

def cmd_dashboard(api: ApiClient, settings: Settings, args) -> int:
    view = DashboardView(ResourceClient(api))
    ok = view.load()

    stats = view.project_stats or {}
    finance = view.financial_summary
    print("🏠 Portfolio Dashboard")
    print(f"   Projects: {stats.get('total_projects', 0)}")
    print(f"   Funding secured: {format_usd(finance.get('total_funding_secured'))}")
    print(f"   Funding gap: {format_usd(finance.get('total_funding_gap'))}")
    print(f"   Application success rate: {view.success_rate}%")

    for title, rows in (("Projects by phase", view.phase_distribution()),
                        ("Applications by status", view.status_distribution())):
        if rows:
            print(f"\n{title}:")
            for label, count, pct in rows:
                bar = "█" * (pct // 5)
                print(f"   {label:24} {count:>4}  {bar} {pct}%")

    if view.recent_projects:
        print("\nRecent projects:")
        for project in view.recent_projects:
            gap = f"  ({format_usd(project.funding_gap)} gap)" if (project.funding_gap or 0) > 0 else ""
            print(f"   {project.name} - {format_usd(project.funding_secured)} secured{gap}")

    for part, error in view.errors.items():
        print(f"⚠️  {part.replace('_', ' ')} unavailable: {error}")
    return 0 if ok else 1


def cmd_projects(api: ApiClient, settings: Settings, args) -> int:
    view = ProjectsView(ResourceClient(api))
    if args.action == "create":
        view.open_create(**_draft_from_args(args, [
            "name", "description", "address", "city", "state", "zip_code",
            "total_units", "affordable_units", "total_cost", "phase", "client_id",
        ]))
        return _submit(view)

    view.set_search(args.search)
    view.set_filter("phase", args.phase)
    return _render_list(view, render_project)


def cmd_applications(api: ApiClient, settings: Settings, args) -> int:
    view = ApplicationsView(ResourceClient(api))
    if args.action == "create":
        view.open_create(**_draft_from_args(args, [
            "project_id", "funding_source_id", "amount_requested",
            "application_deadline", "status", "notes",
        ]))
        return _submit(view)

    view.set_search(args.search)
    view.set_filter("status", args.status)
    view.set_filter("funding_source_id", args.source)
    return _render_list(view, render_application)


def cmd_clients(api: ApiClient, settings: Settings, args) -> int:
    view = ClientsView(ResourceClient(api))
    if args.action == "create":
        view.open_create(**_draft_from_args(args, [
            "name", "contact_person", "email", "phone", "address",
            "city", "state", "zip_code", "notes",
        ]))
        return _submit(view)

    view.set_search(args.search)
    return _render_list(view, render_client)


def cmd_funding_sources(api: ApiClient, settings: Settings, args) -> int:
    view = FundingSourcesView(ResourceClient(api))
    view.set_search(args.search)
    view.set_filter("type", args.type)
    return _render_list(view, render_funding_source)


def _time_view(api: ApiClient, settings: Settings) -> TimeEntriesView:
    return TimeEntriesView(ResourceClient(api), default_hourly_rate=settings.default_hourly_rate)


def cmd_time(api: ApiClient, settings: Settings, args) -> int:
    view = _time_view(api, settings)
    if args.action == "create":
        draft = _draft_from_args(args, ["project_id", "task_description", "hours",
                                        "hourly_rate", "date", "notes"])
        if args.non_billable:
            draft["billable"] = False
        view.open_create(**draft)
        return _submit(view)

    view.set_search(args.search)
    view.set_filter("project_id", args.project)
    return _render_list(view, render_time_entry)


def cmd_timer(api: ApiClient, settings: Settings, args) -> int:
    view = _time_view(api, settings)
    try:
        view.start_timer(args.project_id)
    except ValidationError as e:
        print(f"❌ {e}")
        return 1

    ticker = Ticker(view.stopwatch)
    ticker.start()
    print(f"⏱️  Timer running for project {args.project_id} - press Ctrl-C to stop")
    try:
        while True:
            time.sleep(0.5)
            print(f"\r   {view.stopwatch.elapsed_display}", end="", flush=True)
    except KeyboardInterrupt:
        print()
    finally:
        ticker.stop()
        ticker.join(timeout=ticker.interval * 2)

    if not view.stop_timer():
        print("Timer stopped with no elapsed time.")
        return 0

    if args.description:
        view.update_draft(task_description=args.description)
    print(f"   Logging {view.draft['hours']}h as \"{view.draft['task_description']}\"")
    return _submit(view)


def _load_project(api: ApiClient, project_id: int):
    view = ProjectsView(ResourceClient(api))
    view.load()
    if view.state is LoadState.ERRORED:
        print(f"❌ Could not load projects: {view.last_error}")
        return view, None
    project = view.select(project_id)
    if project is None:
        print(f"❌ Project not found: {project_id}")
    return view, project


def cmd_sharepoint(api: ApiClient, settings: Settings, args) -> int:
    view, project = _load_project(api, args.project_id)
    if project is None:
        return 1

    flow = SiteProvisioningWorkflow(api, project, on_project_update=view.apply_update)
    config = flow.check_config()

    if args.action == "status":
        if config is None:
            print(f"⚠️  SharePoint configuration unknown: {flow.config_error}")
        else:
            print(f"SharePoint configuration: {config.message}")
            if not config.configured:
                print(f"   Required environment variables: {', '.join(config.missing_variables)}")
        print(f"{project.name}: {flow.status.value}")
        if project.has_sharepoint_site:
            print(f"   Site URL: {project.sharepoint_site_url}")
            print(f"   Project email: {project.sharepoint_email}")
            if project.sharepoint_group_id:
                print(f"   Group ID: {project.sharepoint_group_id}")
        return 0

    if args.action == "create-site":
        rc = _report(flow.create_site(args.owner))
        if rc == 0:
            print(f"   Site URL: {view.selected.sharepoint_site_url}")
        return rc

    if args.action == "add-member":
        return _report(flow.add_team_member(args.user))

    # upload
    failures = 0
    for path in tqdm(args.files, desc="Uploading", unit="file"):
        state = flow.upload_document(path, args.folder)
        if isinstance(state, Failed):
            failures += 1
            tqdm.write(f"❌ {path}: {state.message}")
        else:
            tqdm.write(f"✅ {state.message}")
    return 1 if failures else 0


def cmd_chat(api: ApiClient, settings: Settings, args) -> int:
    session = ChatSession(api)

    if args.message is not None:
        if not session.send(args.message):
            print("❌ Nothing to send: the message is empty")
            return 1
        reply = session.last_reply
        print(reply.content)
        return 1 if reply.is_error else 0

    print(session.transcript[0].content)
    print("\nQuick questions:")
    for i, (category, text) in enumerate(QUICK_QUESTIONS, 1):
        print(f"   {i}. [{category}] {text}")
    print("Type a number to ask a quick question, /q to quit.\n")

    while True:
        try:
            text = input("you> ")
        except (EOFError, KeyboardInterrupt):
            print()
            return 0

        if text.strip() in ("/q", "/quit"):
            return 0
        if text.strip().isdigit() and 1 <= int(text.strip()) <= len(QUICK_QUESTIONS):
            text = session.quick_question(int(text.strip()) - 1)
            print(f"you> {text}")

        if session.send(text):
            reply = session.last_reply
            prefix = "⚠️ " if reply.is_error else "ai>"
            print(f"{prefix} {reply.content}\n")


# =============================================================================
# PARSER
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="housing-portal",
        description="Affordable housing project management dashboard",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("dashboard", help="Portfolio stats and recent projects")
    p.set_defaults(handler=cmd_dashboard)

    # projects
    p = sub.add_parser("projects", help="List or create projects")
    p.add_argument("--search", help="Match name, city or state")
    p.add_argument("--phase", choices=PHASES)
    p.set_defaults(handler=cmd_projects)
    actions = p.add_subparsers(dest="action")
    c = actions.add_parser("create", help="Create a project")
    c.add_argument("--name", required=True)
    for name in ("description", "address", "city", "state", "zip_code",
                 "total_units", "affordable_units", "total_cost", "client_id"):
        c.add_argument(f"--{name.replace('_', '-')}", dest=name)
    c.add_argument("--phase", choices=PHASES)

    # applications
    p = sub.add_parser("applications", help="List or create funding applications")
    p.add_argument("--search", help="Match project or funding source name")
    p.add_argument("--status", choices=APPLICATION_STATUSES)
    p.add_argument("--source", help="Funding source id")
    p.set_defaults(handler=cmd_applications)
    actions = p.add_subparsers(dest="action")
    c = actions.add_parser("create", help="Create an application")
    for name in ("project_id", "funding_source_id", "amount_requested", "application_deadline"):
        c.add_argument(f"--{name.replace('_', '-')}", dest=name, required=True)
    c.add_argument("--status", choices=APPLICATION_STATUSES)
    c.add_argument("--notes")

    # clients
    p = sub.add_parser("clients", help="List or create clients")
    p.add_argument("--search", help="Match name, contact or email")
    p.set_defaults(handler=cmd_clients)
    actions = p.add_subparsers(dest="action")
    c = actions.add_parser("create", help="Create a client")
    c.add_argument("--name", required=True)
    for name in ("contact_person", "email", "phone", "address", "city", "state", "zip_code", "notes"):
        c.add_argument(f"--{name.replace('_', '-')}", dest=name)

    # funding sources
    p = sub.add_parser("funding-sources", help="List funding sources")
    p.add_argument("--search")
    p.add_argument("--type", choices=FUNDING_SOURCE_TYPES)
    p.set_defaults(handler=cmd_funding_sources)

    # time entries
    p = sub.add_parser("time", help="List or log time entries")
    p.add_argument("--search")
    p.add_argument("--project", help="Project id")
    p.set_defaults(handler=cmd_time)
    actions = p.add_subparsers(dest="action")
    c = actions.add_parser("create", help="Log a time entry")
    c.add_argument("--project-id", dest="project_id", required=True)
    c.add_argument("--task", dest="task_description", required=True)
    c.add_argument("--hours", required=True)
    c.add_argument("--rate", dest="hourly_rate")
    c.add_argument("--date")
    c.add_argument("--notes")
    c.add_argument("--non-billable", action="store_true")

    p = sub.add_parser("timer", help="Run a stopwatch and log the time")
    p.add_argument("project_id", type=int)
    p.add_argument("--description", help="Task description (default: Timer session)")
    p.set_defaults(handler=cmd_timer)

    # sharepoint
    p = sub.add_parser("sharepoint", help="SharePoint site provisioning")
    p.set_defaults(handler=cmd_sharepoint)
    actions = p.add_subparsers(dest="action", required=True)
    c = actions.add_parser("status")
    c.add_argument("project_id", type=int)
    c = actions.add_parser("create-site")
    c.add_argument("project_id", type=int)
    c.add_argument("owner", help="Azure AD user id or email of the site owner")
    c = actions.add_parser("upload")
    c.add_argument("project_id", type=int)
    c.add_argument("files", nargs="+")
    c.add_argument("--folder", default="", help="Library folder (default: root)")
    c = actions.add_parser("add-member")
    c.add_argument("project_id", type=int)
    c.add_argument("user", help="User email or Azure AD id")

    p = sub.add_parser("chat", help="Talk to the AI assistant")
    p.add_argument("-m", "--message", help="Send one message and exit")
    p.set_defaults(handler=cmd_chat)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except ConfigError as e:
        print(f"❌ {e}")
        return 1

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    with ApiClient(settings.api_url, timeout=settings.timeout) as api:
        return args.handler(api, settings, args)


if __name__ == "__main__":
    sys.exit(main())

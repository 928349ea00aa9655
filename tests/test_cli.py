import pytest

from conftest import BASE_URL, fail, ok
from housing_portal import cli
from housing_portal.api.client import ApiClient
from housing_portal.views.timer import Ticker


@pytest.fixture
def run(session, monkeypatch, tmp_path):
    """Invoke cli.main against the fake session; returns (exit code, stdout)."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOUSING_API_URL", BASE_URL)
    monkeypatch.setattr(cli, "ApiClient",
                        lambda url, timeout: ApiClient(url, timeout=timeout, session=session))

    def _run(capsys, *argv):
        code = cli.main(list(argv))
        return code, capsys.readouterr().out

    return _run


def test_missing_api_url(monkeypatch, tmp_path, capsys):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("HOUSING_API_URL", raising=False)
    assert cli.main(["dashboard"]) == 1
    assert "HOUSING_API_URL" in capsys.readouterr().out


def test_projects_list(run, session, sample_projects, capsys):
    session.add("GET", "projects", ok(sample_projects))
    code, out = run(capsys, "projects", "--phase", "Construction")

    assert code == 0
    assert "Dallas Mill Station" in out
    assert "Riverside Commons" not in out
    assert "[SharePoint]" in out
    assert "Total Projects: 3" in out


def test_projects_create(run, session, capsys):
    session.add("POST", "projects", ok({"id": 9, "name": "Elm Row"}))
    code, out = run(capsys, "projects", "create", "--name", "Elm Row", "--total-units", "24")

    assert code == 0
    assert "Created projects record #9" in out
    sent = session.calls_to("POST", "projects")[0][2]["json"]
    assert sent["total_units"] == 24


def test_create_validation_error(run, session, capsys):
    code, out = run(capsys, "projects", "create", "--name", "Elm Row", "--total-units", "lots")
    assert code == 1
    assert "Total units must be a whole number" in out
    assert session.calls_to("POST", "projects") == []


def test_list_failure(run, session, capsys):
    session.add("GET", "clients", fail("Database unavailable"), status_code=500)
    code, out = run(capsys, "clients")
    assert code == 1
    assert "Database unavailable" in out


def test_dashboard_partial(run, session, sample_projects, capsys):
    session.add("GET", "projects/dashboard-stats", ok({
        "total_projects": 3,
        "phase_distribution": {"Construction": 2, "Pre-Development": 1},
        "financial_summary": {"total_funding_secured": 12_000_000, "total_funding_gap": 15_500_000},
    }))
    session.add("GET", "projects", ok(sample_projects))
    code, out = run(capsys, "dashboard")

    assert code == 1
    assert "$12,000,000" in out
    assert "Construction" in out
    assert "application stats unavailable" in out


def test_sharepoint_create_site(run, session, sample_projects, capsys):
    session.add("GET", "projects", ok(sample_projects))
    session.add("GET", "sharepoint/config/check", ok({"configured": True, "message": "Configured"}))
    session.add("POST", "sharepoint/projects/1/create-site", ok({
        "sharepoint_site_url": "https://tenant.sharepoint.com/sites/dallas-mill",
        "folders_created": 8,
    }))
    code, out = run(capsys, "sharepoint", "create-site", "1", "owner@example.org")

    assert code == 0
    assert "8 folders created" in out
    assert "https://tenant.sharepoint.com/sites/dallas-mill" in out


def test_sharepoint_unknown_project(run, session, sample_projects, capsys):
    session.add("GET", "projects", ok(sample_projects))
    code, out = run(capsys, "sharepoint", "status", "42")
    assert code == 1
    assert "Project not found: 42" in out


def test_chat_single_message(run, session, capsys):
    session.add("POST", "ai-chat", {"success": True, "response": "Two deadlines this month."})
    code, out = run(capsys, "chat", "-m", "Upcoming deadlines?")
    assert code == 0
    assert "Two deadlines this month." in out


def test_chat_error(run, session, capsys):
    session.add("POST", "ai-chat", fail("down"), status_code=503)
    code, out = run(capsys, "chat", "-m", "hello")
    assert code == 1
    assert "having trouble connecting" in out


def test_chat_blank_message(run, session, capsys):
    code, out = run(capsys, "chat", "-m", "   ")
    assert code == 1
    assert "Nothing to send" in out
    assert session.calls_to("POST", "ai-chat") == []


def test_timer_logs_entry_and_joins_ticker(run, session, sample_projects, monkeypatch, capsys):
    tickers = []

    def make_ticker(stopwatch):
        for _ in range(90):
            stopwatch.tick()
        ticker = Ticker(stopwatch, interval=0.01)
        tickers.append(ticker)
        return ticker

    def interrupt(seconds):
        raise KeyboardInterrupt

    monkeypatch.setattr(cli, "Ticker", make_ticker)
    monkeypatch.setattr(cli.time, "sleep", interrupt)
    session.add("POST", "time-entries", ok({"id": 12, "project_id": 2, "hours": 0.03}))
    session.add("GET", "time-entries", ok([{"id": 12, "project_id": 2, "hours": 0.03}]))
    session.add("GET", "projects", ok(sample_projects))

    code, out = run(capsys, "timer", "2", "--description", "Pro forma review")

    assert code == 0
    assert "Created time-entries record #12" in out
    sent = session.calls_to("POST", "time-entries")[0][2]["json"]
    assert sent["project_id"] == 2
    assert sent["task_description"] == "Pro forma review"
    assert not tickers[0].is_alive()

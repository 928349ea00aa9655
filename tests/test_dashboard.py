from conftest import fail, ok
from housing_portal.views import DashboardView


PROJECT_STATS = {
    "total_projects": 8,
    "phase_distribution": {"Pre-Development": 3, "Construction": 4, "Operations": 1},
    "financial_summary": {"total_development_cost": 120_000_000, "total_funding_secured": 80_000_000,
                          "total_funding_gap": 40_000_000},
}

APPLICATION_STATS = {
    "total_applications": 3,
    "status_distribution": {"Submitted": 1, "Awarded": 2},
    "success_rate": 66.7,
}


def test_full_load(resources, session, sample_projects):
    session.add("GET", "projects/dashboard-stats", ok(PROJECT_STATS))
    session.add("GET", "applications/dashboard-stats", ok(APPLICATION_STATS))
    session.add("GET", "projects", ok(sample_projects * 3))
    view = DashboardView(resources)

    assert view.load() is True
    assert len(view.recent_projects) == 5
    assert session.calls_to("GET", "projects")[0][2]["params"] == {"limit": 5}

    assert view.phase_distribution() == [
        ("Pre-Development", 3, 38),
        ("Construction", 4, 50),
        ("Operations", 1, 13),
    ]
    assert view.status_distribution() == [("Submitted", 1, 33), ("Awarded", 2, 67)]
    assert view.financial_summary["total_funding_gap"] == 40_000_000
    assert view.success_rate == 66.7


def test_partial_failure_keeps_other_sections(resources, session, sample_projects):
    session.add("GET", "projects/dashboard-stats", fail("Stats unavailable"), status_code=500)
    session.add("GET", "applications/dashboard-stats", ok(APPLICATION_STATS))
    session.add("GET", "projects", ok(sample_projects))
    view = DashboardView(resources)

    assert view.load() is False
    assert set(view.errors) == {"project_stats"}
    assert view.project_stats is None
    assert view.phase_distribution() == []
    assert view.financial_summary == {}
    assert len(view.recent_projects) == 3
    assert view.success_rate == 66.7


def test_zero_total_distribution(resources, session):
    session.add("GET", "projects/dashboard-stats", ok({"total_projects": 0,
                                                      "phase_distribution": {"Construction": 0}}))
    view = DashboardView(resources)
    view.load()
    assert view.phase_distribution() == [("Construction", 0, 0)]

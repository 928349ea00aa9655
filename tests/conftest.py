import pytest

from housing_portal.api.client import ApiClient, ResourceClient


BASE_URL = "http://portal.test/api"


class FakeResponse:
    """Minimal requests.Response stand-in."""

    def __init__(self, payload=None, status_code=200, invalid_json=False):
        self.payload = payload
        self.status_code = status_code
        self.invalid_json = invalid_json

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self.invalid_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self.payload


class FakeSession:
    """
    Routes (method, path) to canned responses and records every call.

    A route may be a FakeResponse, an exception instance (raised), or a
    callable taking the request kwargs and returning either.
    """

    def __init__(self, base_url=BASE_URL):
        self.base_url = base_url
        self.headers = {}
        self.routes = {}
        self.calls = []
        self.closed = False

    def add(self, method, path, payload=None, status_code=200, **kwargs):
        self.routes[(method, path)] = FakeResponse(payload, status_code, **kwargs)

    def add_handler(self, method, path, handler):
        self.routes[(method, path)] = handler

    def add_error(self, method, path, exc):
        self.routes[(method, path)] = exc

    def request(self, method, url, timeout=None, **kwargs):
        path = url[len(self.base_url) + 1:]
        self.calls.append((method, path, kwargs))

        route = self.routes.get((method, path))
        if route is None:
            return FakeResponse({"success": False, "error": f"No route for {method} {path}"}, 404)
        if callable(route) and not isinstance(route, (FakeResponse, Exception)):
            route = route(kwargs)
        if isinstance(route, Exception):
            raise route
        return route

    def calls_to(self, method, path):
        return [c for c in self.calls if c[0] == method and c[1] == path]

    def close(self):
        self.closed = True


def ok(data):
    return {"success": True, "data": data}


def fail(error):
    return {"success": False, "error": error}


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def api(session):
    return ApiClient(BASE_URL, timeout=5, session=session)


@pytest.fixture
def resources(api):
    return ResourceClient(api)


@pytest.fixture
def sample_projects():
    return [
        {
            "id": 1, "name": "Dallas Mill Station", "city": "Dallas", "state": "OR",
            "total_units": 60, "affordable_units": 48, "total_cost": 18_000_000,
            "funding_secured": 12_000_000, "funding_gap": 6_000_000,
            "phase": "Construction", "sharepoint_site_url": "",
        },
        {
            "id": 2, "name": "Riverside Commons", "city": "Salem", "state": "OR",
            "total_units": 40, "affordable_units": 40, "total_cost": 9_500_000,
            "funding_secured": None, "funding_gap": 9_500_000,
            "phase": "Pre-Development",
        },
        {
            "id": 3, "name": "Cedar Court", "city": "Eugene", "state": "OR",
            "total_units": None, "affordable_units": None, "total_cost": None,
            "phase": "Construction",
            "sharepoint_site_url": "https://tenant.sharepoint.com/sites/cedar-court",
            "sharepoint_email": "cedar-court@tenant.onmicrosoft.com",
        },
    ]

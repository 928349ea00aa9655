"""
HTTP client for the housing portal backend.

Every backend response is an envelope: {success: true, data} or
{success: false, error}. The client unwraps it and raises on failure.
There is no retry and no backoff; callers decide how to degrade.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from housing_portal.core.errors import ServerError, TransportError


logger = logging.getLogger(__name__)

RESOURCES = (
    "projects",
    "applications",
    "clients",
    "funding-sources",
    "time-entries",
)

GENERIC_FAILURE = "Request failed"


@dataclass
class Envelope:
    """Decoded {success, data|error} wrapper."""
    success: bool
    data: Any = None
    error: Optional[str] = None
    status_code: Optional[int] = None
    raw: Optional[Dict[str, Any]] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], status_ok: bool = True,
                     status_code: Optional[int] = None) -> "Envelope":
        """
        Decode a response body.

        Accepts the standard envelope, the chat form {success, response},
        and bare status documents with no success key (config check),
        which take their success from the HTTP status.
        """
        if "success" not in payload:
            return cls(
                success=status_ok,
                data=payload,
                error=None if status_ok else payload.get("error") or payload.get("message"),
                status_code=status_code,
                raw=payload,
            )

        data = payload.get("data")
        if data is None and "response" in payload:
            data = payload["response"]

        return cls(
            success=bool(payload.get("success")),
            data=data,
            error=payload.get("error"),
            status_code=status_code,
            raw=payload,
        )

    def unwrap(self) -> Any:
        """Return data, or raise ServerError with the server's message."""
        if not self.success:
            raise ServerError(self.error or GENERIC_FAILURE, status_code=self.status_code)
        return self.data


class ApiClient:
    """
    Thin wrapper around one requests.Session bound to a base URL.

    Usage:
        with ApiClient("http://localhost:5000/api") as api:
            projects = api.get("projects")
    """

    def __init__(self, base_url: str, timeout: float = 30.0,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'Accept': 'application/json',
            'User-Agent': 'housing-portal-client',
        })

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request_envelope(self, method: str, path: str, **kwargs) -> Envelope:
        """
        Send a request and decode its envelope without unwrapping.

        Raises:
            TransportError: network failure or a body that is not a JSON object
        """
        url = self.url_for(path)

        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise TransportError(f"Network error: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"{method} {url} returned non-JSON body (HTTP {response.status_code})")
            raise TransportError(f"Invalid response from server (HTTP {response.status_code})") from e

        if not isinstance(payload, dict):
            logger.error(f"{method} {url} returned {type(payload).__name__}, expected object")
            raise TransportError("Invalid response from server")

        envelope = Envelope.from_payload(payload, status_ok=response.ok,
                                         status_code=response.status_code)
        if envelope.success:
            logger.debug(f"{method} {url} ok")
        else:
            logger.warning(f"{method} {url} reported failure: {envelope.error or GENERIC_FAILURE}")
        return envelope

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request_envelope("GET", path, params=params).unwrap()

    def post_json(self, path: str, body: Dict[str, Any]) -> Any:
        return self.request_envelope("POST", path, json=body).unwrap()

    def post_multipart(self, path: str, files: Dict[str, Any],
                       data: Optional[Dict[str, Any]] = None) -> Any:
        return self.request_envelope("POST", path, files=files, data=data).unwrap()

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class ResourceClient:
    """
    Typed list/create operations over the REST resources.

    Usage:
        resources = ResourceClient(api)
        rows = resources.list("projects", limit=5)
        row = resources.create("clients", {"name": "Acme Housing"})
    """

    def __init__(self, api: ApiClient):
        self.api = api

    @staticmethod
    def _check(resource: str) -> str:
        if resource not in RESOURCES:
            raise ValueError(f"Unknown resource: {resource}")
        return resource

    def list(self, resource: str, **params) -> List[Dict[str, Any]]:
        data = self.api.get(self._check(resource), params=params or None)
        if data is None:
            data = []
        if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
            logger.error(f"GET {resource} returned {type(data).__name__}, expected a list of objects")
            raise TransportError("Invalid response from server")
        logger.info(f"Fetched {len(data)} {resource}")
        return data

    def create(self, resource: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = self.api.post_json(self._check(resource), payload)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            logger.error(f"POST {resource} returned {type(data).__name__}, expected an object")
            raise TransportError("Invalid response from server")
        logger.info(f"Created {resource} record {data.get('id')}")
        return data

    def dashboard_stats(self, resource: str) -> Dict[str, Any]:
        path = f"{self._check(resource)}/dashboard-stats"
        data = self.api.get(path) or {}
        if not isinstance(data, dict):
            logger.error(f"GET {path} returned {type(data).__name__}, expected an object")
            raise TransportError("Invalid response from server")
        return data

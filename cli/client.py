"""
HTTP client for the task queue.

QueueClient works with requests.Session (the default) or anything with the
same request() signature, e.g. FastAPI's TestClient.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests
from taskcluster.utils import fromNow

from app.models.task import format_timestamp


def from_now(offset: str, reference: Optional[datetime] = None) -> datetime:
    """
    Returns reference (default: now, UTC) shifted by a human readable
    offset such as "3 days", "-1 hour" or "2 weeks 1d 4h". A month counts
    as 30 days and a year as 365.

    Raises:
        ValueError if the offset can't be parsed.
    """
    return fromNow(offset, reference or datetime.now(timezone.utc))


def from_now_json(offset: str = "", reference: Optional[datetime] = None) -> str:
    """from_now() rendered the way task definitions carry timestamps."""
    return format_timestamp(from_now(offset, reference))


class QueueClientError(Exception):
    """Raised for any non-2xx answer from the queue."""

    def __init__(self, status_code: int, body: Any):
        super().__init__(f"Queue request failed with HTTP {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class QueueClient:
    def __init__(
        self,
        root_url: str,
        token: Optional[str] = None,
        session: Any = None,
        timeout: float = 30,
    ):
        self.root_url = root_url.rstrip("/")
        self.token = token
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, path: str, payload: Any = None) -> Any:
        kwargs: Dict[str, Any] = {"json": payload, "headers": self._headers()}
        # TestClient sessions warn on a per-request timeout
        if isinstance(self.session, requests.Session):
            kwargs["timeout"] = self.timeout

        response = self.session.request(method, f"{self.root_url}/api/v1{path}", **kwargs)
        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = response.text
            raise QueueClientError(response.status_code, body)
        return response.json()

    def create_task(self, task_id: str, task_def: Dict[str, Any]) -> Dict[str, Any]:
        """PUT /task/<taskId>. Safe to retry with the same definition."""
        return self._request("PUT", f"/task/{task_id}", task_def)

    def task(self, task_id: str) -> Dict[str, Any]:
        """GET /task/<taskId>. Works without a token."""
        return self._request("GET", f"/task/{task_id}")

    def current_scopes(self) -> Dict[str, Any]:
        return self._request("GET", "/auth/current-scopes")

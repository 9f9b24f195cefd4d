"""HTTP client for the FieldOps API."""
import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx

from fieldops.client.session import AuthSession

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://127.0.0.1:8000/api"


class FieldOpsAPIError(Exception):
    """Non-success response from the API."""

    def __init__(self, status_code: int, detail: Any):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class SessionExpiredError(FieldOpsAPIError):
    """The server rejected the token; the session has been cleared."""


class FieldOpsClient:
    """Bearer-token client.

    A 401 from any call clears ``session`` and raises
    :class:`SessionExpiredError`; callers send the user back to login.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[AuthSession] = None,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.session = session or AuthSession()
        self._http = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers={"Accept": "application/json"},
            transport=transport,
            timeout=timeout,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "FieldOpsClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"
        response = self._http.request(method, path, headers=headers, **kwargs)

        if response.status_code == 401:
            logger.info("Token rejected, clearing session")
            self.session.clear()
            raise SessionExpiredError(401, _detail(response))
        if response.is_error:
            raise FieldOpsAPIError(response.status_code, _detail(response))
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # Auth

    def login(self, email: str, password: str, device_name: Optional[str] = None) -> Dict[str, Any]:
        payload = {"email": email, "password": password}
        if device_name:
            payload["device_name"] = device_name
        data = self._request("POST", "/auth/login", json=payload)
        self.session.set(data["access_token"], data.get("user"))
        return data

    def register(self, **fields) -> Dict[str, Any]:
        data = self._request("POST", "/auth/register", json=fields)
        self.session.set(data["access_token"], data.get("user"))
        return data

    def logout(self) -> None:
        try:
            self._request("POST", "/auth/logout")
        finally:
            self.session.clear()

    def logout_all(self) -> None:
        try:
            self._request("POST", "/auth/logout-all")
        finally:
            self.session.clear()

    def me(self) -> Dict[str, Any]:
        user = self._request("GET", "/auth/me")
        self.session.update_user(user)
        return user

    def refresh_token(self) -> Dict[str, Any]:
        data = self._request("POST", "/auth/refresh-token")
        self.session.set(data["access_token"], data.get("user"))
        return data

    def test_connection(self) -> Dict[str, Any]:
        return self._request("GET", "/test")

    # Admin

    def list_tasks(self, **filters) -> Dict[str, Any]:
        return self._request("GET", "/admin/tasks", params=_clean(filters))

    def create_task(self, **fields) -> Dict[str, Any]:
        return self._request("POST", "/admin/tasks", json=fields)

    def assign_task(self, task_id: str, user_ids: Iterable[str], **fields) -> Dict[str, Any]:
        payload = {"user_ids": [str(u) for u in user_ids], **fields}
        return self._request("POST", f"/admin/tasks/{task_id}/assign", json=payload)

    def list_assignments(self, **filters) -> Dict[str, Any]:
        return self._request("GET", "/admin/assignments", params=_clean(filters))

    # Employee

    def my_tasks(self, **filters) -> Dict[str, Any]:
        return self._request("GET", "/my-tasks", params=_clean(filters))

    def start_task(self, assignment_id: str) -> Dict[str, Any]:
        return self._request("PUT", f"/my-tasks/{assignment_id}/start")

    def complete_task(self, assignment_id: str) -> Dict[str, Any]:
        return self._request("PUT", f"/my-tasks/{assignment_id}/complete")

    def record_location(
        self,
        assignment_id: str,
        latitude: float,
        longitude: float,
        **fields,
    ) -> Dict[str, Any]:
        payload = {
            "assignment_id": str(assignment_id),
            "latitude": latitude,
            "longitude": longitude,
            **fields,
        }
        return self._request("POST", "/locations", json=payload)

    def record_locations(self, locations: List[Dict[str, Any]]) -> Dict[str, Any]:
        return self._request("POST", "/locations/batch", json={"locations": locations})

    def create_report(self, assignment_id: str, content: str, photos: Optional[List[str]] = None) -> Dict[str, Any]:
        payload = {"assignment_id": str(assignment_id), "content": content, "photos": photos or []}
        return self._request("POST", "/reports", json=payload)

    def my_reports(self, **filters) -> Dict[str, Any]:
        return self._request("GET", "/reports/my", params=_clean(filters))


def _clean(params: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in params.items() if v is not None}


def _detail(response: httpx.Response) -> Any:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and "detail" in body:
        return body["detail"]
    return body

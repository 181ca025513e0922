import requests
from typing import Any, Dict, Iterable, List, Optional
from requests.exceptions import ConnectionError, Timeout, RequestException

from talentdesk.datetime_utils import format_iso_date
from talentdesk.errors import HttpError, NetworkError
from talentdesk.logging_config import BackendCallContext


class BackendAPI:
    """Project backend connection layer over a reusable requests session.

    Every call is made exactly once: failures surface to the caller, who
    decides whether to retry.
    """

    def __init__(self, base_url: str, api_token: Optional[str] = None, timeout: float = 30,
                 session: Optional[requests.Session] = None):
        if not base_url:
            raise ValueError("Missing backend base URL")

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        # Reusable HTTP session
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if api_token:
            self.session.headers.update({"Authorization": f"Bearer {api_token}"})

    @staticmethod
    def _error_message(response) -> Optional[str]:
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict):
            return body.get("error") or body.get("message")
        return None

    @staticmethod
    def _unwrap(body):
        # Backend wraps most payloads as {"data": ...}
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    def _request(self, method: str, endpoint: str, **kwargs):
        """
        Make a single request to the backend.

        Args:
            method: HTTP method
            endpoint: API path, starting with /api
            **kwargs: Additional arguments for requests

        Returns:
            The response JSON with any {"data": ...} wrapper removed, or None
            for an empty body

        Raises:
            HttpError: Non-2xx response
            NetworkError: The request did not complete
        """
        url = f"{self.base_url}{endpoint}"

        with BackendCallContext(method, endpoint):
            try:
                r = self.session.request(method, url, timeout=self.timeout, **kwargs)
            except (ConnectionError, Timeout) as e:
                raise NetworkError(f"Could not reach backend: {str(e)}") from e
            except RequestException as e:
                raise NetworkError(str(e)) from e

            if not 200 <= r.status_code < 300:
                raise HttpError(r.status_code, self._error_message(r))

            if not r.text:
                return None
            try:
                return self._unwrap(r.json())
            except ValueError as e:
                raise HttpError(r.status_code, "Backend returned an invalid JSON response") from e

    def _get(self, endpoint: str, params: Optional[Dict] = None):
        return self._request("GET", endpoint, params=params)

    def _post(self, endpoint: str, data: Optional[Dict] = None):
        return self._request("POST", endpoint, json=data)

    def _put(self, endpoint: str, data: Dict):
        return self._request("PUT", endpoint, json=data)

    def _delete(self, endpoint: str):
        return self._request("DELETE", endpoint)

    # -------------------------
    # Projects
    # -------------------------
    def get_project(self, project_id: str) -> Dict:
        return self._get(f"/api/projects/{project_id}")

    def get_phase(self, project_id: str) -> Dict:
        return self._get(f"/api/projects/{project_id}/phase")

    def get_action_items(self, project_id: str, include_readiness: bool = True) -> Any:
        params = {"includeReadiness": "true"} if include_readiness else None
        return self._get(f"/api/projects/{project_id}/phase/action-items", params=params)

    def activate_project(self, project_id: str) -> Any:
        return self._post(f"/api/projects/{project_id}/activate")

    def archive_project(self, project_id: str) -> Any:
        return self._post(f"/api/projects/{project_id}/archive")

    def set_roles_complete(self, project_id: str, complete: bool) -> Any:
        """Mark role setup complete (POST) or reopen it (DELETE)."""
        endpoint = f"/api/projects/{project_id}/roles/complete"
        if complete:
            return self._post(endpoint)
        return self._delete(endpoint)

    # -------------------------
    # Talent
    # -------------------------
    def update_talent_group(self, project_id: str, group_id: str, body: Dict) -> Dict:
        """
        Args:
            body: {groupName, pointOfContactName, pointOfContactPhone, members: [{name, role}]}
        """
        return self._put(f"/api/projects/{project_id}/talent-groups/{group_id}", body)

    def update_talent_schedule(self, project_id: str, talent_id: str, scheduled_dates: Iterable,
                               is_group: bool = False) -> Any:
        resource = "talent-groups" if is_group else "talent-roster"
        dates = sorted(format_iso_date(d) for d in scheduled_dates)
        return self._put(
            f"/api/projects/{project_id}/{resource}/{talent_id}/schedule",
            {"scheduledDates": dates},
        )

    # -------------------------
    # Escorts and assignments
    # -------------------------
    def get_team_roster(self, project_id: str) -> List[Dict]:
        return self._get(f"/api/projects/{project_id}/team-assignments") or []

    def get_assignments(self, project_id: str, day) -> Dict:
        """Returns {date, assignments: [...]} for one project day."""
        return self._get(f"/api/projects/{project_id}/assignments/{format_iso_date(day)}") or {}

    def update_assignments(self, project_id: str, day, body: Dict) -> Any:
        """
        Args:
            body: {talents: [{talentId, escortIds}], groups: [{groupId, escortIds}]}
        """
        return self._put(f"/api/projects/{project_id}/assignments/{format_iso_date(day)}", body)

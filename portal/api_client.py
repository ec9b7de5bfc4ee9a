from typing import Any, Callable, Dict, TypeVar

import requests

from .config import PortalSettings, dlog
from .models import ApiResponse, DashboardStats, ItemsPage, SystemLog, User


T = TypeVar("T")


class BackendApiClient:
    """Minimal read-only client for the blood-donation backend API."""

    def __init__(
        self,
        *,
        base_url: str,
        token: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: PortalSettings) -> "BackendApiClient":
        return cls(base_url=settings.backend_url, token=settings.backend_token, timeout=settings.backend_timeout)

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def get(self, path: str, parse_data: Callable[[Any], T]) -> ApiResponse[T]:
        url = f"{self._base_url}/{path.lstrip('/')}"
        dlog("backend_request", {"method": "GET", "url": url})
        try:
            resp = requests.get(url, headers=self._headers(), timeout=self._timeout)
        except Exception as e:
            raise ValueError(f"Could not reach backend API at {url}: {e}") from e

        if resp.status_code >= 400:
            try:
                err_json = resp.json()
                err_msg = err_json.get("message") or err_json.get("error") or resp.text
            except Exception:
                err_msg = resp.text
            raise ValueError(f"Backend error ({resp.status_code}) for {path}: {err_msg}")

        try:
            raw = resp.json()
        except Exception as e:
            raise ValueError(f"Invalid JSON from {path}: {e}") from e

        result = ApiResponse.parse(raw, parse_data)
        dlog(
            "backend_response",
            {"path": path, "success": result.success, "message": result.message},
        )
        return result


class DashboardApi:
    def __init__(self, client: BackendApiClient) -> None:
        self._client = client

    def get_stats(self) -> ApiResponse[DashboardStats]:
        return self._client.get("/dashboard/stats", DashboardStats.from_dict)


class AdminApi:
    def __init__(self, client: BackendApiClient) -> None:
        self._client = client

    def get_all_users(self) -> ApiResponse[ItemsPage[User]]:
        return self._client.get("/admin/users", lambda raw: ItemsPage.parse(raw, User.from_dict))

    def get_system_logs(self) -> ApiResponse[ItemsPage[SystemLog]]:
        return self._client.get("/admin/logs", lambda raw: ItemsPage.parse(raw, SystemLog.from_dict))

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

from portal.api_client import AdminApi, DashboardApi
from portal.config import PortalSettings
from portal.models import DashboardStats, SystemLog, User
from portal.webui.auth import AdminAuthConfig, public_admin_config


ROLE_FILTERS = ("all", "admin", "staff", "donor")


@dataclass
class ViewState:
    """Local state of one dashboard display; discarded on unmount."""

    search_query: str = ""
    filter_role: str = "all"
    loading: bool = True
    stats: Optional[DashboardStats] = None
    users: List[User] = field(default_factory=list)
    logs: List[SystemLog] = field(default_factory=list)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "search_query": self.search_query,
            "filter_role": self.filter_role,
            "loading": self.loading,
            "stats": self.stats.to_dict() if self.stats else None,
            "users": [u.to_dict() for u in self.users],
            "logs": [entry.to_dict() for entry in self.logs],
        }


@dataclass
class Toast:
    ts: float
    title: str
    description: str | None = None
    variant: str = "default"

    def to_dict(self) -> Dict[str, Any]:
        return {"ts": self.ts, "title": self.title, "description": self.description, "variant": self.variant}


class NotificationLog:
    """In-memory ring buffer for recent user-visible notifications."""

    def __init__(self, max_items: int = 100) -> None:
        self.max_items = max_items
        self.items: List[Toast] = []

    def add(self, title: str, description: str | None = None, variant: str = "default") -> Toast:
        toast = Toast(ts=time.time(), title=title, description=description, variant=variant)
        self.items.append(toast)
        if len(self.items) > self.max_items:
            self.items = self.items[-self.max_items :]
        return toast

    def snapshot(self) -> List[Dict[str, Any]]:
        return [t.to_dict() for t in reversed(self.items)]


@dataclass
class PortalRuntimeState:
    start_time: float
    settings: PortalSettings
    admin_config_public: Dict[str, Any]
    dashboard_api: DashboardApi
    admin_api: AdminApi
    notifications: NotificationLog = field(default_factory=NotificationLog)


def init_portal_state(
    config: AdminAuthConfig,
    settings: PortalSettings,
    dashboard_api: DashboardApi,
    admin_api: AdminApi,
) -> PortalRuntimeState:
    """Capture startup time, the API collaborators and a redacted auth snapshot."""
    return PortalRuntimeState(
        start_time=time.time(),
        settings=settings,
        admin_config_public=public_admin_config(config),
        dashboard_api=dashboard_api,
        admin_api=admin_api,
    )

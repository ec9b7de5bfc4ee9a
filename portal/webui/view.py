from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from portal.config import dlog
from portal.models import User
from portal.webui.state import ROLE_FILTERS, NotificationLog, Toast, ViewState


FETCH_ERROR_TITLE = "Error"
FETCH_ERROR_MESSAGE = "Failed to fetch dashboard data"


@dataclass(frozen=True)
class SummaryCard:
    title: str
    value: str
    caption: str
    tone: str

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "value": self.value, "caption": self.caption, "tone": self.tone}


class _Liveness:
    def __init__(self) -> None:
        self.alive = True


class AdminDashboardView:
    """Admin dashboard page: aggregate fetch on mount, then static rendering.

    `mount()` re-initialises view-state, flips it to loading and schedules the
    three backend reads. Results are committed only while the mount that
    started them is still live; `unmount()` revokes it.
    """

    def __init__(self, dashboard_api, admin_api, notifications: NotificationLog | None = None) -> None:
        self.dashboard_api = dashboard_api
        self.admin_api = admin_api
        self.notifications = notifications or NotificationLog()
        self.state = ViewState()
        self.toasts: List[Toast] = []
        self._liveness: Optional[_Liveness] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def mounted(self) -> bool:
        return self._liveness is not None and self._liveness.alive

    def mount(self) -> asyncio.Task:
        """Start a display and return the load task."""
        if self.mounted:
            raise RuntimeError("View is already mounted.")
        loop = asyncio.get_running_loop()
        self.state = ViewState(loading=True)
        self.toasts = []
        self._liveness = _Liveness()
        self._task = loop.create_task(self._load(self._liveness))
        return self._task

    def unmount(self) -> None:
        if self._liveness is not None:
            self._liveness.alive = False
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def _load(self, liveness: _Liveness) -> None:
        try:
            stats_resp, users_resp, logs_resp = await asyncio.gather(
                asyncio.to_thread(self.dashboard_api.get_stats),
                asyncio.to_thread(self.admin_api.get_all_users),
                asyncio.to_thread(self.admin_api.get_system_logs),
            )
            if not liveness.alive:
                return
            if stats_resp.success:
                self.state.stats = stats_resp.data
            if users_resp.success:
                self.state.users = list(users_resp.data.items)
            if logs_resp.success:
                self.state.logs = list(logs_resp.data.items)
        except Exception as e:
            dlog("dashboard_fetch_error", f"Error fetching data: {e}")
            if liveness.alive:
                self._notify(FETCH_ERROR_TITLE, FETCH_ERROR_MESSAGE, variant="destructive")
        finally:
            if liveness.alive:
                self.state.loading = False

    def _notify(self, title: str, description: str, variant: str = "default") -> None:
        self.toasts.append(self.notifications.add(title, description, variant))

    # ---------- local controls ----------
    def set_search_query(self, query: str) -> None:
        self.state.search_query = query

    def set_filter_role(self, role: str) -> None:
        if role not in ROLE_FILTERS:
            raise ValueError(f"Unknown role filter '{role}'. Expected one of: {', '.join(ROLE_FILTERS)}.")
        self.state.filter_role = role

    def visible_users(self) -> List[User]:
        # Search text and role filter are held in state only; rows are not filtered.
        return list(self.state.users)

    def summary_cards(self) -> List[SummaryCard]:
        return [
            SummaryCard("Total Users", str(len(self.state.users)), "Active accounts", "purple"),
            SummaryCard("System Health", "98%", "All systems operational", "green"),
            SummaryCard("Active Sessions", "24", "Current users online", "blue"),
            SummaryCard("System Load", "42%", "Optimal performance", "orange"),
        ]

    def snapshot(self) -> Dict[str, Any]:
        data = self.state.snapshot()
        data["summary_cards"] = [c.to_dict() for c in self.summary_cards()]
        data["notifications"] = [t.to_dict() for t in self.toasts]
        return data

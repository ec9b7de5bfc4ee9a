from __future__ import annotations

import time
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from portal.config import dlog
from portal.webui.auth import AdminAuthConfig, require_admin
from portal.webui.state import ROLE_FILTERS, PortalRuntimeState
from portal.webui.templates import TABS, render_dashboard
from portal.webui.view import AdminDashboardView


TAB_NAMES = tuple(name for name, _ in TABS)


def _validate_query(tab: str, role: Optional[str]) -> None:
    if tab not in TAB_NAMES:
        raise HTTPException(status_code=400, detail=f"Unknown tab '{tab}'. Expected one of: {', '.join(TAB_NAMES)}.")
    if role is not None and role not in ROLE_FILTERS:
        raise HTTPException(status_code=400, detail=f"Unknown role filter '{role}'. Expected one of: {', '.join(ROLE_FILTERS)}.")


def create_portal_router(config: AdminAuthConfig, state: PortalRuntimeState) -> APIRouter:
    """Create the /admin router with the HTML dashboard plus JSON helpers."""
    router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin(config))])

    def new_view() -> AdminDashboardView:
        return AdminDashboardView(state.dashboard_api, state.admin_api, notifications=state.notifications)

    async def load_view(view: AdminDashboardView, q: Optional[str], role: Optional[str]) -> None:
        await view.mount()
        if q is not None:
            view.set_search_query(q)
        if role is not None:
            view.set_filter_role(role)

    async def render_page(request: Request, tab: str, q: Optional[str], role: Optional[str]) -> HTMLResponse:
        _validate_query(tab, role)
        view = new_view()
        try:
            await load_view(view, q, role)
            response = render_dashboard(
                request,
                view,
                tab=tab,
                home_url=router.url_path_for("admin_home"),
                logout_url=router.url_path_for("admin_logout"),
            )
        finally:
            view.unmount()
        return response

    @router.get("/", response_class=HTMLResponse, include_in_schema=False)
    async def admin_index(request: Request, tab: str = "users", q: Optional[str] = None, role: Optional[str] = None) -> HTMLResponse:
        return await render_page(request, tab, q, role)

    @router.get("/dashboard", response_class=HTMLResponse, include_in_schema=False)
    async def admin_dashboard(request: Request, tab: str = "users", q: Optional[str] = None, role: Optional[str] = None) -> HTMLResponse:
        return await render_page(request, tab, q, role)

    @router.get("/api/dashboard")
    async def admin_dashboard_api(q: Optional[str] = None, role: Optional[str] = None) -> Dict[str, Any]:
        _validate_query("users", role)
        view = new_view()
        try:
            await load_view(view, q, role)
            snapshot = view.snapshot()
        finally:
            view.unmount()
        return {"status": "ok", **snapshot}

    @router.get("/api/notifications")
    async def admin_notifications():
        return {"status": "ok", "notifications": state.notifications.snapshot()}

    @router.get("/health")
    async def admin_health():
        return {
            "status": "ok",
            "uptime_seconds": int(time.time() - state.start_time),
            "backend_url": state.settings.backend_url,
            "config": state.admin_config_public,
        }

    @router.get("/logout", name="admin_logout")
    async def admin_logout() -> RedirectResponse:
        # No session is terminated here; the login screen owns that.
        dlog("admin_logout", state.settings.login_url)
        return RedirectResponse(url=state.settings.login_url, status_code=303)

    @router.get("/home", name="admin_home")
    async def admin_home() -> RedirectResponse:
        return RedirectResponse(url=state.settings.home_url, status_code=303)

    return router

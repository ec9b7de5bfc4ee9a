"""Jinja2 rendering for the admin dashboard (served at /admin)."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List
from urllib.parse import urlencode

from fastapi import Request
from fastapi.templating import Jinja2Templates

from portal.models import format_local_timestamp, role_color
from portal.webui.view import AdminDashboardView


TABS = (
    ("users", "User Management"),
    ("logs", "System Logs"),
    ("settings", "System Settings"),
    ("reports", "Reports"),
)

ROLE_FILTER_LABELS = (
    ("all", "All Roles"),
    ("admin", "Administrators"),
    ("staff", "Staff Members"),
    ("donor", "Donors"),
)

DASHBOARD_TEMPLATE = "dashboard.html"

templates = Jinja2Templates(directory=str(Path(__file__).parent / "html"))
templates.env.filters["local_timestamp"] = format_local_timestamp
templates.env.filters["role_color"] = role_color


def _tab_href(tab: str, view: AdminDashboardView) -> str:
    params = {"tab": tab}
    if view.state.search_query:
        params["q"] = view.state.search_query
    if view.state.filter_role != "all":
        params["role"] = view.state.filter_role
    return "?" + urlencode(params)


def dashboard_context(view: AdminDashboardView, *, tab: str, home_url: str, logout_url: str) -> Dict[str, Any]:
    tabs: List[Dict[str, Any]] = [
        {"name": name, "label": label, "href": _tab_href(name, view), "active": name == tab}
        for name, label in TABS
    ]
    return {
        "state": view.state,
        "users": view.visible_users(),
        "cards": view.summary_cards(),
        "toasts": list(view.toasts),
        "tabs": tabs,
        "active_tab": tab,
        "role_filters": ROLE_FILTER_LABELS,
        "home_url": home_url,
        "logout_url": logout_url,
    }


def render_dashboard(request: Request, view: AdminDashboardView, *, tab: str, home_url: str, logout_url: str):
    """Render the full admin page for a mounted view."""
    context = dashboard_context(view, tab=tab, home_url=home_url, logout_url=logout_url)
    return templates.TemplateResponse(request, DASHBOARD_TEMPLATE, context)

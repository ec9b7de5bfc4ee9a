import os
import json
import sys
from dataclasses import dataclass


# Debug flag: default off. Enable via CLI arg "--portal-debug" or env PORTAL_DEBUG=1.
DEBUG = "--portal-debug" in sys.argv or os.environ.get("PORTAL_DEBUG") == "1"


def dlog(label: str, data):
    if not DEBUG:
        return
    try:
        printable = data if isinstance(data, str) else json.dumps(data, indent=2, ensure_ascii=False, default=str)
    except Exception:
        printable = str(data)
    print(f"[portal-debug] {label}: {printable}")


DEFAULT_BACKEND_API_URL = "http://localhost:5000/api"
DEFAULT_BACKEND_TIMEOUT = 30.0


@dataclass(frozen=True)
class PortalSettings:
    backend_url: str
    backend_token: str | None
    backend_timeout: float
    home_url: str
    login_url: str


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise RuntimeError(f"{name} is set but is not a number: {raw!r}") from e


def load_portal_settings() -> PortalSettings:
    """Read backend and navigation settings from env."""
    settings = PortalSettings(
        backend_url=(os.environ.get("BACKEND_API_URL") or DEFAULT_BACKEND_API_URL).rstrip("/"),
        backend_token=os.environ.get("BACKEND_API_TOKEN") or None,
        backend_timeout=_float_env("BACKEND_TIMEOUT", DEFAULT_BACKEND_TIMEOUT),
        home_url=os.environ.get("HOME_URL") or "/",
        login_url=os.environ.get("LOGIN_URL") or "/login",
    )
    dlog(
        "portal_settings",
        {
            "backend_url": settings.backend_url,
            "has_backend_token": bool(settings.backend_token),
            "backend_timeout": settings.backend_timeout,
            "home_url": settings.home_url,
            "login_url": settings.login_url,
        },
    )
    return settings

from __future__ import annotations

import os
import hmac
from dataclasses import dataclass
from typing import Optional, Callable, Dict, Any

import bcrypt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from portal.config import dlog


security = HTTPBasic(auto_error=False)


@dataclass(frozen=True)
class AdminAuthConfig:
    username: str
    password_hash: Optional[str]
    password_plain: Optional[str]

    @property
    def enabled(self) -> bool:
        return bool(self.password_hash or self.password_plain)

    @property
    def auth_mode(self) -> str:
        if self.password_hash:
            return "hash"
        if self.password_plain:
            return "password"
        return "open"


def load_admin_auth_config() -> AdminAuthConfig:
    """Read admin auth settings from env. Without a password the page is open."""
    cfg = AdminAuthConfig(
        username=os.environ.get("ADMIN_USERNAME", "admin").strip() or "admin",
        password_hash=os.environ.get("ADMIN_PASSWORD_HASH") or None,
        password_plain=os.environ.get("ADMIN_PASSWORD") or None,
    )
    dlog(
        "admin_auth_config",
        {
            "enabled": cfg.enabled,
            "username": cfg.username,
            "auth_mode": cfg.auth_mode,
        },
    )
    return cfg


def _verify_username(expected: str, provided: str) -> bool:
    return hmac.compare_digest(expected or "", provided or "")


def _verify_password(config: AdminAuthConfig, provided: str) -> bool:
    if config.password_hash:
        try:
            return bcrypt.checkpw(provided.encode("utf-8"), config.password_hash.encode("utf-8"))
        except ValueError:
            return False
    if config.password_plain:
        return hmac.compare_digest(config.password_plain, provided or "")
    return False


def require_admin(config: AdminAuthConfig) -> Callable[..., Dict[str, Any]]:
    def dependency(credentials: Optional[HTTPBasicCredentials] = Depends(security)) -> Dict[str, Any]:
        if not config.enabled:
            return {"username": None, "auth_mode": config.auth_mode}

        if credentials is None or credentials.username is None or credentials.password is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authentication required",
                headers={"WWW-Authenticate": "Basic"},
            )

        if not _verify_username(config.username, credentials.username) or not _verify_password(config, credentials.password):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials",
                headers={"WWW-Authenticate": "Basic"},
            )

        return {"username": config.username, "auth_mode": config.auth_mode}

    return dependency


def public_admin_config(config: AdminAuthConfig) -> Dict[str, Any]:
    """Return a redacted view suitable for status endpoints."""
    return {
        "enabled": config.enabled,
        "username": config.username if config.enabled else None,
        "auth_mode": config.auth_mode,
        "has_password_hash": bool(config.password_hash),
        "has_password_plain": bool(config.password_plain),
    }

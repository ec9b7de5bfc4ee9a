from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar


T = TypeVar("T")

ROLE_COLORS = {
    "admin": "purple",
    "staff": "blue",
    "donor": "green",
}


def role_color(role: str) -> str:
    return ROLE_COLORS.get(role, "gray")


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _require(raw: Any, key: str, kind: str) -> Any:
    if not isinstance(raw, dict):
        raise ValueError(f"{kind} payload is not an object: {raw!r}")
    if key not in raw:
        raise ValueError(f"{kind} payload missing field '{key}'")
    return raw[key]


@dataclass
class User:
    id: str
    first_name: str
    last_name: str
    email: str
    role: str
    blood_type: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "User":
        return cls(
            id=str(_require(raw, "id", "User")),
            first_name=_text(_require(raw, "firstName", "User")),
            last_name=_text(_require(raw, "lastName", "User")),
            email=_text(_require(raw, "email", "User")),
            role=_text(_require(raw, "role", "User")),
            blood_type=_text(raw["bloodType"]) if raw.get("bloodType") is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "role": self.role,
            "bloodType": self.blood_type,
        }


@dataclass
class SystemLog:
    id: str
    type: str
    message: str
    user_id: str | None
    created_at: Any

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "SystemLog":
        user_id = raw.get("userId") if isinstance(raw, dict) else None
        return cls(
            id=str(_require(raw, "id", "SystemLog")),
            type=_text(_require(raw, "type", "SystemLog")),
            message=_text(_require(raw, "message", "SystemLog")),
            user_id=str(user_id) if user_id is not None else None,
            created_at=_require(raw, "createdAt", "SystemLog"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "message": self.message,
            "userId": self.user_id,
            "createdAt": self.created_at,
        }


@dataclass
class BloodInventoryItem:
    blood_type: str
    units: int


@dataclass
class DashboardStats:
    total_users: int = 0
    total_donors: int = 0
    total_staff: int = 0
    total_blood_requests: int = 0
    pending_blood_requests: int = 0
    total_donations: int = 0
    recent_donations: int = 0
    blood_inventory: List[BloodInventoryItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "DashboardStats":
        if not isinstance(raw, dict):
            raise ValueError(f"DashboardStats payload is not an object: {raw!r}")
        inventory = []
        for item in raw.get("bloodInventory") or []:
            inventory.append(
                BloodInventoryItem(
                    blood_type=_require(item, "bloodType", "BloodInventory"),
                    units=int(_require(item, "units", "BloodInventory") or 0),
                )
            )
        return cls(
            total_users=int(raw.get("totalUsers") or 0),
            total_donors=int(raw.get("totalDonors") or 0),
            total_staff=int(raw.get("totalStaff") or 0),
            total_blood_requests=int(raw.get("totalBloodRequests") or 0),
            pending_blood_requests=int(raw.get("pendingBloodRequests") or 0),
            total_donations=int(raw.get("totalDonations") or 0),
            recent_donations=int(raw.get("recentDonations") or 0),
            blood_inventory=inventory,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalUsers": self.total_users,
            "totalDonors": self.total_donors,
            "totalStaff": self.total_staff,
            "totalBloodRequests": self.total_blood_requests,
            "pendingBloodRequests": self.pending_blood_requests,
            "totalDonations": self.total_donations,
            "recentDonations": self.recent_donations,
            "bloodInventory": [
                {"bloodType": i.blood_type, "units": i.units} for i in self.blood_inventory
            ],
        }


@dataclass
class ItemsPage(Generic[T]):
    items: List[T] = field(default_factory=list)

    @classmethod
    def parse(cls, raw: Any, parse_item: Callable[[Dict[str, Any]], T]) -> "ItemsPage[T]":
        items = _require(raw, "items", "Page")
        if not isinstance(items, list):
            raise ValueError(f"Page field 'items' is not a list: {items!r}")
        return cls(items=[parse_item(i) for i in items])


@dataclass
class ApiResponse(Generic[T]):
    """Backend envelope: {success, data, message}."""

    success: bool
    data: Optional[T] = None
    message: str | None = None

    @classmethod
    def parse(cls, raw: Any, parse_data: Callable[[Any], T]) -> "ApiResponse[T]":
        if not isinstance(raw, dict) or "success" not in raw:
            raise ValueError(f"Malformed API response envelope: {str(raw)[:200]}")
        success = bool(raw.get("success"))
        # Failed envelopes may carry no usable payload.
        data = parse_data(raw.get("data")) if success else None
        return cls(success=success, data=data, message=raw.get("message"))


INVALID_DATE = "Invalid Date"


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None:
        # null reads as the epoch.
        value = 0
    if isinstance(value, (int, float)):
        # Numeric timestamps are epoch milliseconds.
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        if len(text) == 10:
            # Date-only forms are UTC midnight.
            return parsed.replace(tzinfo=timezone.utc)
        if parsed.tzinfo is None:
            parsed = parsed.astimezone()
        return parsed
    return None


def format_local_timestamp(value: Any) -> str:
    """Render a log timestamp in local time, e.g. '3/7/2024, 2:05:09 PM'."""
    parsed = _parse_timestamp(value)
    if parsed is None:
        return INVALID_DATE
    local = parsed.astimezone()
    hour = local.hour % 12 or 12
    suffix = "AM" if local.hour < 12 else "PM"
    return f"{local.month}/{local.day}/{local.year}, {hour}:{local.minute:02d}:{local.second:02d} {suffix}"

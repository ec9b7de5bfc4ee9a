import importlib
import sys

import bcrypt
from fastapi.testclient import TestClient


USERS = [
    {"id": "u1", "firstName": "Ada", "lastName": "Lovelace", "email": "ada@example.com", "role": "admin", "bloodType": "A+"},
    {"id": "u2", "firstName": "Grace", "lastName": "Hopper", "email": "grace@example.com", "role": "staff", "bloodType": "O-"},
    {"id": "u3", "firstName": "Alan", "lastName": "Turing", "email": "alan@example.com", "role": "donor", "bloodType": "B+"},
]


def _reload_app(monkeypatch, extra_env=None):
    keys_to_clear = [
        "ADMIN_USERNAME",
        "ADMIN_PASSWORD",
        "ADMIN_PASSWORD_HASH",
        "BACKEND_API_URL",
        "BACKEND_API_TOKEN",
        "BACKEND_TIMEOUT",
        "HOME_URL",
        "LOGIN_URL",
    ]
    for key in keys_to_clear:
        monkeypatch.delenv(key, raising=False)
    if extra_env:
        for k, v in extra_env.items():
            monkeypatch.setenv(k, str(v))

    for mod in list(sys.modules.keys()):
        if mod == "blood_admin_portal" or mod == "portal" or mod.startswith("portal."):
            sys.modules.pop(mod, None)

    import blood_admin_portal

    importlib.reload(blood_admin_portal)
    return blood_admin_portal.app


def _fake_backend(monkeypatch, users=None, logs=None, fail=False):
    import portal.api_client as api_client
    from portal.models import ApiResponse, DashboardStats, ItemsPage, SystemLog, User

    def get_stats(self):
        if fail:
            raise ValueError("Could not reach backend API")
        return ApiResponse(success=True, data=DashboardStats(total_users=10))

    def get_all_users(self):
        return ApiResponse(success=True, data=ItemsPage(items=[User.from_dict(u) for u in (users if users is not None else USERS)]))

    def get_system_logs(self):
        return ApiResponse(success=True, data=ItemsPage(items=[SystemLog.from_dict(entry) for entry in (logs or [])]))

    monkeypatch.setattr(api_client.DashboardApi, "get_stats", get_stats)
    monkeypatch.setattr(api_client.AdminApi, "get_all_users", get_all_users)
    monkeypatch.setattr(api_client.AdminApi, "get_system_logs", get_system_logs)


def test_dashboard_renders_loaded_data(monkeypatch):
    app = _reload_app(monkeypatch)
    _fake_backend(monkeypatch)
    client = TestClient(app)

    resp = client.get("/admin/dashboard")

    assert resp.status_code == 200
    html = resp.text
    assert html.count('data-user-id="') == 3
    assert html.count('data-log-id="') == 0
    assert "No log entries." in html
    assert '<div class="value tone-purple">3</div>' in html
    assert "Ada Lovelace" in html
    assert '<span class="badge purple">admin</span>' in html
    assert "98%" in html and "42%" in html
    assert "Failed to fetch dashboard data" not in html


def test_dashboard_index_defaults_to_users_tab(monkeypatch):
    app = _reload_app(monkeypatch)
    _fake_backend(monkeypatch)
    client = TestClient(app)

    html = client.get("/admin/").text

    assert '<section class="panel active" id="tab-users">' in html
    assert '<section class="panel" id="tab-logs">' in html


def test_dashboard_tab_selection(monkeypatch):
    app = _reload_app(monkeypatch)
    _fake_backend(monkeypatch)
    client = TestClient(app)

    html = client.get("/admin/dashboard", params={"tab": "settings"}).text

    assert '<section class="panel active" id="tab-settings">' in html
    assert "Reset All Passwords" in html
    assert "Export Audit Logs" in html


def test_search_and_role_keep_all_rows(monkeypatch):
    app = _reload_app(monkeypatch)
    _fake_backend(monkeypatch)
    client = TestClient(app)

    html = client.get("/admin/dashboard", params={"q": "Grace", "role": "donor"}).text

    assert html.count('data-user-id="') == 3
    assert 'value="Grace"' in html
    assert '<option value="donor" selected>Donors</option>' in html


def test_unknown_query_values_rejected(monkeypatch):
    app = _reload_app(monkeypatch)
    _fake_backend(monkeypatch)
    client = TestClient(app)

    assert client.get("/admin/dashboard", params={"tab": "billing"}).status_code == 400
    assert client.get("/admin/dashboard", params={"role": "root"}).status_code == 400


def test_fetch_failure_shows_error_toast(monkeypatch):
    app = _reload_app(monkeypatch)
    _fake_backend(monkeypatch, fail=True)
    client = TestClient(app)

    resp = client.get("/admin/dashboard")

    assert resp.status_code == 200
    assert resp.text.count("Failed to fetch dashboard data") == 1
    assert 'class="toast destructive"' in resp.text
    assert '<div class="value tone-purple">0</div>' in resp.text

    notes = client.get("/admin/api/notifications").json()["notifications"]
    assert len(notes) == 1
    assert notes[0]["title"] == "Error"


def test_dashboard_json_snapshot(monkeypatch):
    app = _reload_app(monkeypatch)
    _fake_backend(
        monkeypatch,
        logs=[{"id": "l1", "type": "login", "message": "Signed in", "userId": "u1", "createdAt": "2024-01-01T10:00:00"}],
    )
    client = TestClient(app)

    data = client.get("/admin/api/dashboard", params={"role": "staff"}).json()

    assert data["status"] == "ok"
    assert data["loading"] is False
    assert data["filter_role"] == "staff"
    assert len(data["users"]) == 3
    assert data["logs"][0]["message"] == "Signed in"
    assert data["stats"]["totalUsers"] == 10
    assert data["summary_cards"][0]["value"] == "3"
    assert data["notifications"] == []


def test_logout_and_home_redirect(monkeypatch):
    app = _reload_app(monkeypatch, {"LOGIN_URL": "/auth/login", "HOME_URL": "/welcome"})
    client = TestClient(app)

    resp = client.get("/admin/logout", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/auth/login"

    resp = client.get("/admin/home", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/welcome"


def test_health_reports_open_mode(monkeypatch):
    app = _reload_app(monkeypatch, {"BACKEND_API_URL": "http://backend.test/api/"})
    client = TestClient(app)

    data = client.get("/admin/health").json()

    assert data["status"] == "ok"
    assert data["backend_url"] == "http://backend.test/api"
    assert data["config"]["enabled"] is False
    assert data["config"]["auth_mode"] == "open"


def test_password_guard(monkeypatch):
    app = _reload_app(monkeypatch, {"ADMIN_PASSWORD": "secret"})
    _fake_backend(monkeypatch)
    client = TestClient(app)

    assert client.get("/admin/dashboard").status_code == 401
    assert client.get("/admin/dashboard", auth=("admin", "wrong")).status_code == 401
    assert client.get("/admin/dashboard", auth=("admin", "secret")).status_code == 200


def test_password_hash_guard(monkeypatch):
    hashed = bcrypt.hashpw(b"hunter2", bcrypt.gensalt()).decode()
    app = _reload_app(monkeypatch, {"ADMIN_PASSWORD_HASH": hashed, "ADMIN_USERNAME": "ops"})
    client = TestClient(app)

    assert client.get("/admin/health", auth=("admin", "hunter2")).status_code == 401
    resp = client.get("/admin/health", auth=("ops", "hunter2"))
    assert resp.status_code == 200
    assert resp.json()["config"]["auth_mode"] == "hash"


def test_numeric_backend_fields_render(monkeypatch):
    app = _reload_app(monkeypatch)
    _fake_backend(
        monkeypatch,
        users=[{"id": 7, "firstName": "Ada", "lastName": "Lovelace", "email": "ada@example.com", "role": "admin", "bloodType": 0}],
        logs=[{"id": 1, "type": 3, "message": "<b>x</b>", "userId": 1, "createdAt": 0}],
    )
    client = TestClient(app)

    resp = client.get("/admin/dashboard", params={"tab": "logs"})

    assert resp.status_code == 200
    assert '<tr data-log-id="1">' in resp.text
    assert "<td>3</td>" in resp.text
    assert "&lt;b&gt;x&lt;/b&gt;" in resp.text
    assert "<b>x</b>" not in resp.text

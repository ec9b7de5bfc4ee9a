from dotenv import load_dotenv
from fastapi import FastAPI

from portal.api_client import AdminApi, BackendApiClient, DashboardApi
from portal.config import dlog, load_portal_settings
from portal.webui.auth import load_admin_auth_config
from portal.webui.routes import create_portal_router
from portal.webui.state import init_portal_state


load_dotenv()
app = FastAPI(title="Blood Donation Admin Portal")

settings = load_portal_settings()
backend_client = BackendApiClient.from_settings(settings)

_admin_config = load_admin_auth_config()
if not _admin_config.enabled:
    dlog("admin_auth_open", "No ADMIN_PASSWORD_HASH or ADMIN_PASSWORD set; /admin is not password protected.")
_portal_state = init_portal_state(
    _admin_config,
    settings,
    dashboard_api=DashboardApi(backend_client),
    admin_api=AdminApi(backend_client),
)
app.include_router(create_portal_router(_admin_config, _portal_state))


if __name__ == "__main__":
    # Convenience for local runs: python blood_admin_portal.py --portal-debug
    import os

    import uvicorn

    host = os.environ.get("HOST", "127.0.0.1")
    port = int(os.environ.get("PORT", "18000"))
    uvicorn.run("blood_admin_portal:app", host=host, port=port, reload=False)

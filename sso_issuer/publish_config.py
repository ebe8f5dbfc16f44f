"""
GET /publish-config: download the app config (frontendPort, backendPort) merged
with the cached auth setting (initUrl, callbackHost) as config.json.
"""
import json
import logging
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from sso_issuer.auth_setting import AuthSettingRecord
from sso_issuer.errors import SERVER_ERROR, oauth_error
from sso_issuer.issuer import Issuer, get_issuer

logger = logging.getLogger(__name__)
router = APIRouter()

NOT_FOUND = "not_found"
_REQUIRED_PORTS = ("frontendPort", "backendPort")


class PublishConfigError(Exception):
    def __init__(self, status_code: int, error: str, description: str):
        super().__init__(description)
        self.status_code = status_code
        self.error = error
        self.description = description


def build_config(app_config_path: str, auth_setting: AuthSettingRecord | None) -> dict:
    """
    Read the app config JSON and merge the auth setting into it.
    Raises PublishConfigError: 404 when the file or the auth setting is missing,
    500 when the file is unreadable or lacks a port.
    """
    p = Path(app_config_path)
    if not p.is_file():
        raise PublishConfigError(404, NOT_FOUND, f"config.json not found at: {app_config_path}")
    try:
        app_config = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        raise PublishConfigError(500, SERVER_ERROR, "Failed to parse config.json")
    if not isinstance(app_config, dict):
        raise PublishConfigError(500, SERVER_ERROR, "config.json must contain a JSON object")
    for key in _REQUIRED_PORTS:
        if not app_config.get(key):
            raise PublishConfigError(500, SERVER_ERROR, f"{key} is missing in config.json")
    if auth_setting is None or not auth_setting.init_url or not auth_setting.callback_host:
        raise PublishConfigError(404, NOT_FOUND, "Missing initUrl or callbackHost")
    app_config["initUrl"] = auth_setting.init_url
    app_config["callbackHost"] = auth_setting.callback_host
    return app_config


@router.get("/publish-config")
def download_config(issuer: Issuer = Depends(get_issuer)):
    """Return config.json as an attachment."""
    try:
        config = build_config(issuer.settings.app_config_path, issuer.auth_settings.get())
    except PublishConfigError as e:
        logger.warning("publish-config failed: %s", e.description)
        raise HTTPException(status_code=e.status_code, detail=oauth_error(e.error, e.description))
    body = json.dumps(config, indent=2).encode("utf-8")
    return Response(
        content=body,
        media_type="application/octet-stream",
        headers={"Content-Disposition": 'attachment; filename="config.json"'},
    )

"""
Auth setting endpoints (POST/GET /auth-setting).
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from sso_issuer.auth_setting import is_http_url
from sso_issuer.errors import INVALID_REQUEST, oauth_error
from sso_issuer.issuer import Issuer, get_issuer

logger = logging.getLogger(__name__)
router = APIRouter()


class AuthSettingRequest(BaseModel):
    initUrl: str | None = None
    callbackHost: str | None = None


@router.post("/auth-setting")
def save_auth_setting(body: AuthSettingRequest, issuer: Issuer = Depends(get_issuer)):
    """Store initUrl and callbackHost; both must be absolute http(s) URLs (localhost allowed)."""
    for name, value in (("initUrl", body.initUrl), ("callbackHost", body.callbackHost)):
        if not is_http_url(value):
            raise HTTPException(
                status_code=400,
                detail=oauth_error(INVALID_REQUEST, f"{name} must be an absolute http(s) URL"),
            )
    issuer.auth_settings.save(body.initUrl, body.callbackHost)
    logger.info("Auth setting stored")
    return {"message": "Auth settings stored successfully"}


@router.get("/auth-setting")
def get_auth_setting(issuer: Issuer = Depends(get_issuer)):
    record = issuer.auth_settings.get()
    if record is None:
        return {"message": "No auth setting found or it has expired"}
    return {"message": "Auth setting retrieved from cache", "authSetting": record.to_dict()}

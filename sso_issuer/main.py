"""
SSO issuer (OIDC provider): client registration, /authorize, /token, auth setting,
publish-config and well-known endpoints. Port 9000 by default.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from sso_issuer.auth_setting_endpoint import router as auth_setting_router
from sso_issuer.authorize import router as authorize_router
from sso_issuer.client_endpoint import router as client_router
from sso_issuer.config import PORT, IssuerSettings
from sso_issuer.errors import SERVER_ERROR, IssuerError, oauth_error
from sso_issuer.issuer import Issuer, build_issuer
from sso_issuer.publish_config import router as publish_config_router
from sso_issuer.token_endpoint import router as token_router
from sso_issuer.well_known import router as well_known_router

logger = logging.getLogger(__name__)


def create_app(settings: IssuerSettings | None = None, issuer: Issuer | None = None) -> FastAPI:
    """
    Build the app. The issuer is created at startup from settings (key file,
    cache backend) unless one is passed in; the expiry sweeper runs for the
    lifetime of the app.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        current = issuer or build_issuer(settings or IssuerSettings())
        app.state.issuer = current
        current.start()
        try:
            yield
        finally:
            current.stop()

    app = FastAPI(title="SSO Issuer", version="1.0.0", lifespan=lifespan)
    app.include_router(client_router, tags=["client"])
    app.include_router(authorize_router, tags=["authorize"])
    app.include_router(token_router, tags=["token"])
    app.include_router(auth_setting_router, tags=["auth-setting"])
    app.include_router(publish_config_router, tags=["publish-config"])
    app.include_router(well_known_router, tags=["well-known"])

    @app.exception_handler(IssuerError)
    async def issuer_error_handler(request: Request, exc: IssuerError):
        logger.exception("Issuer fault on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": oauth_error(SERVER_ERROR)})

    @app.exception_handler(SQLAlchemyError)
    async def cache_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Cache backend failure on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": oauth_error(SERVER_ERROR)})

    @app.get("/health")
    def health():
        """Health check endpoint."""
        return {"status": "ok", "service": "sso_issuer"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "sso_issuer.main:app",
        host="127.0.0.1",
        port=PORT,
        reload=True,
    )

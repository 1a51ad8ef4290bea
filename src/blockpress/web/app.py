"""
HTTP surface: image proxy, editor upload endpoint and public object serving.

Endpoints:
- GET  {proxy_path}?namespace=&path=   -> proxied private object (session required)
- POST /api/media?tier=&filename=      -> ingest raw request body, return embeddable URL
- GET  /storage/{namespace}/{path}     -> public-namespace objects (local backend only)

Usage:
    blockpress serve
"""
import logging
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from blockpress.config import Settings
from blockpress.core import media, proxy
from blockpress.core.errors import AccessDenied, BlockpressError, ObjectNotFound, StorageError
from blockpress.core.ports import Identities, Storage
from blockpress.core.models import AccessTier


logger = logging.getLogger(__name__)


def create_app(settings: Settings, storage: Storage, identities: Identities) -> FastAPI:
    """Build the app around explicit collaborators so tests can pass fakes."""
    app = FastAPI(title=settings.app_name, version="0.1.0")

    def session_token(request: Request) -> Optional[str]:
        """Token from the session cookie, else from an Authorization: Bearer header."""
        token = request.cookies.get(settings.session_cookie)
        if token:
            return token
        scheme, _, value = request.headers.get("authorization", "").partition(" ")
        if scheme.lower() != "bearer":
            return None
        return value.strip() or None

    @app.exception_handler(BlockpressError)
    async def blockpress_error(request: Request, exc: BlockpressError):
        return PlainTextResponse(str(exc), status_code=exc.status_code)

    @app.get(settings.proxy_path)
    def storage_proxy(
        namespace: Optional[str] = Query(default=None),
        path: Optional[str] = Query(default=None),
        token: Optional[str] = Depends(session_token),
    ):
        try:
            obj = proxy.resolve(namespace, path, token, identities, storage, settings.proxy_cache_max_age)
        except BlockpressError:
            raise
        except Exception:
            logger.exception("Proxy system error for %s/%s", namespace, path)
            return PlainTextResponse("Internal Server Error", status_code=500)
        return Response(
            content=obj.content,
            media_type=obj.content_type,
            headers={"Cache-Control": obj.cache_control},
        )

    @app.post("/api/media")
    async def upload_media(
        request: Request,
        tier: str = Query(default=AccessTier.free.value),
        filename: str = Query(default="upload"),
        token: Optional[str] = Depends(session_token),
    ):
        identity = identities.authenticate(token)
        reference = media.ingest(await request.body(), filename, identity, tier, storage, settings)
        return JSONResponse({
            "success": 1,
            "file": {"url": reference.url},
            "url": reference.url,
            "namespace": reference.namespace,
            "path": reference.path,
        })

    @app.get("/storage/{namespace}/{path:path}")
    def public_object(namespace: str, path: str):
        try:
            obj = storage.read_public(namespace, path)
        except (ObjectNotFound, AccessDenied):
            return PlainTextResponse("Not Found", status_code=404)
        except StorageError:
            logger.exception("Public read failed for %s/%s", namespace, path)
            return PlainTextResponse("Internal Server Error", status_code=500)
        return Response(content=obj.content, media_type=obj.content_type or "application/octet-stream")

    return app

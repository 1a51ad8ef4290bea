"""Media ingestion: place an upload in its tier's namespace and return the URL to embed"""

import logging
import mimetypes
import time
from pathlib import PurePosixPath
from typing import Optional, Union
from urllib.parse import parse_qs, urlencode, urlsplit
from uuid import uuid4

from blockpress.config import Settings
from blockpress.core.errors import BadRequest, StorageError, Unauthorized, UploadFailed, UploadTooLarge
from blockpress.core.models import AccessTier, Identity, MediaReference, UrlStrategy
from blockpress.core.ports import Storage
from blockpress.core.tiers import parse_tier, resolve_strategy


logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def _extension(filename: str) -> str:
    suffix = PurePosixPath(filename.replace("\\", "/")).suffix.lower()
    return suffix if suffix[1:].isalnum() else ""


def object_path(author_id: str, filename: str) -> str:
    """Return '<author>/<epoch-ms>-<random><ext>'; unique even for same-millisecond uploads."""
    token = f"{time.time_ns() // 1_000_000}-{uuid4().hex[:12]}"
    return f"{author_id}/{token}{_extension(filename)}"


def build_proxy_url(proxy_path: str, namespace: str, path: str) -> str:
    """Encode a proxy reference as a query on the proxy endpoint."""
    return f"{proxy_path}?{urlencode({'namespace': namespace, 'path': path})}"


def parse_proxy_url(url: str, proxy_path: str) -> Optional[tuple[str, str]]:
    """Return (namespace, path) if url points at the proxy endpoint, else None."""
    parts = urlsplit(url)
    if parts.path != proxy_path:
        return None
    query = parse_qs(parts.query)
    namespace, path = query.get("namespace", [""])[0], query.get("path", [""])[0]
    if not namespace or not path:
        return None
    return namespace, path


def ingest(
    data: bytes,
    filename: str,
    identity: Optional[Identity],
    tier: Union[AccessTier, str],
    storage: Storage,
    settings: Settings,
    ) -> MediaReference:
    """Write an upload into the namespace for tier and return the reference to embed.

    Free uploads get the backend's permanent public URL; paid uploads get a proxy
    URL carrying (namespace, path), never a signed or expiring one.
    Checks run in a fixed order: identity (Unauthorized), tier (InvalidDocument),
    then the payload; all of them before any storage I/O.
    """
    if identity is None:
        raise Unauthorized("Sign in to upload images")
    tier = parse_tier(tier)
    if not data:
        raise BadRequest("Empty upload")
    if len(data) > settings.max_upload_bytes:
        raise UploadTooLarge(len(data), settings.max_upload_bytes)

    placement = resolve_strategy(tier, settings)
    path = object_path(identity.user_id, filename)
    content_type = mimetypes.guess_type(filename)[0] or DEFAULT_CONTENT_TYPE

    try:
        storage.upload(placement.namespace, path, data, content_type)
    except StorageError as e:
        logger.error("Upload to %s/%s failed: %s", placement.namespace, path, e)
        raise UploadFailed(str(e)) from e
    logger.info("Stored %d bytes at %s/%s", len(data), placement.namespace, path)

    if placement.strategy == UrlStrategy.proxy:
        url = build_proxy_url(settings.proxy_path, placement.namespace, path)
    else:
        url = storage.get_public_url(placement.namespace, path)
    return MediaReference(url=url, namespace=placement.namespace, path=path, tier=tier)

"""Reference resolution: fetch a proxied object on behalf of the current session.

Nothing time-limited is ever embedded in a document. Each fetch re-authorises
the live session and lets the storage backend's own policy decide read access,
so proxy URLs stay valid for the lifetime of the post.
"""

import logging
import mimetypes
from typing import Optional

from blockpress.core.errors import AccessDenied, BadRequest, Forbidden, NotFound, ObjectNotFound, Unauthorized
from blockpress.core.models import ResolvedObject
from blockpress.core.ports import Identities, Storage


logger = logging.getLogger(__name__)

FALLBACK_CONTENT_TYPE = "image/png"


def cache_control(max_age: int) -> str:
    return f"private, max-age={max_age}"


def resolve(
    namespace: Optional[str],
    path: Optional[str],
    token: Optional[str],
    identities: Identities,
    storage: Storage,
    max_age: int = 3600,
    ) -> ResolvedObject:
    """Resolve (namespace, path) for the session identified by token.

    Raises BadRequest, Unauthorized, NotFound or Forbidden; any other backend
    failure propagates unchanged for the caller to report as a server error.
    """
    if not namespace or not path:
        raise BadRequest("Missing namespace or path")

    identity = identities.authenticate(token)
    if identity is None:
        raise Unauthorized("Please log in to view this image")

    try:
        obj = storage.download(namespace, path, identity)
    except ObjectNotFound:
        logger.warning("Proxy miss: %s/%s", namespace, path)
        raise NotFound("Image not found") from None
    except AccessDenied:
        logger.warning("Proxy denied %s for %s/%s", identity.user_id, namespace, path)
        raise Forbidden("Image not found") from None

    content_type = obj.content_type or mimetypes.guess_type(path)[0] or FALLBACK_CONTENT_TYPE
    return ResolvedObject(content=obj.content, content_type=content_type, cache_control=cache_control(max_age))

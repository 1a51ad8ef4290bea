"""Error taxonomy for ingestion, resolution, validation and rendering"""


class BlockpressError(Exception):
    """Base exception for all user-actionable blockpress conditions."""
    status_code = 500


class Unauthorized(BlockpressError):
    """No session, or the session token is invalid or expired."""
    status_code = 401


class BadRequest(BlockpressError):
    status_code = 400


class NotFound(BlockpressError):
    status_code = 404


class Forbidden(BlockpressError):
    # the proxy answers 404 so that denied objects are indistinguishable from missing ones
    status_code = 404


class UploadFailed(BlockpressError):
    """The storage backend rejected a write; diagnostic is the backend's message."""
    status_code = 502

    def __init__(self, diagnostic: str):
        super().__init__(f"Upload failed: {diagnostic}")
        self.diagnostic = diagnostic


class UploadTooLarge(BlockpressError):
    status_code = 413

    def __init__(self, size: int, limit: int):
        super().__init__(f"File too large: {size} bytes (limit {limit})")
        self.size = size
        self.limit = limit


class InvalidDocument(BlockpressError):
    """A post failed save-time validation."""
    status_code = 422


class UnknownBlockType(BlockpressError):
    """Renderer-local: the block's type tag is not recognised."""

    def __init__(self, block_type: str):
        super().__init__(f"Unknown block type: {block_type!r}")
        self.block_type = block_type


class MalformedBlock(BlockpressError):
    """Renderer-local: a known block type whose data does not match its shape."""


# --- storage backend errors ---

class StorageError(Exception):
    """Raised by Storage implementations; carries the backend diagnostic."""


class ObjectNotFound(StorageError):
    pass


class AccessDenied(StorageError):
    pass

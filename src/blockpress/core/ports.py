"""Collaborator interfaces passed into ingestion and resolution.

Kept small and framework-agnostic so tests can supply simple fakes.
"""

from typing import Optional, Protocol

from blockpress.core.models import Identity, StoredObject


class Storage(Protocol):
    """Binary object store partitioned into namespaces.

    Implementations enforce their own read policy in `download` and raise
    ObjectNotFound / AccessDenied / StorageError from blockpress.core.errors.
    """

    def upload(self, namespace: str, path: str, data: bytes, content_type: str) -> None: ...

    def download(self, namespace: str, path: str, identity: Identity) -> StoredObject: ...

    def read_public(self, namespace: str, path: str) -> StoredObject:
        """Anonymous read; raises AccessDenied for namespaces that are not public."""
        ...

    def get_public_url(self, namespace: str, path: str) -> str: ...


class Identities(Protocol):
    """Resolves a request-scoped session token to the caller, or None when invalid."""

    def authenticate(self, token: Optional[str]) -> Optional[Identity]: ...

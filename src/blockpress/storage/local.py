"""Filesystem storage backend with per-namespace read policy"""

import json
from pathlib import Path, PurePosixPath
from urllib.parse import quote

from blockpress.core.errors import AccessDenied, ObjectNotFound, StorageError
from blockpress.core.models import AccessTier, Identity, StoredObject


META_SUFFIX = ".meta.json"
PART_SUFFIX = ".part"


class LocalStorage:
    """Objects live at root/<namespace>/<path>, content type in a sidecar <path>.meta.json.

    Public namespaces are readable by anyone. Private namespaces are readable by
    the owner (first path segment) or by a reader on the paid plan.
    """

    def __init__(self, root: Path, public_base_url: str, public_namespaces: set[str]):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")
        self.public_namespaces = set(public_namespaces)

    def _locate(self, namespace: str, path: str) -> Path:
        """Map (namespace, path) to a file under root; traversal outside root is denied."""
        parts = PurePosixPath(path).parts
        if (
            not namespace or "/" in namespace or namespace in (".", "..")
            or not parts or PurePosixPath(path).is_absolute() or ".." in parts
            or path.endswith((META_SUFFIX, PART_SUFFIX))
        ):
            raise AccessDenied(f"Invalid object location: {namespace}/{path}")
        return self.root / namespace / Path(*parts)

    def can_read(self, namespace: str, path: str, identity: Identity) -> bool:
        if namespace in self.public_namespaces:
            return True
        owner = PurePosixPath(path).parts[0]
        return owner == identity.user_id or identity.plan == AccessTier.paid

    def upload(self, namespace: str, path: str, data: bytes, content_type: str) -> None:
        target = self._locate(namespace, path)
        if target.exists():
            raise StorageError(f"Object already exists: {namespace}/{path}")
        meta_file = target.with_name(target.name + META_SUFFIX)
        part_file = target.with_name(target.name + PART_SUFFIX)
        # the object only appears under its own name once bytes and sidecar are both on disk
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            part_file.write_bytes(data)
            meta_file.write_text(json.dumps({"content_type": content_type}), encoding="utf-8")
            part_file.replace(target)
        except OSError as e:
            for leftover in (part_file, meta_file):
                leftover.unlink(missing_ok=True)
            raise StorageError(str(e)) from e

    def download(self, namespace: str, path: str, identity: Identity) -> StoredObject:
        target = self._locate(namespace, path)
        if not self.can_read(namespace, path, identity):
            raise AccessDenied(f"{identity.user_id} may not read {namespace}/{path}")
        return self._read(target, namespace, path)

    def read_public(self, namespace: str, path: str) -> StoredObject:
        """Anonymous read, only for public namespaces."""
        target = self._locate(namespace, path)
        if namespace not in self.public_namespaces:
            raise AccessDenied(f"{namespace} is not public")
        return self._read(target, namespace, path)

    def _read(self, target: Path, namespace: str, path: str) -> StoredObject:
        if not target.is_file():
            raise ObjectNotFound(f"No object at {namespace}/{path}")
        try:
            content = target.read_bytes()
            meta_file = target.with_name(target.name + META_SUFFIX)
            meta = json.loads(meta_file.read_text(encoding="utf-8")) if meta_file.exists() else {}
        except (OSError, ValueError) as e:
            raise StorageError(str(e)) from e
        return StoredObject(content=content, content_type=meta.get("content_type"))

    def get_public_url(self, namespace: str, path: str) -> str:
        return f"{self.public_base_url}/{quote(namespace)}/{quote(path)}"


def from_settings(settings) -> LocalStorage:
    return LocalStorage(
        root=Path(settings.storage_dir),
        public_base_url=settings.public_base_url,
        public_namespaces={settings.public_namespace},
    )

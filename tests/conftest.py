"""Root test configuration: runtime artifact cleanup and shared collaborators"""

import shutil
from pathlib import Path

import pytest

from blockpress.config import Settings
from blockpress.core.models import AccessTier, Identity
from blockpress.storage.local import LocalStorage


_PROJECT_ROOT = Path(__file__).parent.parent

_CLEANUP_FILES = ["blockpress.db", "test.db"]
_CLEANUP_DIRS = [".blockpress"]

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture(scope="session", autouse=True)
def cleanup_artifacts():
    """Remove DB files and storage directories created during the test session."""
    yield
    for name in _CLEANUP_FILES:
        p = _PROJECT_ROOT / name
        if p.exists():
            p.unlink()
    for name in _CLEANUP_DIRS:
        p = _PROJECT_ROOT / name
        if p.exists():
            shutil.rmtree(p)


class FakeIdentities:
    """Identities double: a fixed token -> Identity table."""

    def __init__(self, sessions: dict):
        self.sessions = sessions
        self.calls = 0

    def authenticate(self, token):
        self.calls += 1
        return self.sessions.get(token) if token else None


@pytest.fixture(name="png")
def png_fixture():
    return PNG_BYTES


@pytest.fixture(name="settings")
def settings_fixture(tmp_path):
    return Settings(storage_dir=str(tmp_path / "storage"), public_base_url="https://cdn.test/storage")


@pytest.fixture(name="storage")
def storage_fixture(settings):
    return LocalStorage(
        root=Path(settings.storage_dir),
        public_base_url=settings.public_base_url,
        public_namespaces={settings.public_namespace},
    )


@pytest.fixture(name="identities")
def identities_fixture():
    return FakeIdentities({
        "alice-token": Identity(user_id="alice", plan=AccessTier.free),
        "bob-token":   Identity(user_id="bob", plan=AccessTier.free),
        "carol-token": Identity(user_id="carol", plan=AccessTier.paid),
    })

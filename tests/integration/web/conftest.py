"""Fixtures for HTTP tests: the app wired to local storage and fake sessions"""

import pytest
from fastapi.testclient import TestClient

from blockpress.web.app import create_app


@pytest.fixture(name="client")
def client_fixture(settings, storage, identities):
    return TestClient(create_app(settings, storage, identities))

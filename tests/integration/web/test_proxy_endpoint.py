"""Integration tests for the image proxy, upload and public object endpoints"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from blockpress.core.media import parse_proxy_url
from blockpress.core.models import StoredObject
from blockpress.web.app import create_app


PROXY = "/api/storage/proxy"


def _upload(client, png, tier, token="alice-token", filename="heron.png"):
    return client.post(
        "/api/media",
        params={"tier": tier, "filename": filename},
        content=png,
        headers={"Authorization": f"Bearer {token}"},
    )


@pytest.fixture(name="paid_url")
def paid_url_fixture(client, png):
    response = _upload(client, png, "paid")
    assert response.status_code == 200, response.text
    return response.json()["url"]


def test_upload_paid_returns_proxy_url(client, png):
    """Paid uploads are embedded by proxy reference, in the editor's response shape."""
    body = _upload(client, png, "paid").json()
    assert body["success"] == 1
    assert body["file"]["url"] == body["url"]
    assert body["namespace"] == "blog-images-paid"
    assert body["path"].startswith("alice/") and body["path"].endswith(".png")
    assert parse_proxy_url(body["url"], PROXY) == ("blog-images-paid", body["path"])


def test_upload_free_returns_public_url(client, png):
    body = _upload(client, png, "free").json()
    assert body["namespace"] == "blog-images"
    assert body["url"] == f"https://cdn.test/storage/blog-images/{body['path']}"


@pytest.mark.parametrize("token,params,content,status", [
    (None, {"tier": "paid"}, b"x", 401),
    (None, {"tier": "gold"}, b"x", 401),
    ("stolen", {"tier": "gold"}, b"", 401),
    ("alice-token", {"tier": "gold"}, b"x", 422),
    ("alice-token", {"tier": "free"}, b"", 400),
])
def test_upload_errors(client, token, params, content, status):
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    response = client.post("/api/media", params=params, content=content, headers=headers)
    assert response.status_code == status


def test_upload_too_large(settings, storage, identities):
    client = TestClient(create_app(settings.model_copy(update={"max_upload_bytes": 4}), storage, identities))
    response = client.post("/api/media", params={"tier": "free"}, content=b"12345",
                           headers={"Authorization": "Bearer alice-token"})
    assert response.status_code == 413


def test_proxy_returns_bytes_with_private_cache(client, paid_url, png):
    """The owner fetches their paid image with a private, one-hour cache header."""
    response = client.get(paid_url, headers={"Authorization": "Bearer alice-token"})
    assert response.status_code == 200
    assert response.content == png
    assert response.headers["content-type"] == "image/png"
    assert response.headers["cache-control"] == "private, max-age=3600"


def test_proxy_accepts_session_cookie(client, paid_url, png):
    client.cookies.set("access_token", "carol-token")
    response = client.get(paid_url)
    assert response.status_code == 200
    assert response.content == png


@pytest.mark.parametrize("query", [{}, {"namespace": "blog-images-paid"}, {"path": "alice/a.png"}])
def test_proxy_missing_params_is_400(client, query, identities):
    """Parameters are checked before any session lookup."""
    response = client.get(PROXY, params=query, headers={"Authorization": "Bearer alice-token"})
    assert response.status_code == 400
    assert identities.calls == 0


def test_proxy_without_session_is_401(client, paid_url):
    response = client.get(paid_url)
    assert response.status_code == 401
    assert response.text == "Please log in to view this image"


def test_proxy_unknown_token_is_401(client, paid_url):
    assert client.get(paid_url, headers={"Authorization": "Bearer stolen"}).status_code == 401


def test_proxy_missing_object_is_404(client):
    response = client.get(PROXY, params={"namespace": "blog-images-paid", "path": "alice/none.png"},
                          headers={"Authorization": "Bearer alice-token"})
    assert response.status_code == 404
    assert response.text == "Image not found"


def test_proxy_denied_read_looks_like_404(client, paid_url):
    """A free reader who is not the owner gets the same answer as for a missing object."""
    response = client.get(paid_url, headers={"Authorization": "Bearer bob-token"})
    assert response.status_code == 404
    assert response.text == "Image not found"


def test_proxy_backend_failure_is_500(settings, identities):
    storage = MagicMock()
    storage.download.side_effect = RuntimeError("disk on fire")
    client = TestClient(create_app(settings, storage, identities))
    response = client.get(PROXY, params={"namespace": "blog-images-paid", "path": "alice/a.png"},
                          headers={"Authorization": "Bearer alice-token"})
    assert response.status_code == 500
    assert response.text == "Internal Server Error"


def test_proxy_cache_max_age_is_configurable(settings, storage, identities, png):
    client = TestClient(create_app(settings.model_copy(update={"proxy_cache_max_age": 60}), storage, identities))
    url = _upload(client, png, "paid").json()["url"]
    response = client.get(url, headers={"Authorization": "Bearer alice-token"})
    assert response.headers["cache-control"] == "private, max-age=60"


def test_public_objects_served_without_session(client, png):
    body = _upload(client, png, "free").json()
    response = client.get(f"/storage/blog-images/{body['path']}")
    assert response.status_code == 200
    assert response.content == png


def test_private_objects_not_served_publicly(client, png):
    body = _upload(client, png, "paid").json()
    assert client.get(f"/storage/blog-images-paid/{body['path']}").status_code == 404


def test_public_route_uses_storage_port(settings, identities):
    """Any Storage implementation serves public objects through read_public."""
    storage = MagicMock()
    storage.read_public.return_value = StoredObject(content=b"gif", content_type="image/gif")
    client = TestClient(create_app(settings, storage, identities))
    response = client.get("/storage/blog-images/alice/a.gif")
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/gif"
    storage.read_public.assert_called_once_with("blog-images", "alice/a.gif")

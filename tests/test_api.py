"""Tests for API functionality."""

import tempfile
from pathlib import Path

import pytest

try:
    from fastapi.testclient import TestClient

    from memolinks.api.app import create_app, generate_token
    FASTAPI_AVAILABLE = True
except ImportError:
    FASTAPI_AVAILABLE = False
    TestClient = None  # type: ignore

from memolinks.runtime import build_runtime

pytestmark = pytest.mark.skipif(not FASTAPI_AVAILABLE, reason="fastapi not installed")


@pytest.fixture
def runtime():
    """Create a runtime over a small test workspace."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "note.md").write_text("# Note\n\n## Part\n\nbody ![[other]]\n\n## Part\n")
        (root / "other.md").write_text("Other [[note#Part]]\n")
        (root / "pic.png").write_bytes(b"")

        yield build_runtime(root=root)


def test_health_endpoint(runtime):
    """Test /health endpoint."""
    client = TestClient(create_app(runtime, token=None))

    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "files": 3}


def test_token_required(runtime):
    """Endpoints reject requests without the configured token."""
    token = generate_token()
    client = TestClient(create_app(runtime, token=token))

    assert client.get("/health").status_code == 401
    bad = client.get("/health", headers={"Authorization": "Bearer wrong"})
    assert bad.status_code == 401
    ok = client.get("/health", headers={"Authorization": f"Bearer {token}"})
    assert ok.status_code == 200


def test_resolve(runtime):
    client = TestClient(create_app(runtime))

    data = client.get("/resolve", params={"ref": "note"}).json()
    assert data["status"] == "found"
    assert data["relative"] == "note.md"
    assert data["kind"] == "markdown"

    data = client.get("/resolve", params={"ref": "pic.png", "scope": "image"}).json()
    assert data["relative"] == "pic.png"

    assert client.get("/resolve", params={"ref": "missing"}).json()["status"] == "not_found"
    data = client.get("/resolve", params={"ref": "f.xyz"}).json()
    assert data == {"identifier": "f.xyz", "status": "unknown_extension", "extension": ".xyz"}


def test_resolve_errors(runtime):
    client = TestClient(create_app(runtime))
    assert client.get("/resolve", params={"ref": "#x"}).status_code == 400
    assert client.get("/resolve", params={"ref": "a", "scope": "video"}).status_code == 400


def test_section_and_anchor(runtime):
    client = TestClient(create_app(runtime))

    data = client.get("/section", params={"ref": "note", "name": "Part"}).json()
    assert data["start_line"] == 2
    assert data["end_line"] == 6
    assert data["text"].startswith("## Part")

    assert client.get("/section", params={"ref": "note", "name": "Nope"}).status_code == 404
    assert client.get("/section", params={"ref": "gone", "name": "Part"}).status_code == 404

    data = client.get("/anchor", params={"ref": "note", "name": "Part", "occurrence": 2}).json()
    assert data == {"anchor": "part-1"}

    data = client.get("/anchor", params={"ref": "note", "name": "Part", "occurrence": 1}).json()
    assert data == {"anchor": "part"}
    data = client.get("/anchor", params={"ref": "note", "name": "Part"}).json()
    assert data == {"anchor": "part-1"}


def test_render(runtime):
    client = TestClient(create_app(runtime))

    data = client.get("/render", params={"ref": "note"}).json()
    kinds = [p["kind"] for p in data["parts"]]
    assert kinds == ["text", "embed", "text"]
    embedded = data["parts"][1]["content"]
    assert embedded[1]["kind"] == "link"
    assert embedded[1]["anchor"] == "part-1"

    html = client.get("/render", params={"ref": "note", "format": "html"}).json()["html"]
    assert '<h2 id="part-1">Part</h2>' in html


def test_fragment(runtime):
    client = TestClient(create_app(runtime))

    data = client.get("/fragment", params={"raw": "![[pic.png|Alt]]"}).json()
    assert data["kind"] == "image"
    assert data["alt"] == "Alt"
    assert client.get("/fragment", params={"raw": "[[#x]]"}).status_code == 400


def test_locate(runtime):
    client = TestClient(create_app(runtime))

    data = client.get("/locate", params={"ref": "note#Part"}).json()
    assert data["lines"] == {"start": 3, "end": 6}
    assert data["anchor"] == "part-1"

    data = client.get("/locate", params={"ref": "brand new"}).json()
    assert data["exists"] is False
    assert data["path"].endswith("brand new.md")

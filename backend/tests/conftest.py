"""Shared pytest fixtures for the knowledge base backend tests."""

import json
import os
import tempfile

# Settings are read at import time, so the environment goes first.
_TMP = tempfile.mkdtemp(prefix="kb-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP}/test.db"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP, "uploads")
os.environ["LOG_DIR"] = os.path.join(_TMP, "logs")
os.environ["JWT_SECRET"] = "test-secret"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "Admin#123456"
os.environ["APP_ENV"] = "test"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from knowledge_base.api.deps import get_uploads_root  # noqa: E402
from knowledge_base.core.security import hash_password  # noqa: E402
from knowledge_base.db.init_db import reset_db  # noqa: E402
from knowledge_base.db.session import SessionLocal  # noqa: E402
from knowledge_base.main import app  # noqa: E402
from knowledge_base.models.article import Article  # noqa: E402
from knowledge_base.models.user import User  # noqa: E402

ADMIN_PASSWORD = "Admin#123456"


# ============================================================================
# Filesystem Fixtures
# ============================================================================

@pytest.fixture
def uploads_dir(tmp_path):
    """Empty uploads directory for one test."""
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def make_upload(uploads_dir):
    """Create a file in the uploads directory and return its path."""

    def _make(name: str, payload: bytes = b"\x89PNG fake image"):
        path = uploads_dir / name
        path.write_bytes(payload)
        return path

    return _make


def make_article(article_id=1, content="", files=None, images=None) -> Article:
    """Transient (unsaved) article for component tests."""
    return Article(
        id=article_id,
        title=f"Article {article_id}",
        content=content,
        files=json.dumps(files or []),
        images=json.dumps(images or []),
    )


# ============================================================================
# API Fixtures
# ============================================================================

@pytest.fixture
def client(uploads_dir):
    reset_db()
    app.dependency_overrides[get_uploads_root] = lambda: uploads_dir
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(client):
    resp = client.post("/api/auth/login", json={"username": "admin", "password": ADMIN_PASSWORD})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['data']['token']}"}


@pytest.fixture
def user_headers(client):
    db = SessionLocal()
    try:
        db.add(User(username="reader", email="reader@example.com", role="user", password_hash=hash_password("Reader#123")))
        db.commit()
    finally:
        db.close()
    resp = client.post("/api/auth/login", json={"username": "reader", "password": "Reader#123"})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['data']['token']}"}


@pytest.fixture
def category(client, admin_headers):
    resp = client.post("/api/categories", json={"name": "Guides", "description": "How-to"}, headers=admin_headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


@pytest.fixture
def article_factory():
    return make_article

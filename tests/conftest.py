from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient

from intake.asset_store import AssetStore, UploadedBlob
from intake.forms import REGISTRY
from intake.listings import ListingQueryService
from intake.schema_generator import generate_all
from intake.sqlite_utils import Database
from intake.submission import SubmissionService

FIXED_TIME = "2024-06-01T12:00:00Z"


@pytest.fixture
def database(tmp_path):
    db = Database(str(tmp_path / "intake.db"), pool_size=2, timeout=5)
    db.execute_script(generate_all(REGISTRY))
    yield db
    db.close()


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def asset_store(upload_dir):
    return AssetStore(str(upload_dir))


@pytest.fixture
def submission_service(database, asset_store):
    return SubmissionService(REGISTRY, asset_store, database, clock=lambda: FIXED_TIME)


@pytest.fixture
def listing_service(database):
    return ListingQueryService(REGISTRY, database)


@pytest.fixture
def stored_files(upload_dir):
    def _list() -> list[str]:
        if not upload_dir.exists():
            return []
        return sorted(os.listdir(upload_dir))
    return _list


@pytest.fixture
def client(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "api.db"))
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("STORE_DIR", str(tmp_path / "store"))
    from app import db as app_db
    from app.main import app

    app_db.reset()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    app_db.reset()


def freelance_fields(title: str = "Robotics Kit", **overrides) -> dict:
    fields = {
        "title": title,
        "sellerName": "Asha",
        "domainName": "Hardware",
        "minPrice": "1500",
        "maxPrice": "2500.50",
        "projectDetail": "Line following robot with sensors",
    }
    fields.update(overrides)
    return fields


def freelance_attachments() -> list[UploadedBlob]:
    return [
        UploadedBlob("zipFile", "source.zip", b"PK\x03\x04zip-bytes"),
        UploadedBlob("images", "front.png", b"\x89PNG front"),
        UploadedBlob("images", "back.png", b"\x89PNG back"),
    ]

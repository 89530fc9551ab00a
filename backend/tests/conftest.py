import os
import tempfile

# settings are read at import time, so the test database must be chosen first
_TMP = tempfile.mkdtemp(prefix="musicos-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_TMP, "test.db")
os.environ["UPLOAD_DIR"] = os.path.join(_TMP, "uploads")
os.environ["PUBLIC_UPLOAD_URL"] = "http://testserver/uploads"

import uuid  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from werkzeug.security import generate_password_hash  # noqa: E402

from musicos.adapters.blob_store import LocalBlobStore  # noqa: E402
from musicos.adapters.mailer import MockMailer  # noqa: E402
from musicos.api.deps import get_blob_store, get_mailer  # noqa: E402
from musicos.db import SessionLocal, init_db  # noqa: E402
from musicos.main import app  # noqa: E402
from musicos.models.user import User  # noqa: E402
from musicos.repositories.offer_repo import OfferRepository  # noqa: E402


@pytest.fixture(autouse=True)
def clean_db():
    init_db(reset=True)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def offers(db):
    repo = OfferRepository(db)
    repo.create_or_update("gig1", "Concerto acústico (1h)", Decimal("150.00"), musician_uid="m1")
    repo.create_or_update("gig2", "Banda para casamento (4h)", Decimal("1200.00"), musician_uid="m2")
    repo.create_or_update("old", "Oferta antiga", Decimal("10.00"), active=False)
    db.commit()


@pytest.fixture
def mailer():
    return MockMailer()


@pytest.fixture
def blob_store(tmp_path):
    return LocalBlobStore(str(tmp_path / "uploads"), "http://testserver/uploads")


@pytest.fixture
def client(mailer, blob_store):
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Register and log in a user through the API; returns (uid, auth headers)."""

    def _register(tipo="musico", email=None, password="segredo1", nome="Ana Silva"):
        email = email or f"{uuid.uuid4().hex[:10]}@example.pt"
        r = client.post(
            "/api/auth/register",
            json={"email": email, "password": password, "nome": nome, "tipo": tipo},
        )
        assert r.status_code == 201, r.text
        r = client.post("/api/auth/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        body = r.json()
        return body["user"]["uid"], {"Authorization": f"Bearer {body['token']}"}

    return _register


@pytest.fixture
def admin_headers(client, db):
    db.add(
        User(
            uid="admin-1",
            email="admin@musicosbooking.pt",
            nome="Administrador",
            tipo="admin",
            password_hash=generate_password_hash("admin123"),
        )
    )
    db.commit()
    r = client.post("/api/auth/login", json={"email": "admin@musicosbooking.pt", "password": "admin123"})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['token']}"}

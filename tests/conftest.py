"""
Shared fixtures: an in-memory SQLite database seeded with the built-in
catalog, and a TestClient wired to it.
"""
import logging
import os
import random
import tempfile

# Keep the app off the on-disk database and package directory
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("STORAGE_DIR", tempfile.mkdtemp(prefix="agrihealth-test-"))
os.environ["S3_BUCKET"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from agrihealth import models
from agrihealth.database import Base, get_db
from agrihealth.main import app
from agrihealth.scoring import RandomPlaceholderBackend, get_scorer_backend
from agrihealth.security import hash_password, issue_token
from agrihealth.seed import seed_catalog
from agrihealth.storage import LocalImageStore, get_image_store

logging.getLogger("agrihealth").setLevel(logging.WARNING)


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = factory()
    try:
        seed_catalog(db)
    finally:
        db.close()
    return factory


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def image_store(tmp_path):
    return LocalImageStore(directory=str(tmp_path / "images"))


@pytest.fixture()
def client(session_factory, image_store):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_image_store] = lambda: image_store
    app.dependency_overrides[get_scorer_backend] = lambda: RandomPlaceholderBackend(random.Random(7))
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_user(db, username="farmer1", email="farmer1@example.com", role="farmer", password="secret123"):
    user = models.User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def farmer(db):
    return make_user(db)


@pytest.fixture()
def other_farmer(db):
    return make_user(db, username="farmer2", email="farmer2@example.com")


@pytest.fixture()
def auth_headers(db, farmer):
    return {"Authorization": f"Bearer {issue_token(db, farmer)}"}


@pytest.fixture()
def other_headers(db, other_farmer):
    return {"Authorization": f"Bearer {issue_token(db, other_farmer)}"}


@pytest.fixture()
def expert_headers(db):
    expert = make_user(db, username="vet1", email="vet1@example.com", role="veterinarian")
    return {"Authorization": f"Bearer {issue_token(db, expert)}"}

"""
Pytest configuration and fixtures for CardSnap tests.
"""

import cv2
import numpy as np
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cardsnap.core.database import Base, get_db
from cardsnap.models import contact  # noqa: F401


@pytest.fixture
def db_session():
    """Session bound to a fresh in-memory SQLite database"""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    """TestClient whose requests share the in-memory database session"""
    from cardsnap.main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def blank_png() -> bytes:
    """A plain white PNG with no text and no QR code"""
    image = np.full((120, 240, 3), 255, dtype=np.uint8)
    ok, encoded = cv2.imencode(".png", image)
    assert ok
    return encoded.tobytes()


@pytest.fixture
def sample_vcard() -> str:
    return "\r\n".join([
        "BEGIN:VCARD",
        "VERSION:3.0",
        "FN:Jane Doe",
        "N:Doe;Jane;;;",
        "TEL;TYPE=CELL:+14155552671",
        "EMAIL;TYPE=INTERNET:jane@acme.com",
        "ORG:Acme Solutions Inc",
        "X-EVENT-TAG:WebSummit",
        "END:VCARD",
    ])

"""
Shared test fixtures: in-memory database, fake avatar host, HTTPS test client
"""

import os

# Must be set before the app modules read their configuration
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.auth.auth_handler import auth_handler
from app.database import Base, get_db
from app.models.user import User, UserRole
from app.services.avatar_uploader import get_avatar_uploader
from app.utils.error_handler import UpstreamError
from main import app

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

API = "/api/v1/user"
ADMIN_PASSWORD = "AdminPass123!"

PATIENT_DATA = {
    "firstName": "A",
    "lastName": "B",
    "email": "a@b.com",
    "phone": "123",
    "gender": "M",
    "password": "p1",
}


class FakeAvatarUploader:
    """Stands in for Cloudinary; records uploads and can be told to fail"""

    def __init__(self):
        self.uploads = []
        self.fail = False

    async def upload(self, file, filename):
        if self.fail:
            raise UpstreamError("Failed To Upload Doctor Avatar To Cloudinary")
        self.uploads.append((filename, file.read()))
        return {"public_id": f"hospital/doctors/{len(self.uploads)}", "url": f"https://img.example/{filename}"}


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def avatar_uploader():
    return FakeAvatarUploader()


@pytest.fixture
def client(db_session, avatar_uploader):
    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_avatar_uploader] = lambda: avatar_uploader
    # Session cookies are Secure, so the client must talk HTTPS to send them back
    test_client = TestClient(app, base_url="https://testserver")
    try:
        yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def admin_user(db_session):
    admin = User(
        first_name="Ada",
        last_name="Admin",
        email="admin@hospital.org",
        phone="5550000001",
        gender="Female",
        national_id="ADM-0001",
        hashed_password=auth_handler.get_password_hash(ADMIN_PASSWORD),
        role=UserRole.ADMIN,
    )
    db_session.add(admin)
    db_session.commit()
    db_session.refresh(admin)
    return admin


@pytest.fixture
def admin_client(client, admin_user):
    response = client.post(f"{API}/login", json={
        "email": admin_user.email,
        "password": ADMIN_PASSWORD,
        "confirmPassword": ADMIN_PASSWORD,
    })
    assert response.status_code == 200
    return client


def cookie_attributes(response, name):
    """Parse the Set-Cookie header for `name` into (value, {attribute: value})"""
    for header in response.headers.get_list("set-cookie"):
        parts = [part.strip() for part in header.split(";")]
        key, _, value = parts[0].partition("=")
        if key != name:
            continue
        attributes = {}
        for part in parts[1:]:
            attr, _, attr_value = part.partition("=")
            attributes[attr.lower()] = attr_value
        return value.strip('"'), attributes
    return None, {}

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mall_admin import models  # noqa: F401
from mall_admin.core.security import hash_password
from mall_admin.database import Base, get_db
from mall_admin.main import app
from mall_admin.models import AdminUser

ADMIN_PASSWORD = "admin-secret"
READER_PASSWORD = "reader-secret"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _create_user(session_factory, username, password, role, status=1):
    db = session_factory()
    try:
        user = AdminUser(
            username=username,
            nickname=username.title(),
            password_hash=hash_password(password),
            role=role,
            status=status,
        )
        db.add(user)
        db.commit()
        return {"id": user.id, "username": username, "role": role}
    finally:
        db.close()


def _bearer(user):
    token = app.state.token_authority.create_access_token(
        {"user_id": user["id"], "username": user["username"], "role": user["role"]}
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_user(session_factory):
    return _create_user(session_factory, "admin", ADMIN_PASSWORD, "admin")


@pytest.fixture
def reader_user(session_factory):
    return _create_user(session_factory, "reader", READER_PASSWORD, "viewer")


@pytest.fixture
def admin_headers(admin_user):
    return _bearer(admin_user)


@pytest.fixture
def reader_headers(reader_user):
    return _bearer(reader_user)


@pytest.fixture
def headers_for():
    """Bearer headers for an arbitrary {id, username, role} dict"""
    return _bearer


@pytest.fixture
def make_user(session_factory):
    def factory(username, password="password1", role="admin", status=1):
        return _create_user(session_factory, username, password, role, status)

    return factory


@pytest.fixture
def make_category(client, admin_headers):
    """POST a category as admin and return the response data"""
    def factory(name, parent_id=None, **extra):
        payload = {"name": name, "parent_id": parent_id, **extra}
        response = client.post("/api/categories/", json=payload, headers=admin_headers)
        assert response.status_code == 201, response.json()
        return response.json()["data"]

    return factory


@pytest.fixture
def make_product(client, admin_headers):
    """POST a product as admin and return the response data"""
    def factory(category_id, name="Product", price=10, **extra):
        payload = {"name": name, "category_id": category_id, "price": price, **extra}
        response = client.post("/api/products/", json=payload, headers=admin_headers)
        assert response.status_code == 201, response.json()
        return response.json()["data"]

    return factory

"""Общие фикстуры: приложение на SQLite в памяти и клиенты API."""

import io

import pytest
from PIL import Image

from app import create_app
from config import Config
from extensions import db

ADMIN_PASSWORD = "test-admin-password"


@pytest.fixture
def app(tmp_path):
    app = create_app(
        Config,
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret-key",
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
            "ADMIN_PASSWORD": ADMIN_PASSWORD,
            "UPLOAD_FOLDER": str(tmp_path / "uploads"),
        },
    )
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def app_context(app):
    """Контекст приложения для прямой работы с хранилищем и моделями."""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    """Анонимный клиент с действующим CSRF-токеном."""
    client = app.test_client()
    token = client.get("/api/session").get_json()["csrf_token"]
    client.environ_base["HTTP_X_CSRF_TOKEN"] = token
    return client


@pytest.fixture
def admin_client(client):
    response = client.post("/api/login", json={"password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return client


@pytest.fixture
def png_bytes():
    return make_image_bytes("PNG")


def make_image_bytes(image_format: str = "PNG", size=(8, 6)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, (200, 120, 40)).save(buffer, format=image_format)
    return buffer.getvalue()


def upload_painting(client, image: bytes | None, **fields):
    data = dict(fields)
    if image is not None:
        data["image"] = (io.BytesIO(image), "painting.png")
    return client.post("/api/paintings", data=data, content_type="multipart/form-data")

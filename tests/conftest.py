"""Shared fixtures: in-memory database, fake collaborators and an API client."""

import io
import struct
import zlib
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.auth import AuthService, get_auth_service
from app.core.exceptions import EmailDeliveryError, ImageHostError
from app.db.database import create_db_engine, get_db
from app.db.models import Base
from app.main import app
from app.schemas.category import CategoryCreate
from app.schemas.image import HostedImage
from app.schemas.product import ProductCreate
from app.services.catalog_service import CatalogService
from app.services.email_service import ContactNotifier, get_contact_notifier
from app.services.image_host import ImageHost, get_image_host

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "s3cret-pass"
SECRET_KEY = "test-secret-key-for-the-catalog-api-suite"


class FakeImageHost(ImageHost):
    """Image host that keeps uploads in memory.

    ``fail_on`` makes the n-th upload (1-based) fail.
    """

    def __init__(self, fail_on: Optional[int] = None, delete_ok: bool = True):
        self.fail_on = fail_on
        self.delete_ok = delete_ok
        self.attempts = 0
        self.uploaded: List[HostedImage] = []
        self.deleted: List[str] = []

    async def upload(self, data: bytes, name: Optional[str] = None) -> HostedImage:
        self.attempts += 1
        if self.fail_on is not None and self.attempts == self.fail_on:
            raise ImageHostError("Failed to upload image")
        n = self.attempts
        hosted = HostedImage(
            image_url=f"https://i.example.com/{n}/{name or 'image'}",
            display_url=f"https://i.example.com/{n}/display",
            thumb_url=f"https://i.example.com/{n}/thumb",
            delete_url=f"https://delete.example.com/{n}",
        )
        self.uploaded.append(hosted)
        return hosted

    async def delete(self, delete_url: str) -> bool:
        self.deleted.append(delete_url)
        return self.delete_ok


class RecordingNotifier(ContactNotifier):
    """Notifier that records messages instead of talking to SMTP."""

    def __init__(self, fail: bool = False):
        super().__init__(smtp_host="smtp.test")
        self.fail = fail
        self.notified = []

    async def notify(self, contact) -> bool:
        if self.fail:
            raise EmailDeliveryError("SMTP server unavailable")
        self.notified.append(contact.id)
        return True


def make_png(color: str = "red", size=(4, 4)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def png_header(width: int, height: int) -> bytes:
    """PNG with only IHDR and IEND chunks, so it declares a size without pixel data."""

    def chunk(kind: bytes, body: bytes) -> bytes:
        crc = zlib.crc32(kind + body)
        return struct.pack(">I", len(body)) + kind + body + struct.pack(">I", crc)

    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IEND", b"")


def hosted_image(n: int = 1, **overrides) -> dict:
    data = {
        "image_url": f"https://i.example.com/{n}.png",
        "display_url": f"https://i.example.com/{n}/display.png",
        "thumb_url": f"https://i.example.com/{n}/thumb.png",
        "delete_url": f"https://delete.example.com/{n}",
    }
    data.update(overrides)
    return data


def category_payload(slug: str = "kitchen-scale", **overrides) -> dict:
    data = {
        "name": "Kitchen Scales",
        "slug": slug,
        "description": "Scales for cooking and food preparation",
        "href": f"/category/{slug}",
        "title": "Kitchen Weighing Scales",
    }
    data.update(overrides)
    return data


def product_payload(**overrides) -> dict:
    data = {
        "name": "Digital Scale",
        "description": "Compact digital kitchen scale",
        "price": 1499,
    }
    data.update(overrides)
    return data


@pytest.fixture
def engine():
    db_engine = create_db_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(
        bind=engine, autoflush=False, autocommit=False, expire_on_commit=False
    )


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def catalog(db_session):
    return CatalogService(db_session)


@pytest.fixture
def make_category(catalog):
    def _make(slug: str = "kitchen-scale", **overrides):
        return catalog.create_category(CategoryCreate(**category_payload(slug, **overrides)))

    return _make


@pytest.fixture
def make_product(catalog):
    def _make(**overrides):
        return catalog.create_product(ProductCreate(**product_payload(**overrides)))

    return _make


@pytest.fixture(scope="session")
def auth_service():
    return AuthService(
        username=ADMIN_USERNAME,
        password_hash=AuthService.get_password_hash(ADMIN_PASSWORD),
        secret_key=SECRET_KEY,
    )


@pytest.fixture
def image_host():
    return FakeImageHost()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(session_factory, image_host, notifier, auth_service):
    """API client wired to the in-memory database and fake collaborators."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_image_host] = lambda: image_host
    app.dependency_overrides[get_contact_notifier] = lambda: notifier
    app.dependency_overrides[get_auth_service] = lambda: auth_service

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(auth_service):
    token = auth_service.create_access_token(ADMIN_USERNAME)
    return {"Authorization": f"Bearer {token}"}

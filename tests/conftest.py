import pytest
from storefront import create_app
from storefront.extensions import db as _db
from storefront.models.gallery_image import GalleryImage
from storefront.services import gallery_service


@pytest.fixture(scope="session")
def app():
    """Create application for testing."""
    app = create_app("testing")
    with app.app_context():
        _db.create_all()
        yield app
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    """Database handle; gallery rows are cleared after each test."""
    with app.app_context():
        yield _db
        _db.session.rollback()
        GalleryImage.query.delete()
        _db.session.commit()


@pytest.fixture
def fake_backends(monkeypatch):
    """Stub the generation gateway and blob storage, recording calls."""
    calls = {"generate": [], "upload": []}

    def fake_generate(category, angle, existing_image_url):
        calls["generate"].append((category, angle))
        return b"\x89PNG fake"

    def fake_upload(storage_key, data, content_type="image/png", bucket=None):
        calls["upload"].append(storage_key)

    monkeypatch.setattr(gallery_service.ai_service, "generate_image", fake_generate)
    monkeypatch.setattr(gallery_service.storage_service, "upload", fake_upload)
    return calls

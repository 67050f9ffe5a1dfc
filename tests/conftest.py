import pytest

from document_pdf_gallery import create_app
from document_pdf_gallery.config import Config
from document_pdf_gallery.extensions import db
from document_pdf_gallery.services import libreoffice
from document_pdf_gallery.services.conversion.strategies import BrowserImageStrategy


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    PREFERRED_CONVERSION_METHOD = None


@pytest.fixture
def app(tmp_path):
    class _Config(TestConfig):
        STORAGE_ROOT = str(tmp_path / 'public')
        LOG_DIR = str(tmp_path / 'logs')

    app = create_app(_Config)
    with app.app_context():
        db.create_all()
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_context(app):
    with app.app_context():
        yield


@pytest.fixture
def no_external_tools(monkeypatch):
    """Neither a headless browser nor LibreOffice is installed."""
    monkeypatch.setattr(BrowserImageStrategy, 'available', lambda self: False)
    monkeypatch.setattr(libreoffice, 'find_soffice', lambda: None)

import os

from flask import Flask

from document_pdf_gallery.config import Config, load_environment
from document_pdf_gallery.extensions import db, migrate
from document_pdf_gallery.routes import documents
from document_pdf_gallery.services.provider_factory import init_conversion_service
from document_pdf_gallery.services.storage import get_storage_for
from document_pdf_gallery.utils.formatting import diff_for_humans
from document_pdf_gallery.utils.logger import configure_logging


def init_extensions(app: Flask) -> None:
    """Initialize Flask extensions and the storage/conversion services."""
    db.init_app(app)
    migrate.init_app(app, db)
    get_storage_for(app)
    init_conversion_service(app)


def register_blueprints(app: Flask) -> None:
    app.register_blueprint(documents.bp)


def create_app(config_class: type[Config] = Config) -> Flask:
    """Flask application factory."""
    load_environment()
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Config is evaluated at import time, before .env is loaded
    db_uri = os.environ.get('DATABASE_URL')
    if db_uri and not app.config.get('TESTING'):
        app.config['SQLALCHEMY_DATABASE_URI'] = db_uri

    if not app.config.get('SQLALCHEMY_DATABASE_URI'):
        raise RuntimeError("SQLALCHEMY_DATABASE_URI is not set. Ensure DATABASE_URL is defined in the environment/.env.")

    uri = app.config['SQLALCHEMY_DATABASE_URI']
    if uri.startswith('sqlite:///') and uri != 'sqlite:///:memory:':
        os.makedirs(os.path.dirname(uri[len('sqlite:///'):]) or '.', exist_ok=True)

    configure_logging(app)
    init_extensions(app)
    register_blueprints(app)
    app.add_template_filter(diff_for_humans, 'diff_for_humans')

    app.logger.info('Application startup')
    return app

import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from document_pdf_gallery import create_app  # noqa: E402
from document_pdf_gallery.extensions import db  # noqa: E402


def init_db():
    """Create all tables for the configured database."""
    app = create_app()
    with app.app_context():
        db.create_all()
        print("Database initialized!")


if __name__ == '__main__':
    init_db()

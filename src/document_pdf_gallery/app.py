"""WSGI entry point: ``flask --app document_pdf_gallery.app run``."""
import os

from document_pdf_gallery import create_app

app = create_app()


def main() -> None:
    app.run(
        host=os.environ.get('FLASK_RUN_HOST', '127.0.0.1'),
        port=int(os.environ.get('FLASK_RUN_PORT', 5000)),
        debug=app.debug,
    )


if __name__ == '__main__':
    main()

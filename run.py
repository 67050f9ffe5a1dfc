"""Development server launcher."""

import sys
from pathlib import Path

SRC_PATH = Path(__file__).parent / "src"
sys.path.insert(0, str(SRC_PATH))

from document_pdf_gallery import create_app  # noqa: E402


def print_banner(app):
    debug = bool(app.config.get("DEBUG") or app.config.get("FLASK_DEBUG"))
    print("=" * 60)
    print("Document PDF Gallery")
    print("=" * 60)
    print("Listening on: http://127.0.0.1:5000")
    print(f"Debug mode: {debug}")
    print(f"Storage root: {app.config['STORAGE_ROOT']}")
    print("=" * 60)
    print()


if __name__ == "__main__":
    app = create_app()
    print_banner(app)
    app.logger.info("Application starting...")
    app.run(host="0.0.0.0", port=5000, debug=app.debug, threaded=True)

"""Application configuration loaded from the environment (.env supported)."""
import os
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def load_environment() -> None:
    """Load variables from the project .env file without overriding real env vars."""
    env_path = PROJECT_ROOT / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=False)


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", f"sqlite:///{PROJECT_ROOT / 'instance' / 'documents.db'}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Public disk: originals under files/documents, generated PDFs under files/pdfs
    STORAGE_ROOT = os.environ.get("STORAGE_ROOT", str(PROJECT_ROOT / "storage" / "public"))
    DOCUMENTS_DIR = "files/documents"
    PDFS_DIR = "files/pdfs"

    # Upload rule: max 20000 KB, request hard limit slightly above for multipart overhead
    MAX_UPLOAD_KB = _env_int("MAX_UPLOAD_KB", 20000)
    MAX_CONTENT_LENGTH = (MAX_UPLOAD_KB + 512) * 1024
    DOCUMENTS_PER_PAGE = _env_int("DOCUMENTS_PER_PAGE", 20)

    PDF_TYPES = ["pdf"]
    WORD_TYPES = ["doc", "docx", "rtf", "odt"]
    EXCEL_TYPES = ["xls", "xlsx", "csv", "ods"]
    IMAGE_TYPES = ["jpg", "jpeg", "png", "gif", "bmp", "webp"]
    SUPPORTED_FILE_TYPES = PDF_TYPES + WORD_TYPES + EXCEL_TYPES + IMAGE_TYPES

    # Ordered strategy names per category; the first success wins
    CONVERSION_CHAINS = {
        "word": ["image-based", "libreoffice", "native", "html"],
        "excel": ["libreoffice", "native", "html"],
        "image": ["image"],
    }
    # Optional method moved to the front of every chain that contains it
    PREFERRED_CONVERSION_METHOD = os.environ.get("PREFERRED_CONVERSION_METHOD") or None

    LIBREOFFICE_TIMEOUT = _env_int("LIBREOFFICE_TIMEOUT", 120)
    BROWSER_TIMEOUT_MS = _env_int("BROWSER_TIMEOUT_MS", 60000)

    IMAGE_MAX_WIDTH = 2000
    IMAGE_MAX_HEIGHT = 2000
    PDF_DPI = 150
    PDF_MIN_BYTES = 100
    PDF_MAX_HTML_BYTES = 64 * 1024 * 1024

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_DIR = os.environ.get("LOG_DIR", str(PROJECT_ROOT / "logs"))
    LOG_BACKUP_COUNT = _env_int("LOG_BACKUP_COUNT", 3)
    LOG_FORMAT = os.environ.get(
        "LOG_FORMAT",
        "%(asctime)s | %(levelname)s | %(name)s | %(method)s %(path)s | %(funcName)s:%(lineno)d | %(message)s",
    )
    LOG_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

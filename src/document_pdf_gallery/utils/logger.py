"""
Logging setup shared by the Flask app logger and the service-layer module loggers
(``document_pdf_gallery.*``), so conversion fallbacks land in the same files as
request logs.
"""
import logging
import os
from logging.handlers import TimedRotatingFileHandler

from flask import has_request_context, request

PACKAGE_LOGGER = "document_pdf_gallery"

DEFAULT_FMT = "%(asctime)s | %(levelname)s | %(name)s | %(method)s %(path)s | %(funcName)s:%(lineno)d | %(message)s"


class RequestContextFilter(logging.Filter):
    """Attach method/path of the current request, or '-' outside one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            record.path = request.path
            record.method = request.method
        else:
            record.path = "-"
            record.method = "-"
        return True


def _handlers(app, level, formatter):
    context_filter = RequestContextFilter()
    handlers = []

    if app.debug or os.environ.get("FLASK_ENV") == "development":
        handlers.append(logging.StreamHandler())

    if not app.debug and not app.testing:
        log_dir = app.config.get("LOG_DIR", "logs")
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(TimedRotatingFileHandler(
            filename=os.path.join(log_dir, "app.log"),
            when="midnight",
            interval=1,
            backupCount=app.config.get("LOG_BACKUP_COUNT", 3),
            encoding="utf-8",
        ))
        error_handler = logging.FileHandler(os.path.join(log_dir, "errors.log"), encoding="utf-8")
        error_handler.setLevel(logging.ERROR)
        handlers.append(error_handler)

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        if handler.level == logging.NOTSET:
            handler.setLevel(level)
    return handlers


def configure_logging(app):
    """Console handler in development, rotating app.log plus errors.log otherwise."""
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    formatter = logging.Formatter(
        app.config.get("LOG_FORMAT", DEFAULT_FMT),
        datefmt=app.config.get("LOG_TIME_FORMAT", "%Y-%m-%d %H:%M:%S"),
    )

    # app.logger is the package logger itself when the app is created from this package
    targets = {app.logger, logging.getLogger(PACKAGE_LOGGER)}
    for target in targets:
        for handler in target.handlers[:]:
            target.removeHandler(handler)
            handler.close()
        target.setLevel(level)

    for handler in _handlers(app, level, formatter):
        for target in targets:
            target.addHandler(handler)

# farmops/logging_config.py
import json
import logging
import os
from logging.handlers import RotatingFileHandler

from .config import Settings, get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


class JsonFormatter(logging.Formatter):
    """Outputs log records as single-line JSON objects."""

    def format(self, record):
        log_entry = {
            "timestamp": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "filename": record.filename,
            "lineno": record.lineno,
        }
        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def _make_formatter(settings: Settings) -> logging.Formatter:
    if settings.log_format == "json":
        return JsonFormatter()
    return logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)


def setup_logging(settings: Settings | None = None) -> logging.Logger:
    """
    Configure the 'farmops' logger once per process.

    Streamlit re-executes page scripts on every interaction, so repeated
    calls must not stack handlers.
    """
    global _configured
    app_logger = logging.getLogger("farmops")
    if _configured:
        return app_logger

    settings = settings or get_settings()
    formatter = _make_formatter(settings)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(settings.log_level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    # File handler with rotation (5MB max, keep 5 backups)
    try:
        os.makedirs(settings.log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(settings.log_dir, "farmops.log"),
            maxBytes=5 * 1024 * 1024,
            backupCount=5,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        app_logger.addHandler(file_handler)
    except OSError as e:
        app_logger.warning(f"File logging disabled: {e}")

    app_logger.setLevel(logging.DEBUG)
    app_logger.propagate = False
    _configured = True
    return app_logger

"""
Logging setup shared by the API process and scripts.
"""
import logging
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

from .config import Settings, settings as default_settings

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
JSON_FIELDS = "%(asctime)s %(name)s %(levelname)s %(message)s"


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Install a root handler using the configured level and format."""
    settings = settings or default_settings
    if settings.LOG_FORMAT.lower() == "json":
        formatter: logging.Formatter = JsonFormatter(JSON_FIELDS)
    else:
        formatter = logging.Formatter(TEXT_FORMAT)

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

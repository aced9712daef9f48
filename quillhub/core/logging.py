"""
Logging configuration for the Quillhub API
"""
import logging
import sys

from quillhub.core.config import get_settings


def setup_logging() -> None:
    """
    Set up the root logger once at process start
    """
    settings = get_settings()
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=settings.log_level.upper(),
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

"""Logging setup shared by the CLI, the API and the runner."""
import logging
import sys

from src.config import config

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s - %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger once from LOG_LEVEL."""
    logging.basicConfig(
        level=(level or config.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("pdfminer").setLevel(logging.WARNING)

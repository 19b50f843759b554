# gst_utils/logging_setup.py
import logging
from typing import Literal

Level = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def resolve_level(configured: str = "INFO", quiet: bool = False, verbose: bool = False) -> str:
    """--verbose beats --quiet, both beat the configured level."""
    if verbose:
        return "DEBUG"
    if quiet:
        return "WARNING"
    return str(configured).upper()


def setup_logging(level: Level = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    # the SDK's HTTP client is chatty at INFO
    logging.getLogger("httpx").setLevel(max(logging.WARNING, logging.getLogger().level))

import logging
import sys

from rich.logging import RichHandler

from cashcast.models import Environment

# Rich renders time and level itself; prod lines carry them in the text
PROD_LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s"
PROD_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def build_handler(env: str) -> logging.Handler:
    """Console handler for the environment: rich outside prod, plain stdout lines in prod."""
    if env != Environment.PROD:
        return RichHandler(rich_tracebacks=True, show_time=False, show_path=False)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(PROD_LOG_FORMAT, datefmt=PROD_DATE_FORMAT))
    return handler


def setup_logging(settings) -> None:
    """Route every cashcast logger through one handler at the configured level."""
    logging.basicConfig(
        level=settings.LOGGING_LEVEL,
        format="%(message)s",
        handlers=[build_handler(settings.ENV)],
        force=True,
    )

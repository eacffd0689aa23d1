import logging
from typing import Union

from rich.logging import RichHandler

# HTTP client libraries that log every request at INFO
NOISY_LOGGERS = ("aiohttp.access", "httpx", "openai")


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """
    Configure the root logger with a rich console handler.

    `level` may be a logging constant or a name such as "debug".
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """
    Return a named logger (after logging is configured).
    """
    return logging.getLogger(name)

# clovet/core/logging.py
import logging
import sys
import colorlog

LOG_FORMAT = "%(log_color)s%(asctime)s %(levelname)-8s [%(name)s]%(reset)s %(message)s"

# chatty third-party loggers: pymongo heartbeats, one INFO line per upstream request
QUIET_LOGGERS = ("pymongo", "httpx", "httpcore", "openai")


def configure_logging(level=logging.INFO, color: bool | None = None):
    """
    Single colorlog handler on the root logger; uvicorn follows the app level.
    Colours are dropped when stdout is not a terminal (container logs).
    """
    if color is None:
        color = sys.stdout.isatty()

    handler = colorlog.StreamHandler(sys.stdout)
    handler.setFormatter(
        colorlog.ColoredFormatter(
            LOG_FORMAT,
            datefmt="%H:%M:%S",
            no_color=not color,
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
        )
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    for name in ("uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

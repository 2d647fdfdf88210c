import logging
from logging.handlers import RotatingFileHandler

from .config import settings

_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def configure_logging() -> None:
    root = logging.getLogger()
    root.setLevel(settings.log_level.upper())

    # repeat calls replace our handlers instead of stacking them
    for h in list(root.handlers):
        if getattr(h, "_growlight", False):
            root.removeHandler(h)
            h.close()

    fmt = logging.Formatter(_FORMAT)
    console = logging.StreamHandler()
    logfile = RotatingFileHandler(settings.log_file, maxBytes=2_000_000, backupCount=5)
    for h in (console, logfile):
        h.setFormatter(fmt)
        h._growlight = True
        root.addHandler(h)

    # Request lines from httpx/uvicorn drown out the schedule transitions
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

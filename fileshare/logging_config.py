import logging

from .config import Settings

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def configure_logging(settings: Settings) -> None:
    """Attach stream (and optional file) handlers to the package logger once."""
    logger = logging.getLogger("fileshare")
    if logger.handlers:
        return
    logger.setLevel(settings.log_level)
    logger.propagate = False

    fmt = logging.Formatter(LOG_FORMAT)

    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if settings.log_file:
        fh = logging.FileHandler(settings.log_file)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

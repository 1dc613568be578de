import logging

from config import settings


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors each record by its level."""

    COLORS = {
        "DEBUG": "\033[94m",
        "INFO": "\033[92m",
        "WARNING": "\033[93m",
        "ERROR": "\033[91m",
        "CRITICAL": "\033[95m",
    }
    RESET = "\033[0m"

    def format(self, record):
        message = super().format(record)
        color = self.COLORS.get(record.levelname, self.RESET)
        return f"{color}{message}{self.RESET}"


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger writing colored lines to the console.

    Args:
        name: Usually the calling module's __name__.
    """
    logger = logging.getLogger(name)
    logger.setLevel(settings.log_level.upper())

    # get_logger is called once per module, but tests re-import freely
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            ColoredFormatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
        logger.propagate = False

    return logger

import logging
import sys

LOG_FORMAT = "%(levelname)s: %(asctime)s %(filename)s:%(lineno)d %(message)s"
DATE_FORMAT = "%Y/%m/%d %H:%M:%S"


def configure_logging(level: str = "INFO", log_file: str = None):
    """Send application logs to stderr and, when configured, to an append-only file."""
    root = logging.getLogger()
    root.setLevel(level.upper())

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # Replace handlers installed by a previous call (app factory may run more than once)
    for handler in list(root.handlers):
        if getattr(handler, "_stocklab", False):
            root.removeHandler(handler)
            handler.close()

    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(formatter)
    stream._stocklab = True
    root.addHandler(stream)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        file_handler._stocklab = True
        root.addHandler(file_handler)

import sys
import logging


def setup_logging(log_file: str = None, level: int = logging.DEBUG):
    # Configure the package logger only, the root logger is left to the caller
    logger = logging.getLogger("xysim")

    # Check if handlers already exist and remove them to avoid duplication
    if logger.hasHandlers():
        logger.handlers.clear()

    # Console handler: logs all levels from `level` upwards to the console
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(SimpleFormatter())
    logger.addHandler(console_handler)

    # File handler: logs only INFO level logs (the run summaries) to the file
    if log_file is not None:
        file_handler = logging.FileHandler(log_file, mode='w')
        file_handler.setLevel(logging.INFO)
        file_handler.addFilter(lambda record: record.levelno == logging.INFO)
        file_handler.setFormatter(SimpleFormatter())
        logger.addHandler(file_handler)

    logger.setLevel(level)
    return logger


class SimpleFormatter(logging.Formatter):
    def format(self, record):
        log_fmt = "%(message)s"
        if record.levelno >= logging.WARNING:
            log_fmt = "%(levelname)s: %(message)s"
        formatter = logging.Formatter(log_fmt)
        return formatter.format(record)

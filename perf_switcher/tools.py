import logging
from logging.handlers import RotatingFileHandler
import os
import sys

from perf_switcher.globals import LOG_FILE


class ConditionalFormatter(logging.Formatter):
    """
    A custom formatter that applies different format strings based on record level.
    Shows file name and line number only for ERROR and CRITICAL levels.
    """

    def __init__(self) -> None:
        self.default_fmt = "%(asctime)s [%(levelname)s] [%(module)s] %(message)s"
        self.error_fmt = "%(asctime)s [%(levelname)s] [%(filename)s:%(lineno)d] %(message)s"

        super().__init__(fmt=self.default_fmt, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record) -> str:
        original_fmt: str = self._style._fmt

        if record.levelno >= logging.ERROR:
            self._style._fmt = self.error_fmt
        else:
            self._style._fmt = self.default_fmt

        result: str = super().format(record)

        self._style._fmt = original_fmt

        return result


def setup_logger(level: str = "INFO", log_file: str = LOG_FILE) -> None:
    """Setup logging global

    Falls back to stdout only when the log directory can't be created.
    """
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(logging.Formatter("[%(levelname)s] [%(module)s] %(message)s"))
    handlers: list[logging.Handler] = [stream_handler]

    if log_file and create_log_dir(os.path.dirname(log_file)):
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10*1024*1024, # 10MB
            backupCount=1,
            encoding="utf-8"
        )
        file_handler.setFormatter(ConditionalFormatter())
        handlers.insert(0, file_handler)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=handlers,
        force=True,
    )

def create_log_dir(log_dir: str) -> bool:
    try:
        os.makedirs(log_dir, exist_ok=True)
        return True
    except OSError:
        return False

"""Root logger setup shared by the API server and the workflow CLI.

Stage and engine modules log through ``logging.getLogger(__name__)``; this
module only decides where those records go.
"""

import logging
import os
import time
from logging.handlers import TimedRotatingFileHandler

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


class SizeAndTimeRotatingHandler(TimedRotatingFileHandler):
    """Rotates the engine log at midnight or once it reaches ``max_bytes``."""

    def __init__(self, filename, max_bytes, backup_count=0, **kwargs):
        self.max_bytes = max_bytes
        super().__init__(filename, backupCount=backup_count, **kwargs)

    def shouldRollover(self, record):
        if int(time.time()) >= self.rolloverAt:
            return 1
        if not self.stream or self.max_bytes <= 0:
            return 0
        self.stream.seek(0, os.SEEK_END)
        return 1 if self.stream.tell() >= self.max_bytes else 0

    def doRollover(self):
        super().doRollover()
        # a size rollover must not leave the next midnight cut in the past
        self.rolloverAt = self.computeRollover(int(time.time()))


def _engine_log_handler(
    log_dir: str, log_file: str, max_bytes: int, backup_count: int
) -> SizeAndTimeRotatingHandler:
    os.makedirs(log_dir, exist_ok=True)
    return SizeAndTimeRotatingHandler(
        filename=os.path.join(log_dir, log_file),
        when="midnight",
        interval=1,
        max_bytes=max_bytes,
        backup_count=backup_count,
        encoding="utf-8",
    )


def configure_logging(
    log_dir: str | None = "logs",
    log_file: str = "workflow_engine.log",
    level: int = logging.INFO,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 7,
    console: bool = True,
) -> logging.Logger:
    """Route task, stage and API records to a rotating file and/or stderr.

    Args:
        log_dir: Directory holding the engine log; None disables the file.
        log_file: Engine log file name inside ``log_dir``.
        level: Level applied to the root logger and the console handler.
        max_bytes: Size at which the engine log rolls over early.
        backup_count: Rotated engine logs kept on disk.
        console: Also echo records to stderr.

    Returns:
        The root logger, with any previously installed handlers replaced.
    """
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = []

    if log_dir:
        handlers.append(_engine_log_handler(log_dir, log_file, max_bytes, backup_count))

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        handlers.append(console_handler)

    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    return root

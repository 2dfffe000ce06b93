"""Logging configuration for the intake client."""
import logging
import sys
import os

CONSOLE_FORMAT = '%(asctime)s %(levelname)-8s %(name)-25s %(message)s'


class ColorFormatter(logging.Formatter):
    """Colours the level name; the record itself is left unchanged."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record):
        levelname = record.levelname
        color = self.COLORS.get(levelname)
        if color:
            record.levelname = f"{color}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def build_console_handler(stream=None, level=logging.INFO):
    """Console handler on stderr, coloured on a TTY unless LOG_COLORS is false."""
    stream = stream or sys.stderr
    use_colors = os.getenv('LOG_COLORS', 'true').lower() in ('true', '1', 'yes')
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    if use_colors and hasattr(stream, 'isatty') and stream.isatty():
        handler.setFormatter(ColorFormatter(CONSOLE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def setup_logging():
    """Console logging for the client, level from LOG_LEVEL.

    stdout is left to command output; progress and results are printed there.
    """
    level_name = os.getenv('LOG_LEVEL', 'INFO').upper()
    level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(build_console_handler(level=level))

    logging.getLogger('PIL').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    root.info(f"Client logging initialized (level: {level_name})")
    return root

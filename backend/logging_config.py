"""Logging configuration for the intake backend."""
import logging
import os
import json
from logging.handlers import RotatingFileHandler
from flask import has_request_context, request
from shared.models import now

NOISY_LOGGERS = ('werkzeug', 'sqlalchemy.engine', 'libcloud', 'PIL', 'urllib3')


class RequestContextFilter(logging.Filter):
    """Attach the HTTP method and path of the current request, if any."""

    def filter(self, record):
        if has_request_context():
            record.http_method = request.method
            record.http_path = request.path
        else:
            record.http_method = None
            record.http_path = None
        return True


class StructuredFormatter(logging.Formatter):
    """One JSON object per line for the log file.

    Fields passed as ``extra={'extra_fields': {...}}`` (participant ids,
    image slots, byte counts) are merged into the top level.
    """

    def format(self, record):
        entry = {
            'timestamp': now().isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        if getattr(record, 'http_path', None):
            entry['request'] = f"{record.http_method} {record.http_path}"
        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)
        entry.update(getattr(record, 'extra_fields', {}))
        return json.dumps(entry, default=str)


def setup_logging():
    """Route backend logs to a rotating JSON file and a plain console stream.

    LOG_LEVEL sets the level and LOG_DIR the directory of
    ``intake_backend.log`` (``logs/`` beside the package by default).
    Safe to call once per ``create_app``; earlier handlers are closed.
    """
    level_name = os.getenv('LOG_LEVEL', 'INFO').upper()
    level = getattr(logging, level_name, logging.INFO)

    logs_dir = os.getenv('LOG_DIR') or os.path.join(os.path.dirname(__file__), '..', 'logs')
    os.makedirs(logs_dir, exist_ok=True)
    log_file = os.path.join(logs_dir, 'intake_backend.log')

    context_filter = RequestContextFilter()

    file_handler = RotatingFileHandler(log_file, maxBytes=10*1024*1024, backupCount=5)
    file_handler.setFormatter(StructuredFormatter())

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)-8s %(name)-20s %(message)s'))

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        handler.close()
        root.removeHandler(handler)
    for handler in (file_handler, console_handler):
        handler.setLevel(level)
        handler.addFilter(context_filter)
        root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root.info("Logging initialized", extra={
        'extra_fields': {'log_level': level_name, 'log_file': log_file}
    })
    return root

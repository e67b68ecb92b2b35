"""Logging setup shared by the datastore, fragments and converter components."""

import logging
import os
import re
import sys
from typing import Optional


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
MASK = '***MASKED***'

# key=value / key: value / "key": "value" forms, matched case-insensitively.
SENSITIVE_KEYS = (
    r'password',
    r'api[_-]?key',
    r'access[_-]?key',
    r'secret[_-]?key',
    r'token',
    r'authorization',
    r'secret',
)

_VALUE = r'[^"\'}\s,\]]+'


def _key_pattern(key: str) -> re.Pattern:
    return re.compile(rf'({key}["\']?\s*[:=]\s*["\']?)({_VALUE})', re.IGNORECASE)


class SensitiveDataFilter(logging.Filter):
    """
    Mask credentials in log records.

    Blob store URLs and headers can carry access keys or bearer tokens;
    owner ids and fragment ids are left as they are.
    """

    PATTERNS = [_key_pattern(key) for key in SENSITIVE_KEYS] + [
        re.compile(rf'(bearer\s+)({_VALUE})', re.IGNORECASE),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self.mask(record.msg)

        if isinstance(record.args, dict):
            record.args = {key: self.mask(value) for key, value in record.args.items()}
        elif isinstance(record.args, tuple):
            record.args = tuple(self.mask(arg) for arg in record.args)

        return True

    @classmethod
    def mask(cls, value):
        """Return value with secrets replaced; non-strings pass through."""
        if not isinstance(value, str):
            return value
        for pattern in cls.PATTERNS:
            value = pattern.sub(rf'\1{MASK}', value)
        return value


def setup_logging(component_name: str, log_level: Optional[str] = None) -> logging.Logger:
    """
    Attach a stdout handler with secret masking to a component's top-level logger.

    Module loggers obtained with get_logger(__name__) inside the component
    inherit the handler. Calling this twice only updates the level.

    Args:
        component_name: Top-level package name ('datastore', 'fragments' or 'converter')
        log_level: DEBUG, INFO, WARNING or ERROR. Defaults to LOG_LEVEL env var or INFO

    Returns:
        Configured logger instance
    """
    level_name = (log_level or os.getenv('LOG_LEVEL', 'INFO')).upper()
    level = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger(component_name)
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    handler.addFilter(SensitiveDataFilter())

    logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a module logger (typically get_logger(__name__))."""
    return logging.getLogger(name)

"""Logging helpers with token redaction."""

from __future__ import annotations

import logging
import re
from typing import Iterable

_REDACTIONS = [
    (re.compile(r"Bearer\s+[A-Za-z0-9\-_.]+"), "Bearer [REDACTED]"),
    (re.compile(r"\blin_(?:api|oauth)_[A-Za-z0-9]+"), "[REDACTED]"),
    (re.compile(r"\b(?:ghp|gho|ghs|ghu)_[A-Za-z0-9]+"), "[REDACTED]"),
    (re.compile(r"\bgithub_pat_[A-Za-z0-9_]+"), "[REDACTED]"),
    (re.compile(r"\bxox[abprs]-[A-Za-z0-9\-]+"), "[REDACTED]"),
    (re.compile(r"\bsk-[A-Za-z0-9\-_]+"), "[REDACTED]"),
]

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_level = logging.INFO


def redact(text: str, extra_secrets: Iterable[str] | None = None) -> str:
    """Redact tracker and agent API tokens and explicit secrets from text."""
    redacted = text
    for pattern, replacement in _REDACTIONS:
        redacted = pattern.sub(replacement, redacted)
    if extra_secrets:
        for secret in extra_secrets:
            if secret:
                redacted = redacted.replace(secret, "[REDACTED]")
    return redacted


def set_level(level: str | int) -> None:
    """Set the level used for loggers created by get_logger."""
    global _level
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        _level = resolved if isinstance(resolved, int) else logging.INFO
    else:
        _level = level
    for name, logger in logging.root.manager.loggerDict.items():
        if name.split(".", 1)[0] == "edgeworker" and isinstance(logger, logging.Logger):
            logger.setLevel(_level)


def get_logger(name: str) -> logging.Logger:
    """Return a configured logger."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(_level)
    return logger

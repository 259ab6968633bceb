"""Logging configuration for stealth-assist."""

import logging
import re
import sys
from datetime import datetime
from pathlib import Path

_configured = False

LOGGER_NAME = "stealthassist"
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "anthropic", "urllib3", "google")

REDACTED = "[REDACTED]"
SECRET_PATTERNS = (
    re.compile(r"\bsk-(?:ant-)?[A-Za-z0-9_\-]{8,}"),
    re.compile(r"\bxai-[A-Za-z0-9_\-]{8,}"),
    re.compile(r"\bAIza[A-Za-z0-9_\-]{20,}"),
    re.compile(r"(?<=Bearer )[A-Za-z0-9._\-]+"),
)


class RedactSecretsFilter(logging.Filter):
    """Masks vendor API keys in the rendered message and traceback."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        if record.exc_info and not record.exc_text:
            record.exc_text = redact(logging.Formatter().formatException(record.exc_info))
        return True


def redact(text: str) -> str:
    for pattern in SECRET_PATTERNS:
        text = pattern.sub(REDACTED, text)
    return text


def setup_logging(level: int = logging.INFO) -> None:
    """Configure the stealthassist logger.

    - Output to stderr (keeps CLI stdout clean)
    - Format: HH:MM:SS LEVEL [module.name] message
    - API keys redacted on every handler
    - Silences vendor SDK loggers to WARNING
    - Idempotent
    """
    global _configured
    if _configured:
        return
    _configured = True

    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(RedactSecretsFilter())
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)-5s [%(name)s] %(message)s", datefmt="%H:%M:%S")
    )

    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(level)
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_file_logging(log_dir: Path) -> logging.FileHandler:
    """Add a DEBUG file handler writing to log_dir/YYYYMMDD_HHMMSS.log."""
    log_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_path = log_dir / f"{timestamp}.log"

    handler = logging.FileHandler(log_path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.addFilter(RedactSecretsFilter())
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    logging.getLogger(LOGGER_NAME).addHandler(handler)
    return handler


def reset_logging() -> None:
    """Reset logging state. For testing only."""
    global _configured
    _configured = False
    root = logging.getLogger(LOGGER_NAME)
    for handler in list(root.handlers):
        handler.close()
    root.handlers.clear()
    root.setLevel(logging.WARNING)

"""JSON logging with secret masking and per-request correlation ids.

Every record is one JSON object:

    {"ts": ..., "level": ..., "logger": ..., "event": ..., "request_id": ...,
     "where": "module:func:line", "fields": {...extra=...}, "exc_info": ...}

Values passed through ``extra=`` land in ``fields``. Mapping keys that name
credentials are replaced wholesale; token-shaped substrings are masked in
every string, including the event text.
"""

from __future__ import annotations

import json
import logging
import re
import sys
import uuid
from collections.abc import Mapping
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

MASK = "***"

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def set_request_id(value: str | None = None) -> str:
    """Bind ``value`` (or a fresh uuid4) to the current context and return it."""
    rid = value or str(uuid.uuid4())
    _request_id.set(rid)
    return rid


def get_request_id() -> str | None:
    return _request_id.get()


# Substrings that look like credentials, whatever key they sit under
_TOKEN_PATTERNS = (
    (re.compile(r"\bsk-[A-Za-z0-9_-]{8,}"), "sk-" + MASK),
    (re.compile(r"\beyJ[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+"), "eyJ" + MASK),
    (re.compile(r"\bya29\.[A-Za-z0-9._-]{10,}"), "ya29." + MASK),
    (re.compile(r"\b1//[A-Za-z0-9._-]{10,}"), "1//" + MASK),  # Google refresh tokens
    (re.compile(r"(?i)\bBearer\s+[A-Za-z0-9._-]{10,}"), "Bearer " + MASK),
)

# Compared after lowercasing and dropping "_" / "-", so accessToken == access_token
_SECRET_KEYS = frozenset(
    {
        "authorization",
        "token",
        "accesstoken",
        "refreshtoken",
        "idtoken",
        "code",
        "apikey",
        "openaiapikey",
        "secret",
        "jwtsecret",
        "clientsecret",
        "googleclientsecret",
        "password",
    }
)

# LogRecord attributes that are not caller-supplied extras
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def _is_secret_key(key: Any) -> bool:
    return re.sub(r"[_-]", "", str(key).lower()) in _SECRET_KEYS


def mask(value: Any) -> Any:
    """Return ``value`` with credential keys and token-shaped strings masked."""
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, Mapping):
        return {k: MASK if _is_secret_key(k) else mask(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [mask(v) for v in value]
    text = str(value)
    for pattern, replacement in _TOKEN_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "event": mask(record.getMessage()),
            "request_id": get_request_id(),
            "where": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        fields = {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS}
        if fields:
            payload["fields"] = mask(fields)
        if record.exc_info:
            payload["exc_info"] = mask(self.formatException(record.exc_info))

        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(
    level: str | int = "INFO",
    file_path: str | None = None,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """Route the root logger to stdout (and optionally a rotating file) as JSON.

    Existing root handlers are replaced, so calling this twice does not
    duplicate output.
    """
    root = logging.getLogger()
    root.setLevel(level.upper() if isinstance(level, str) else level)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if file_path:
        Path(file_path).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                file_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
            )
        )

    formatter = JsonFormatter()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # Client libraries log request lines at INFO
    for noisy in ("httpx", "httpcore", "openai", "aiohttp.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = [
    "JsonFormatter",
    "get_logger",
    "get_request_id",
    "mask",
    "set_request_id",
    "setup_logging",
]

"""
Logging helpers that keep secrets out of log output.
"""
import logging
import re
from typing import Any, Iterable, Optional

REDACTED = "[REDACTED]"

SENSITIVE_KEYS = frozenset({
    "apikey",
    "api_key",
    "authorization",
    "password",
    "secret",
    "token",
    "access_token",
    "refresh_token",
})

_BEARER_PATTERN = re.compile(r"(Bearer\s+)[A-Za-z0-9._\-~+/=]+", re.IGNORECASE)


def redact(data: Any, extra_keys: Iterable[str] = ()) -> Any:
    """
    Return a copy of ``data`` with secret-bearing values replaced.

    Keys are matched case-insensitively against SENSITIVE_KEYS plus
    ``extra_keys``; dicts, lists and tuples are walked recursively.
    """
    sensitive = SENSITIVE_KEYS | {key.lower() for key in extra_keys}
    return _redact(data, sensitive)


def _redact(data: Any, sensitive: frozenset) -> Any:
    if isinstance(data, dict):
        return {
            key: REDACTED if isinstance(key, str) and key.lower() in sensitive else _redact(value, sensitive)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [_redact(item, sensitive) for item in data]
    return data


def redact_text(text: str, secrets: Iterable[Optional[str]] = ()) -> str:
    """Mask bearer tokens and any of the given secret values inside free text."""
    result = _BEARER_PATTERN.sub(rf"\g<1>{REDACTED}", text)
    for secret in secrets:
        if secret:
            result = result.replace(secret, REDACTED)
    return result


class RedactingLogger:
    """
    Thin wrapper over a stdlib logger: ``meta`` is redacted before it is
    formatted into the record.
    """

    def __init__(self, name: str, prefix: str = "", extra_keys: Iterable[str] = ()):
        self.logger = logging.getLogger(name)
        self.prefix = prefix
        self.extra_keys = tuple(extra_keys)

    def _log(self, level: int, message: str, meta: Any = None) -> None:
        if not self.logger.isEnabledFor(level):
            return
        text = f"{self.prefix}{message}"
        if meta is not None:
            text = f"{text} {redact(meta, self.extra_keys)}"
        self.logger.log(level, text)

    def debug(self, message: str, meta: Any = None) -> None:
        self._log(logging.DEBUG, message, meta)

    def info(self, message: str, meta: Any = None) -> None:
        self._log(logging.INFO, message, meta)

    def warning(self, message: str, meta: Any = None) -> None:
        self._log(logging.WARNING, message, meta)

    def error(self, message: str, meta: Any = None) -> None:
        self._log(logging.ERROR, message, meta)

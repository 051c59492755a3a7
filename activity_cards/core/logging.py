"""
Logging setup for the web app and maintenance scripts.

Strava OAuth traffic carries authorization codes and tokens; the redaction
filter masks them before any handler writes a record.
"""

import logging
import re
import sys

_SECRET_PATTERN = re.compile(
    r"(?P<key>\b(?:code|access_token|refresh_token|client_secret)\b[\"']?\s*[=:]\s*[\"']?)"
    r"(?P<value>[^\s&\"',}]+)"
)
REDACTED = "***"


class RedactSecretsFilter(logging.Filter):
    """Mask OAuth codes, tokens and client secrets in log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = _SECRET_PATTERN.sub(lambda m: m.group("key") + REDACTED, message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with the app's format and secret redaction."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RedactSecretsFilter) for f in handler.filters):
            handler.addFilter(RedactSecretsFilter())
    # Request lines carry OAuth codes in their query strings.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    # Pillow logs every PNG chunk at DEBUG.
    logging.getLogger("PIL").setLevel(logging.INFO)


__all__ = ["REDACTED", "RedactSecretsFilter", "configure_logging"]

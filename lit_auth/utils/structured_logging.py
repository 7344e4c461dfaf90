"""
Structured JSON logging for production environments.

Credential payloads (JWTs, wallet signatures, bearer tokens) pass through
this library constantly; the redaction filter keeps them out of log sinks.
"""

import json
import logging
import re
from datetime import datetime, timezone


class CredentialRedactionFilter(logging.Filter):
    """
    Security filter that redacts credentials from log messages.

    - Redacts compact JWTs (header.payload.signature)
    - Redacts 65-byte wallet signatures and 32-byte private keys
    - Redacts bearer tokens and access_token / id_token query values

    Usage:
        >>> handler = logging.StreamHandler()
        >>> handler.addFilter(CredentialRedactionFilter())
        >>> logger.addHandler(handler)
    """

    JWT_PATTERN = re.compile(r'eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]*')
    SIGNATURE_PATTERN = re.compile(r'0x[0-9a-fA-F]{130}')
    PRIVATE_KEY_PATTERN = re.compile(r'0x[0-9a-fA-F]{64}(?![0-9a-fA-F])')
    BEARER_PATTERN = re.compile(r'(Bearer\s+)[A-Za-z0-9._~+/=-]+', re.IGNORECASE)
    TOKEN_PARAM_PATTERN = re.compile(
        r'((?:access_token|id_token|token_jwt|api-key)["\']?\s*[:=]\s*["\']?)[^&"\'\s,}]+',
        re.IGNORECASE
    )

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Redact credentials from log record.

        Returns:
            Always True (record is never dropped, just sanitized)
        """
        if record.msg:
            record.msg = self._redact_credentials(str(record.msg))

        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    k: self._redact_credentials(str(v))
                    for k, v in record.args.items()
                }
            elif isinstance(record.args, tuple):
                record.args = tuple(
                    self._redact_credentials(str(arg))
                    for arg in record.args
                )

        if record.exc_text:
            record.exc_text = self._redact_credentials(record.exc_text)

        return True

    def _redact_credentials(self, text: str) -> str:
        """Redact all credential patterns from text."""
        if not text:
            return text

        text = self.JWT_PATTERN.sub('[REDACTED_JWT]', text)
        text = self.SIGNATURE_PATTERN.sub('0x[REDACTED_SIG]', text)
        text = self.PRIVATE_KEY_PATTERN.sub('0x[REDACTED]', text)
        text = self.BEARER_PATTERN.sub(r'\1[REDACTED]', text)
        text = self.TOKEN_PARAM_PATTERN.sub(r'\1[REDACTED]', text)

        return text


class StructuredFormatter(logging.Formatter):
    """JSON formatter for log aggregators."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, 'extra_fields'):
            log_data.update(record.extra_fields)

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info)
            }

        return json.dumps(log_data, default=str)


def configure_structured_logging(
    level: str = "INFO",
    enable_json: bool = True,
    enable_credential_redaction: bool = True
) -> None:
    """
    Configure structured logging globally.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        enable_json: Use JSON formatter (True for production)
        enable_credential_redaction: Add credential redaction filter
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()

    handler = logging.StreamHandler()

    if enable_credential_redaction:
        handler.addFilter(CredentialRedactionFilter())

    if enable_json:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

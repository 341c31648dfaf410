"""
Input sanitization and validation helpers.

Also serves as a ready-made fuzz target: `secaudit fuzz secaudit.sanitizer:sanitize_for_sql`.
"""

import html
import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)


SQL_INJECTION_PATTERN = re.compile(r"(?:'\s*(?:OR|AND)\b|;|--|/\*|\bUNION\s+SELECT\b)", re.IGNORECASE)
XSS_PATTERN = re.compile(r"<[^>]*>|javascript:", re.IGNORECASE)
ALPHA_NUMERIC_PATTERN = re.compile(r"^[a-zA-Z0-9]+$")
EMAIL_PATTERN = re.compile(r"^[\w.-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,6}$")
URL_PATTERN = re.compile(r"^(?:https?|ftp)://[\w.-]+(?::\d+)?(?:/[\w.%/-]*)?$")


class InputSanitizer:
    """Sanitizes user input for SQL and HTML contexts and validates common formats."""

    def sanitize_for_sql(self, value: Optional[str]) -> Optional[str]:
        """
        Reject input that looks like SQL injection, escape quotes otherwise.

        Returns:
            "" for suspicious input, the escaped value otherwise
        """
        if not value:
            return value
        if SQL_INJECTION_PATTERN.search(value):
            logger.warning(f"Potential SQL injection attempt detected: {value[:80]!r}")
            return ""
        return value.replace("'", "''")

    def sanitize_for_xss(self, value: Optional[str]) -> Optional[str]:
        """HTML-escape the value."""
        if not value:
            return value
        if XSS_PATTERN.search(value):
            logger.warning(f"Potential XSS attempt detected: {value[:80]!r}")
        return html.escape(value, quote=True)

    def is_alphanumeric(self, value: Optional[str]) -> bool:
        return value is not None and bool(ALPHA_NUMERIC_PATTERN.match(value))

    def is_valid_email(self, value: Optional[str]) -> bool:
        return value is not None and bool(EMAIL_PATTERN.match(value))

    def is_valid_url(self, value: Optional[str]) -> bool:
        return value is not None and bool(URL_PATTERN.match(value))

    def trim_input(self, value: Optional[str]) -> Optional[str]:
        return None if value is None else value.strip()

    def sanitize_input(self, value: Optional[str], context: Optional[str]) -> Optional[str]:
        """
        Sanitize for a named context: SQL, XSS or TRIM.

        Unknown contexts leave the value untouched.
        """
        if value is None or context is None:
            return value

        handlers = {
            "SQL": self.sanitize_for_sql,
            "XSS": self.sanitize_for_xss,
            "TRIM": self.trim_input,
        }
        handler = handlers.get(context.upper())
        if handler is None:
            logger.warning(f"Unsupported sanitization context: {context}")
            return value
        return handler(value)


_default = InputSanitizer()

# Module-level shortcuts, usable as fuzz targets
sanitize_for_sql = _default.sanitize_for_sql
sanitize_for_xss = _default.sanitize_for_xss

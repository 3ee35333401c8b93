"""
Log sanitization to keep credentials out of plain-text logs.

Redacts:
- Bearer tokens and raw JWTs
- Passwords and password confirmations
- Secrets and Authorization headers
- Database URLs with passwords
"""
import re
import logging


class SanitizingFormatter(logging.Formatter):
    """
    Log formatter that redacts credentials after formatting the record.
    """

    PATTERNS = [
        # Bearer tokens
        (re.compile(r'Bearer\s+([a-zA-Z0-9_\-\.]{20,})', re.IGNORECASE), r'Bearer [REDACTED]'),

        # JWT tokens (header.payload.signature format)
        (re.compile(r'eyJ[a-zA-Z0-9_\-]+\.eyJ[a-zA-Z0-9_\-]+\.[a-zA-Z0-9_\-]+'), r'[REDACTED_JWT]'),

        # Passwords
        (re.compile(r'password(_confirmation)?["\s:=]+([^\s,\]}"\']+)', re.IGNORECASE), r'password=[REDACTED]'),

        # Secrets
        (re.compile(r'secret(_key)?["\s:=]+([a-zA-Z0-9_\-]{16,})', re.IGNORECASE), r'secret=[REDACTED]'),

        # Database URLs with passwords
        (re.compile(r'://([^:/\s]+):([^@\s]+)@'), r'://\1:[REDACTED]@'),

        # Authorization headers
        (re.compile(r'Authorization["\s:]+([^\s,\]}"\']+)', re.IGNORECASE), r'Authorization: [REDACTED]'),
    ]

    @classmethod
    def sanitize(cls, text):
        for pattern, replacement in cls.PATTERNS:
            text = pattern.sub(replacement, text)
        return text

    def format(self, record):
        return self.sanitize(super().format(record))


class SanitizingFilter(logging.Filter):
    """
    Logging filter that sanitizes the message and its args before formatting.
    """

    def filter(self, record):
        if isinstance(record.msg, str):
            record.msg = SanitizingFormatter.sanitize(record.msg)

        if record.args and isinstance(record.args, tuple):
            record.args = tuple(
                SanitizingFormatter.sanitize(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )

        return True


def sanitize_url(url: str) -> str:
    """
    Remove the password from a connection string.

        >>> sanitize_url('postgres://rrhh:secreto@db/rrhh')
        'postgres://rrhh:[REDACTED]@db/rrhh'
    """
    if not url:
        return url
    return re.sub(r'://([^:/\s]+):([^@\s]+)@', r'://\1:[REDACTED]@', url)

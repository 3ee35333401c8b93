"""
Custom logging formatters for structured JSON logging.
"""
import json
import logging
import re
import traceback
from datetime import datetime, timezone as dt_timezone
from django.utils import timezone
import sentry_sdk


class PIIMasker:
    """
    Utility class to mask sensitive personal data in logs.
    """

    EMAIL_PATTERN = re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b')
    SECRET_PATTERN = re.compile(
        r'(token|secret|password|authorization)["\']?\s*[:=]\s*["\']?([^"\'\s,}]+)',
        re.IGNORECASE,
    )
    BEARER_PATTERN = re.compile(r'Bearer\s+[A-Za-z0-9\-._~+/]+=*', re.IGNORECASE)

    # Field names whose values are never logged
    SENSITIVE_FIELDS = {
        'password', 'password_hash', 'password_confirmation',
        'token', 'access_token', 'jti', 'authorization',
        'secret', 'secret_key', 'jwt_secret_key',
    }

    # Field names whose values are partially masked
    PARTIAL_FIELDS = {'email', 'user_email', 'contacto'}

    @classmethod
    def mask_email(cls, text):
        """Mask email addresses in text, keeping the first letter and domain."""
        if not isinstance(text, str):
            return text

        def mask_email_match(match):
            username, _, domain = match.group(0).partition('@')
            if len(username) > 1:
                username = username[0] + '*' * (len(username) - 1)
            return f"{username}@{domain}"

        return cls.EMAIL_PATTERN.sub(mask_email_match, text)

    @classmethod
    def mask_secrets(cls, text):
        """Mask bearer tokens, passwords and secrets in text."""
        if not isinstance(text, str):
            return text
        text = cls.BEARER_PATTERN.sub('Bearer ********', text)
        return cls.SECRET_PATTERN.sub(r'\1: ********', text)

    @classmethod
    def mask_text(cls, text):
        """Apply all masking patterns to text."""
        if not isinstance(text, str):
            return text
        return cls.mask_secrets(cls.mask_email(text))

    @classmethod
    def mask_dict(cls, data):
        """Recursively mask sensitive data in dictionaries."""
        if not isinstance(data, dict):
            return data

        masked = {}
        for key, value in data.items():
            lowered = str(key).lower()
            if lowered in cls.SENSITIVE_FIELDS:
                masked[key] = '********' if value else value
            elif lowered in cls.PARTIAL_FIELDS and isinstance(value, str):
                masked[key] = cls.mask_email(value) if '@' in value else value[:2] + '*' * max(len(value) - 2, 0)
            elif isinstance(value, dict):
                masked[key] = cls.mask_dict(value)
            elif isinstance(value, list):
                masked[key] = [
                    cls.mask_dict(item) if isinstance(item, dict) else cls.mask_text(item)
                    for item in value
                ]
            elif isinstance(value, str):
                masked[key] = cls.mask_text(value)
            else:
                masked[key] = value

        return masked


class JSONFormatter(logging.Formatter):
    """
    Format log records as JSON for structured logging.
    Includes request_id from the record when available and masks personal data.
    """

    RESERVED_ATTRS = {
        'name', 'msg', 'args', 'created', 'filename', 'funcName',
        'levelname', 'levelno', 'lineno', 'module', 'msecs', 'message',
        'pathname', 'process', 'processName', 'relativeCreated',
        'thread', 'threadName', 'exc_info', 'exc_text', 'stack_info',
        'taskName', 'request_id',
    }

    def format(self, record):
        log_data = {
            'timestamp': datetime.now(dt_timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': PIIMasker.mask_text(record.getMessage()),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if getattr(record, 'request_id', None):
            log_data['request_id'] = record.request_id

        if record.exc_info:
            log_data['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': PIIMasker.mask_text(str(record.exc_info[1])),
                'traceback': [
                    PIIMasker.mask_text(line)
                    for line in traceback.format_exception(*record.exc_info)
                ],
            }

        for key, value in record.__dict__.items():
            if key in self.RESERVED_ATTRS or key.startswith('_'):
                continue
            if isinstance(value, dict):
                value = PIIMasker.mask_dict(value)
            elif isinstance(value, str):
                value = PIIMasker.mask_dict({key: value})[key]
            try:
                json.dumps(value)
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = PIIMasker.mask_text(str(value))

        return json.dumps(log_data)


class SecurityLogger:
    """
    Centralized logging for security events.

    Every event goes to the ``security`` logger with structured data.
    Critical events are additionally sent to Sentry for alerting.
    """

    CRITICAL_EVENTS = {
        'revoked_token_used',
        'suspicious_activity',
    }

    @staticmethod
    def log_event(event_type: str, level: str = 'warning', **context):
        """
        Log a security event with structured data.

        Args:
            event_type: Type of security event (e.g., 'failed_login')
            level: Log level ('info', 'warning', 'error', 'critical')
            **context: Additional context data (ip_address, user_email, ...)
        """
        logger = logging.getLogger('security')

        log_data = {
            'event_type': event_type,
            'timestamp': timezone.now().isoformat(),
        }
        log_data.update(context)
        log_data = PIIMasker.mask_dict(log_data)

        log_method = getattr(logger, level, logger.warning)
        log_method(f"Security event: {event_type}", extra=log_data)

        if event_type in SecurityLogger.CRITICAL_EVENTS:
            sentry_sdk.capture_message(
                f"Critical security event: {event_type}",
                level='error',
            )

    @staticmethod
    def log_failed_login(email: str, ip_address: str, user_agent: str = None, reason: str = None):
        SecurityLogger.log_event(
            'failed_login',
            level='warning',
            email=email,
            ip_address=ip_address,
            user_agent=user_agent,
            reason=reason,
        )

    @staticmethod
    def log_permission_denied(user_email: str, required_permission: str, endpoint: str = None,
                              ip_address: str = None):
        SecurityLogger.log_event(
            'permission_denied',
            level='warning',
            user_email=user_email,
            required_permission=required_permission,
            endpoint=endpoint,
            ip_address=ip_address,
        )

    @staticmethod
    def log_rate_limit_exceeded(endpoint: str, ip_address: str, user_email: str = None,
                                limit: str = None):
        """
        Log a rate limit violation.

        Args:
            endpoint: API endpoint that was rate limited
            ip_address: IP address of the request
            user_email: Email sent in the request body, if any
            limit: Rate limit that was exceeded (e.g., '5/min')
        """
        SecurityLogger.log_event(
            'rate_limit_exceeded',
            level='warning',
            endpoint=endpoint,
            ip_address=ip_address,
            user_email=user_email,
            limit=limit,
        )

    @staticmethod
    def log_revoked_token_used(user_id: str, ip_address: str = None):
        """A token that was revoked on logout was presented again."""
        SecurityLogger.log_event(
            'revoked_token_used',
            level='error',
            user_id=user_id,
            ip_address=ip_address,
        )

"""
Logging filters that keep credentials and personal data out of log output.
"""
import logging
import re

from core.middleware import current_request_id


def _sanitize(value, patterns):
    for pattern, replacement in patterns:
        value = pattern.sub(replacement, value)
    return value


class SanitizeAPIKeyFilter(logging.Filter):
    """
    Removes API keys and secrets from log records before they are emitted.

    Detected patterns:
    - Stripe secret, restricted and webhook keys (sk_, rk_, whsec_)
    - Stripe client secrets (pi_..._secret_...)
    - Secrets in KEY=value form
    - Bearer tokens in Authorization headers
    - Generic secrets in JSON bodies
    """

    PATTERNS = [
        (
            re.compile(r'\b((?:sk|rk)_(?:live|test)_)[A-Za-z0-9]{8,}'),
            r'\1***REDACTED***'
        ),
        (
            re.compile(r'\b(whsec_)[A-Za-z0-9]{8,}'),
            r'\1***REDACTED***'
        ),
        (
            re.compile(r'\b(pi_[A-Za-z0-9]+_secret_)[A-Za-z0-9]+'),
            r'\1***REDACTED***'
        ),
        (
            re.compile(r'((?:STRIPE_SECRET_KEY|STRIPE_WEBHOOK_SECRET|SECRET_KEY)["\']?\s*[:=]\s*["\']?)([A-Za-z0-9_-]{8,})'),
            r'\1***REDACTED***'
        ),
        (
            re.compile(r'(Authorization:\s*Bearer\s+)([A-Za-z0-9_.-]{20,})'),
            r'\1***REDACTED***'
        ),
        (
            re.compile(r'(["\'](?:api_key|apiKey|token|secret|password|client_secret)["\']:\s*["\'])([^"\']{8,})(["\'])'),
            r'\1***REDACTED***\3'
        ),
    ]

    def filter(self, record):
        """
        Sanitize the message and its arguments. Never drops the record.
        """
        if isinstance(record.msg, str):
            record.msg = _sanitize(record.msg, self.PATTERNS)

        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    key: _sanitize(value, self.PATTERNS) if isinstance(value, str) else value
                    for key, value in record.args.items()
                }
            elif isinstance(record.args, (tuple, list)):
                sanitized_args = [
                    _sanitize(arg, self.PATTERNS) if isinstance(arg, str) else arg
                    for arg in record.args
                ]
                record.args = tuple(sanitized_args) if isinstance(record.args, tuple) else sanitized_args

        return True


class SanitizePIIFilter(logging.Filter):
    """
    Removes personally identifiable information (emails, phone numbers).
    """

    PATTERNS = [
        (
            re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b'),
            '***EMAIL***'
        ),
        (
            re.compile(r'\+\d{1,3}[-.\s]?\(?\d{1,4}\)?[-.\s]?\d{3,4}[-.\s]?\d{3,4}\b'),
            '***PHONE***'
        ),
    ]

    def filter(self, record):
        if isinstance(record.msg, str):
            record.msg = _sanitize(record.msg, self.PATTERNS)
        return True


class RequestIDFilter(logging.Filter):
    """Exposes the current X-Request-ID as ``record.request_id``."""

    def filter(self, record):
        record.request_id = current_request_id.get()
        return True

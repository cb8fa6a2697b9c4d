"""Record filters applied by the root handler."""

import logging
import re


class PIIFilter(logging.Filter):
    """Masks e-mail addresses and phone numbers such as ``+1-555-0101``.

    Digit runs longer than a phone number (epoch-millisecond request and
    transfer ids) are left intact.
    """

    EMAIL_PATTERN = re.compile(r"[\w.+-]+@[\w-]+\.[\w.-]+")
    PHONE_PATTERN = re.compile(
        r"(?<!\d)(?:\+\d{1,3}[-.\s])?"
        r"(?:\d{3}[-.\s]\d{4}|\d{3}[-.\s]?\d{3}[-.\s]?\d{4})(?!\d)"
    )

    def filter(self, record: logging.LogRecord) -> bool:
        text = record.msg
        if not isinstance(text, str):
            return True
        if "@" in text:
            text = self.EMAIL_PATTERN.sub("[EMAIL]", text)
        if any(ch.isdigit() for ch in text):
            text = self.PHONE_PATTERN.sub("[PHONE]", text)
        record.msg = text
        return True


class DefaultCorrelationFilter(logging.Filter):
    """Gives records logged outside any session a ``-`` correlation id."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.__dict__.setdefault("correlation_id", "-")
        return True

"""Provider payload translation for the inbound email webhook.

Maps the JSON bodies posted by Resend, Postmark or a generic sender onto
the canonical InboundEmailPayload. Shape detection order:

1. Resend: {"type": "email.received", "data": {...}}
2. Postmark: top-level MessageID or OriginalRecipient
3. Generic: top-level "from" and "to"

Anything else is rejected with InvalidPayloadError, as are scalar fields
(subject, bodies, dates, ids) that are present but not strings. Address
entries and header values that are not strings are dropped.
"""

import random
import string
import time
from typing import Any, Optional

from ...domain.ingestion.models import InboundEmailPayload

NO_SUBJECT = "(no subject)"

_BASE36 = string.digits + string.ascii_lowercase


class InvalidPayloadError(ValueError):
    """Webhook body matches no known provider shape."""


def generate_message_id() -> str:
    """Fallback message id: <epoch-ms>-<random base36>."""
    suffix = "".join(random.choices(_BASE36, k=11))
    return f"{int(time.time() * 1000)}-{suffix}"


def convert_postmark_headers(headers: Optional[list[dict[str, Any]]]) -> dict[str, str]:
    """Turn Postmark's [{"Name": ..., "Value": ...}] list into a lower-cased map.

    Later entries win when a header name repeats. Entries without a string
    name and value are skipped.
    """
    if not headers:
        return {}
    converted = {}
    for header in headers:
        if not isinstance(header, dict):
            continue
        name, value = header.get("Name"), header.get("Value", "")
        if name and isinstance(name, str) and isinstance(value, str):
            converted[name.lower()] = value
    return converted


def _lower_header_keys(headers: Any) -> dict[str, str]:
    if isinstance(headers, list):
        return convert_postmark_headers(headers)
    if not isinstance(headers, dict):
        return {}
    return {
        str(name).lower(): value
        for name, value in headers.items()
        if isinstance(value, str)
    }


def _as_list(value: Any) -> list[str]:
    """Accept a single address or a list of addresses; non-strings are dropped."""
    if isinstance(value, str):
        return [value] if value else []
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str) and item]
    return []


def _split_addresses(value: Any) -> list[str]:
    """Postmark sends To/Cc/Bcc as comma-joined strings."""
    if isinstance(value, list):
        return _as_list(value)
    if not isinstance(value, str):
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _text(body: dict[str, Any], *keys: str) -> Optional[str]:
    """First non-empty value among keys; it must be a string."""
    for key in keys:
        value = body.get(key)
        if value is None or value == "":
            continue
        if not isinstance(value, str):
            raise InvalidPayloadError(f"Field {key!r} must be a string")
        return value
    return None


def _require_sender(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidPayloadError("Payload has no sender address")
    return value


def _from_resend(data: dict[str, Any]) -> InboundEmailPayload:
    return InboundEmailPayload(
        message_id=_text(data, "email_id") or generate_message_id(),
        from_=_require_sender(data.get("from")),
        to=_as_list(data.get("to")),
        cc=_as_list(data.get("cc")),
        bcc=_as_list(data.get("bcc")),
        subject=_text(data, "subject") or NO_SUBJECT,
        text_body=_text(data, "text"),
        html_body=_text(data, "html"),
        sent_at=_text(data, "created_at"),
        headers=_lower_header_keys(data.get("headers")),
    )


def _from_postmark(body: dict[str, Any]) -> InboundEmailPayload:
    headers = body.get("Headers")
    return InboundEmailPayload(
        message_id=_text(body, "MessageID") or generate_message_id(),
        from_=_require_sender(body.get("From")),
        to=_split_addresses(body.get("To")),
        cc=_split_addresses(body.get("Cc")),
        bcc=_split_addresses(body.get("Bcc")),
        subject=_text(body, "Subject") or NO_SUBJECT,
        text_body=_text(body, "TextBody"),
        html_body=_text(body, "HtmlBody"),
        sent_at=_text(body, "Date"),
        headers=convert_postmark_headers(headers if isinstance(headers, list) else None),
    )


def _from_generic(body: dict[str, Any]) -> InboundEmailPayload:
    return InboundEmailPayload(
        message_id=_text(body, "messageId") or generate_message_id(),
        from_=_require_sender(body.get("from")),
        to=_as_list(body.get("to")),
        cc=_as_list(body.get("cc")),
        bcc=_as_list(body.get("bcc")),
        subject=_text(body, "subject") or NO_SUBJECT,
        text_body=_text(body, "textBody", "text"),
        html_body=_text(body, "htmlBody", "html"),
        sent_at=_text(body, "sentAt", "date"),
        headers=_lower_header_keys(body.get("headers")),
    )


def transform_payload(body: Any) -> InboundEmailPayload:
    """Translate a provider webhook body into an InboundEmailPayload.

    Args:
        body: Decoded JSON body

    Returns:
        Canonical payload

    Raises:
        InvalidPayloadError: Body is not an object, matches no known
            provider shape, has no sender, or carries a non-string
            scalar field
    """
    if not isinstance(body, dict):
        raise InvalidPayloadError("Payload must be a JSON object")

    if body.get("type") == "email.received" and isinstance(body.get("data"), dict):
        return _from_resend(body["data"])

    if body.get("MessageID") or body.get("OriginalRecipient"):
        return _from_postmark(body)

    if body.get("from") and body.get("to"):
        return _from_generic(body)

    raise InvalidPayloadError("Unrecognized inbound email payload")

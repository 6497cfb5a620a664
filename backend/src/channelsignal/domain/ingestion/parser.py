"""Inbound payload normalization.

Turns a canonical InboundEmailPayload into a ParsedEmail, derives the thread
id from reply headers, locates the system-owned routing address and extracts
the participants of a message in a fixed order: sender, To, Cc.
"""

import logging
import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Iterable, Optional

from .address import extract_domain, parse_email_address
from .models import ExtractedContact, InboundEmailPayload, ParsedEmail

logger = logging.getLogger(__name__)

ROUTING_LOCAL_PREFIX = "u_"
ROUTING_DOMAIN_PREFIX = "in."

_ANGLE_BRACKETS_RE = re.compile(r'[<>]')


def is_routing_address(email: Optional[str]) -> bool:
    """Check whether an address has the routing shape u_<id>@in.<domain>.

    Examples:
        u_abc123@in.channelsignal.com → True
        u_abc123@channelsignal.com    → False
        jane@in.channelsignal.com     → False
    """
    if not email:
        return False
    local, sep, domain = email.strip().lower().rpartition("@")
    if not sep:
        return False
    return local.startswith(ROUTING_LOCAL_PREFIX) and domain.startswith(ROUTING_DOMAIN_PREFIX)


def extract_thread_id(headers: Optional[dict[str, str]]) -> Optional[str]:
    """Derive a thread id from In-Reply-To, falling back to the first References entry."""
    if not headers:
        return None

    in_reply_to = headers.get("in-reply-to")
    if in_reply_to:
        return _ANGLE_BRACKETS_RE.sub("", in_reply_to).strip() or None

    references = headers.get("references")
    if references:
        refs = references.split()
        if refs:
            return _ANGLE_BRACKETS_RE.sub("", refs[0]) or None

    return None


def parse_sent_at(value: Optional[str]) -> datetime:
    """Parse an ISO-8601 (or RFC 2822) timestamp; default to now in UTC.

    Naive timestamps are taken to be UTC.
    """
    if not value:
        return datetime.now(timezone.utc)

    text = value.strip()
    parsed: Optional[datetime] = None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError):
            logger.warning(f"Unparseable sentAt value {value!r}, using current time")
            return datetime.now(timezone.utc)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def find_bcc_recipient(bcc: Iterable[str]) -> Optional[str]:
    """Return the first Bcc address with the routing shape, normalized."""
    for raw in bcc:
        email = parse_email_address(raw).email
        if is_routing_address(email):
            return email
    return None


def find_routing_address(parsed: ParsedEmail) -> Optional[str]:
    """Routing address for a parsed email: the Bcc match, else the first matching To address.

    Many mail systems echo the Bcc recipient into To, so both are checked.
    """
    if parsed.bcc_recipient:
        return parsed.bcc_recipient
    for email in parsed.to_addresses:
        if is_routing_address(email):
            return email
    return None


def parse_inbound_email(payload: InboundEmailPayload) -> ParsedEmail:
    """Normalize a canonical payload.

    The subject is kept verbatim; defaulting a missing subject is the job of
    the payload transformer at the webhook boundary.
    """
    sender = parse_email_address(payload.from_)

    return ParsedEmail(
        message_id=payload.message_id,
        thread_id=extract_thread_id(payload.headers),
        from_address=sender.email,
        from_name=sender.name,
        to_addresses=[parse_email_address(addr).email for addr in payload.to],
        cc_addresses=[parse_email_address(addr).email for addr in payload.cc or []],
        subject=payload.subject,
        text_body=payload.text_body or None,
        html_body=payload.html_body or None,
        sent_at=parse_sent_at(payload.sent_at),
        bcc_recipient=find_bcc_recipient(payload.bcc or []),
    )


def extract_contacts(payload: InboundEmailPayload) -> list[ExtractedContact]:
    """Collect the participants of a message.

    Order is sender, then To, then Cc. Routing addresses in To/Cc are
    skipped and duplicates are dropped with the first occurrence kept, so
    the sender always wins over a later To/Cc entry for the same address.
    """
    contacts: dict[str, ExtractedContact] = {}

    sender = parse_email_address(payload.from_)
    contacts[sender.email] = ExtractedContact(
        email=sender.email,
        name=sender.name,
        domain=extract_domain(sender.email),
    )

    for raw in list(payload.to) + list(payload.cc or []):
        parsed = parse_email_address(raw)
        if is_routing_address(parsed.email):
            continue
        if parsed.email in contacts:
            continue
        contacts[parsed.email] = ExtractedContact(
            email=parsed.email,
            name=parsed.name,
            domain=extract_domain(parsed.email),
        )

    return list(contacts.values())

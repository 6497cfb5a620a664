"""Address and domain normalization.

Parses "Name <email>" header values, extracts domains and tells personal
webmail domains apart from corporate ones. Personal-domain participants get
a Contact but never an Org.
"""

import re
from typing import Optional

from .models import ParsedAddress


PERSONAL_DOMAINS = frozenset({
    "gmail.com",
    "googlemail.com",
    "outlook.com",
    "hotmail.com",
    "live.com",
    "msn.com",
    "yahoo.com",
    "ymail.com",
    "aol.com",
    "icloud.com",
    "me.com",
    "mac.com",
    "proton.me",
    "protonmail.com",
    "tutanota.com",
    "fastmail.com",
    "zoho.com",
})

# Display name (optionally quoted) followed by <address>
_NAMED_ADDRESS_RE = re.compile(r'^(.*?)\s*<([^<>]*)>$')


def parse_email_address(raw: str) -> ParsedAddress:
    """Parse an address header value into name and email.

    Accepts '"Display Name" <addr>', 'Name <addr>', '<addr>' and 'addr'.

    Examples:
        'John Doe <JOHN@Example.com>' → ParsedAddress(email='john@example.com', name='John Doe')
        'john@example.com'            → ParsedAddress(email='john@example.com', name=None)
    """
    value = (raw or "").strip()
    match = _NAMED_ADDRESS_RE.match(value)
    if not match:
        return ParsedAddress(email=value.lower(), name=None)

    name = match.group(1).strip().strip('"\'').strip()
    return ParsedAddress(
        email=match.group(2).strip().lower(),
        name=name or None,
    )


def extract_domain(email: str) -> Optional[str]:
    """Return the lower-cased domain, or None unless there is exactly one '@'."""
    parts = email.split("@")
    if len(parts) != 2:
        return None
    return parts[1].lower()


def is_personal_domain(domain: Optional[str]) -> bool:
    """True for consumer webmail domains, and for missing domains."""
    if not domain:
        return True
    return domain.lower() in PERSONAL_DOMAINS

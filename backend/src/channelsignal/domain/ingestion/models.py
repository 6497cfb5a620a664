"""Ingestion Domain Models

Dataclasses passed between the normalizer, the resolvers and the
persistence port. Repository adapters return the *Record types so the
pipeline never touches ORM instances directly.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID


@dataclass
class InboundEmailPayload:
    """Canonical inbound email, already translated from the provider's wire format.

    from_ carries the trailing underscore because "from" is a keyword.
    headers keys are expected to be lower-cased.
    """
    message_id: str
    from_: str
    to: list[str]
    subject: str
    cc: list[str] = field(default_factory=list)
    bcc: list[str] = field(default_factory=list)
    text_body: Optional[str] = None
    html_body: Optional[str] = None
    sent_at: Optional[str] = None  # ISO-8601
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ParsedAddress:
    """Result of parsing one address header value."""
    email: str
    name: Optional[str] = None


@dataclass
class ParsedEmail:
    """Normalized view of an inbound payload."""
    message_id: str
    thread_id: Optional[str]
    from_address: str
    from_name: Optional[str]
    to_addresses: list[str]
    cc_addresses: list[str]
    subject: str
    text_body: Optional[str]
    html_body: Optional[str]
    sent_at: datetime
    bcc_recipient: Optional[str]


@dataclass(frozen=True)
class ExtractedContact:
    """A participant of one message, in extraction order."""
    email: str
    name: Optional[str]
    domain: Optional[str]


@dataclass
class UserRecord:
    id: UUID
    email: str
    bcc_address: str
    name: Optional[str] = None


@dataclass
class OrgRecord:
    id: UUID
    user_id: UUID
    domain: str
    name: str


@dataclass
class ContactRecord:
    id: UUID
    user_id: UUID
    email: str
    name: Optional[str]
    org_id: Optional[UUID]


@dataclass
class MeetingRecord:
    id: UUID
    user_id: UUID
    title: str
    meeting_type: str
    org_id: Optional[UUID]
    created_at: Optional[datetime] = None


@dataclass
class NewEmailMessage:
    """Everything needed to insert one EmailMessage row."""
    user_id: UUID
    message_id: str
    thread_id: Optional[str]
    from_address: str
    to_addresses: list[str]
    cc_addresses: list[str]
    subject: str
    text_body: Optional[str]
    html_body: Optional[str]
    sent_at: datetime
    meeting_id: Optional[UUID] = None
    deal_id: Optional[UUID] = None

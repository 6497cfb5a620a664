"""Inbound email ingestion: normalization, classification and resolution."""

from .address import PERSONAL_DOMAINS, extract_domain, is_personal_domain, parse_email_address
from .classifier import MeetingType, classify_meeting
from .handler import InboundEmailHandler, IngestionOutcome, handle_inbound_email
from .models import (
    ExtractedContact,
    InboundEmailPayload,
    ParsedAddress,
    ParsedEmail,
)
from .parser import (
    extract_contacts,
    extract_thread_id,
    find_routing_address,
    is_routing_address,
    parse_inbound_email,
)
from .ports import DuplicateMessageError, IngestionRepositoryPort, PersistenceConflictError
from .resolvers import format_org_name, upsert_contact, upsert_meeting, upsert_org

__all__ = [
    "PERSONAL_DOMAINS",
    "extract_domain",
    "is_personal_domain",
    "parse_email_address",
    "MeetingType",
    "classify_meeting",
    "InboundEmailHandler",
    "IngestionOutcome",
    "handle_inbound_email",
    "ExtractedContact",
    "InboundEmailPayload",
    "ParsedAddress",
    "ParsedEmail",
    "extract_contacts",
    "extract_thread_id",
    "find_routing_address",
    "is_routing_address",
    "parse_inbound_email",
    "DuplicateMessageError",
    "IngestionRepositoryPort",
    "PersistenceConflictError",
    "format_org_name",
    "upsert_contact",
    "upsert_meeting",
    "upsert_org",
]

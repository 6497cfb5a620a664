"""Find-or-create logic for orgs, contacts and meetings.

Each resolver looks a record up by its natural key and creates it when
absent. If a concurrent delivery creates the same key between the lookup
and the insert, the adapter raises PersistenceConflictError and the
resolver re-reads the winning row instead of failing.
"""

import logging
import re
from typing import Optional
from uuid import UUID

from ...observability.metrics import entities_created_total
from .classifier import MeetingType
from .models import ContactRecord, ExtractedContact, MeetingRecord, OrgRecord
from .ports import IngestionRepositoryPort, PersistenceConflictError

logger = logging.getLogger(__name__)

_KNOWN_TLD_RE = re.compile(r'\.(com|io|co|org|net|app|dev)$')
_SEPARATOR_RE = re.compile(r'[-_]')


def format_org_name(domain: str) -> str:
    """Derive a readable organization name from its domain.

    Examples:
        acme-corp.com     → 'Acme Corp'
        big_data.io       → 'Big Data'
        example.co.uk     → 'Example.co.uk'
    """
    name = _KNOWN_TLD_RE.sub("", domain)
    name = _SEPARATOR_RE.sub(" ", name)
    name = " ".join(word[:1].upper() + word[1:] for word in name.split(" ")).strip()
    return name or domain


async def upsert_org(repo: IngestionRepositoryPort, user_id: UUID, domain: str) -> OrgRecord:
    """Return the user's org for a domain, creating it on first sight.

    Existing orgs are never renamed.
    """
    org = await repo.find_org(user_id, domain)
    if org:
        return org

    try:
        org = await repo.create_org(user_id, domain, format_org_name(domain))
    except PersistenceConflictError:
        logger.info(f"Org for domain {domain} created concurrently, re-reading")
        org = await repo.find_org(user_id, domain)
        if org is None:
            raise
        return org

    entities_created_total.labels(entity="org").inc()
    logger.info(f"Created org {org.name!r} for domain {domain}", extra={"user_id": user_id})
    return org


async def upsert_contact(
    repo: IngestionRepositoryPort,
    user_id: UUID,
    contact: ExtractedContact,
    org_id: Optional[UUID],
) -> ContactRecord:
    """Return the user's contact for an email, creating or backfilling it.

    A missing stored name is filled from the incoming one; a stored name is
    never overwritten. The org link of an existing contact never changes.
    """
    existing = await repo.find_contact(user_id, contact.email)

    if existing is None:
        try:
            created = await repo.create_contact(user_id, contact.email, contact.name, org_id)
        except PersistenceConflictError:
            logger.info(f"Contact {contact.email} created concurrently, re-reading")
            existing = await repo.find_contact(user_id, contact.email)
            if existing is None:
                raise
        else:
            entities_created_total.labels(entity="contact").inc()
            return created

    if contact.name and not existing.name:
        await repo.update_contact_name(existing.id, contact.name)
        existing.name = contact.name
        logger.debug(f"Backfilled name for contact {contact.email}")

    return existing


async def upsert_meeting(
    repo: IngestionRepositoryPort,
    user_id: UUID,
    title: str,
    meeting_type: MeetingType,
    org_id: Optional[UUID],
) -> MeetingRecord:
    """Return the newest meeting with this title (any case), or create one.

    A found meeting is returned as stored, even if this email implies a
    different type or org.
    """
    meeting = await repo.find_latest_meeting_by_title(user_id, title)
    if meeting:
        return meeting

    meeting = await repo.create_meeting(user_id, title, meeting_type.value, org_id)
    entities_created_total.labels(entity="meeting").inc()
    logger.info(f"Created {meeting_type.value} meeting {title!r}", extra={"user_id": user_id})
    return meeting

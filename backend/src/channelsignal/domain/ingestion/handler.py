"""Inbound email ingestion pipeline.

Processes one canonical inbound email payload end to end:
1. Normalize the payload
2. Find the routing address (Bcc first, then To)
3. Resolve the owning user
4. Extract participants (sender, To, Cc)
5. Upsert orgs and contacts per participant
6. Classify the subject and upsert a meeting
7. Record the email message

Unroutable mail and mail for unknown routing addresses is dropped and
logged. A duplicate (user_id, message_id) is a successful no-op, since
providers retry webhooks. Everything else propagates to the caller.
"""

import logging
import time
from enum import Enum
from typing import Optional
from uuid import UUID

from ...observability.metrics import inbound_emails_total, ingestion_duration_seconds
from .address import is_personal_domain
from .classifier import classify_meeting
from .models import InboundEmailPayload, NewEmailMessage
from .parser import extract_contacts, find_routing_address, parse_inbound_email
from .ports import DuplicateMessageError, IngestionRepositoryPort
from .resolvers import upsert_contact, upsert_meeting, upsert_org

logger = logging.getLogger(__name__)


class IngestionOutcome(str, Enum):
    """How a single delivery ended. Only FAILED is an error for the caller."""
    PROCESSED = "processed"
    DUPLICATE = "duplicate"
    UNROUTABLE = "unroutable"
    UNKNOWN_RECIPIENT = "unknown_recipient"
    FAILED = "failed"


class InboundEmailHandler:
    """Runs the ingestion pipeline against a persistence port.

    One instance can serve many deliveries; all per-message state lives in
    local variables of handle().
    """

    def __init__(self, repository: IngestionRepositoryPort):
        """Initialize handler.

        Args:
            repository: Persistence adapter (IngestionRepositoryPort)
        """
        self.repository = repository

    async def handle(self, payload: InboundEmailPayload) -> IngestionOutcome:
        """Process one inbound email payload.

        Returns:
            IngestionOutcome: PROCESSED, DUPLICATE, UNROUTABLE or UNKNOWN_RECIPIENT

        Raises:
            Exception: Any persistence failure other than a duplicate message
        """
        start = time.perf_counter()
        try:
            outcome = await self._process(payload)
        except Exception:
            inbound_emails_total.labels(outcome=IngestionOutcome.FAILED.value).inc()
            raise
        finally:
            ingestion_duration_seconds.observe(time.perf_counter() - start)

        inbound_emails_total.labels(outcome=outcome.value).inc()
        return outcome

    async def _process(self, payload: InboundEmailPayload) -> IngestionOutcome:
        parsed = parse_inbound_email(payload)

        bcc_address = find_routing_address(parsed)
        if not bcc_address:
            logger.warning(
                "No valid routing address found in email, dropping",
                extra={"message_id": parsed.message_id, "outcome": IngestionOutcome.UNROUTABLE.value},
            )
            return IngestionOutcome.UNROUTABLE

        user = await self.repository.find_user_by_bcc_address(bcc_address)
        if not user:
            logger.warning(
                f"No user found for routing address: {bcc_address}, dropping",
                extra={"message_id": parsed.message_id, "outcome": IngestionOutcome.UNKNOWN_RECIPIENT.value},
            )
            return IngestionOutcome.UNKNOWN_RECIPIENT

        participants = extract_contacts(payload)

        contact_to_org: dict[str, Optional[UUID]] = {}
        for contact in participants:
            if is_personal_domain(contact.domain):
                await upsert_contact(self.repository, user.id, contact, None)
                contact_to_org[contact.email] = None
                continue

            org = await upsert_org(self.repository, user.id, contact.domain)
            await upsert_contact(self.repository, user.id, contact, org.id)
            contact_to_org[contact.email] = org.id

        meeting_id: Optional[UUID] = None
        meeting_type = classify_meeting(parsed.subject)
        if meeting_type:
            # The first participant (normally the sender) decides the meeting's org
            primary = participants[0] if participants else None
            org_id = contact_to_org.get(primary.email) if primary else None
            meeting = await upsert_meeting(
                self.repository,
                user.id,
                parsed.subject,
                meeting_type,
                org_id,
            )
            meeting_id = meeting.id

        try:
            await self.repository.create_email_message(
                NewEmailMessage(
                    user_id=user.id,
                    message_id=parsed.message_id,
                    thread_id=parsed.thread_id,
                    from_address=parsed.from_address,
                    to_addresses=parsed.to_addresses,
                    cc_addresses=parsed.cc_addresses,
                    subject=parsed.subject,
                    text_body=parsed.text_body,
                    html_body=parsed.html_body,
                    sent_at=parsed.sent_at,
                    meeting_id=meeting_id,
                    deal_id=None,
                )
            )
        except DuplicateMessageError:
            logger.info(
                f"Email {parsed.message_id} already processed",
                extra={"user_id": user.id, "message_id": parsed.message_id,
                       "outcome": IngestionOutcome.DUPLICATE.value},
            )
            return IngestionOutcome.DUPLICATE

        logger.info(
            f"Processed email for user {user.id}: {parsed.subject}",
            extra={"user_id": user.id, "message_id": parsed.message_id,
                   "outcome": IngestionOutcome.PROCESSED.value},
        )
        return IngestionOutcome.PROCESSED


async def handle_inbound_email(
    payload: InboundEmailPayload,
    repository: IngestionRepositoryPort,
) -> IngestionOutcome:
    """Process one inbound email payload (see InboundEmailHandler.handle)."""
    return await InboundEmailHandler(repository).handle(payload)

"""Ingestion repository for database operations.

SQLAlchemy implementation of IngestionRepositoryPort. Every write commits
immediately. Unique-key violations are rolled back, confirmed by re-reading
the key, and re-raised as domain conflict errors; any other database error
propagates untouched.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select, update, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.ingestion.models import (
    ContactRecord,
    MeetingRecord,
    NewEmailMessage,
    OrgRecord,
    UserRecord,
)
from ...domain.ingestion.ports import (
    DuplicateMessageError,
    IngestionRepositoryPort,
    PersistenceConflictError,
)
from ...models import Contact, EmailMessage, Meeting, Org, User

logger = logging.getLogger(__name__)


def _user_record(user: User) -> UserRecord:
    return UserRecord(id=user.id, email=user.email, bcc_address=user.bcc_address, name=user.name)


def _org_record(org: Org) -> OrgRecord:
    return OrgRecord(id=org.id, user_id=org.user_id, domain=org.domain, name=org.name)


def _contact_record(contact: Contact) -> ContactRecord:
    return ContactRecord(
        id=contact.id,
        user_id=contact.user_id,
        email=contact.email,
        name=contact.name,
        org_id=contact.org_id,
    )


def _meeting_record(meeting: Meeting) -> MeetingRecord:
    return MeetingRecord(
        id=meeting.id,
        user_id=meeting.user_id,
        title=meeting.title,
        meeting_type=meeting.meeting_type,
        org_id=meeting.org_id,
        created_at=meeting.created_at,
    )


class SqlAlchemyIngestionRepository(IngestionRepositoryPort):
    """Repository for user, org, contact, meeting and email_message rows."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session (one per inbound email)
        """
        self.session = session

    async def _insert(self, instance) -> None:
        """Add and commit a new row, rolling back on IntegrityError before re-raising."""
        self.session.add(instance)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise

    # Users

    async def find_user_by_bcc_address(self, bcc_address: str) -> Optional[UserRecord]:
        result = await self.session.execute(
            select(User).where(User.bcc_address == bcc_address)
        )
        user = result.scalar_one_or_none()
        return _user_record(user) if user else None

    async def find_user_by_id(self, user_id: UUID) -> Optional[UserRecord]:
        user = await self.session.get(User, user_id)
        return _user_record(user) if user else None

    async def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        result = await self.session.execute(
            select(User).where(User.email == email.strip().lower())
        )
        user = result.scalar_one_or_none()
        return _user_record(user) if user else None

    async def create_user(self, email: str, name: Optional[str], bcc_address: str) -> UserRecord:
        user = User(email=email, name=name, bcc_address=bcc_address)
        try:
            await self._insert(user)
        except IntegrityError:
            result = await self.session.execute(
                select(User.id).where(
                    or_(User.email == email.strip().lower(),
                        User.bcc_address == bcc_address.strip().lower())
                )
            )
            if result.first() is None:
                raise
            raise PersistenceConflictError("user", {"email": email, "bcc_address": bcc_address})
        return _user_record(user)

    # Orgs

    async def find_org(self, user_id: UUID, domain: str) -> Optional[OrgRecord]:
        result = await self.session.execute(
            select(Org).where(Org.user_id == user_id, Org.domain == domain.lower())
        )
        org = result.scalar_one_or_none()
        return _org_record(org) if org else None

    async def create_org(self, user_id: UUID, domain: str, name: str) -> OrgRecord:
        org = Org(user_id=user_id, domain=domain, name=name)
        try:
            await self._insert(org)
        except IntegrityError:
            if await self.find_org(user_id, domain) is None:
                raise
            raise PersistenceConflictError("org", {"user_id": str(user_id), "domain": domain})
        return _org_record(org)

    # Contacts

    async def find_contact(self, user_id: UUID, email: str) -> Optional[ContactRecord]:
        result = await self.session.execute(
            select(Contact).where(Contact.user_id == user_id, Contact.email == email)
        )
        contact = result.scalar_one_or_none()
        return _contact_record(contact) if contact else None

    async def create_contact(
        self,
        user_id: UUID,
        email: str,
        name: Optional[str],
        org_id: Optional[UUID],
    ) -> ContactRecord:
        contact = Contact(user_id=user_id, email=email, name=name, org_id=org_id)
        try:
            await self._insert(contact)
        except IntegrityError:
            if await self.find_contact(user_id, email) is None:
                raise
            raise PersistenceConflictError("contact", {"user_id": str(user_id), "email": email})
        return _contact_record(contact)

    async def update_contact_name(self, contact_id: UUID, name: str) -> None:
        # Only fills an empty name, so a concurrent backfill is never overwritten
        await self.session.execute(
            update(Contact)
            .where(Contact.id == contact_id, Contact.name.is_(None))
            .values(name=name)
        )
        await self.session.commit()

    # Meetings

    async def find_latest_meeting_by_title(self, user_id: UUID, title: str) -> Optional[MeetingRecord]:
        result = await self.session.execute(
            select(Meeting)
            .where(Meeting.user_id == user_id, func.lower(Meeting.title) == title.lower())
            .order_by(Meeting.created_at.desc())
            .limit(1)
        )
        meeting = result.scalar_one_or_none()
        return _meeting_record(meeting) if meeting else None

    async def create_meeting(
        self,
        user_id: UUID,
        title: str,
        meeting_type: str,
        org_id: Optional[UUID],
    ) -> MeetingRecord:
        meeting = Meeting(user_id=user_id, title=title, meeting_type=meeting_type, org_id=org_id)
        await self._insert(meeting)
        return _meeting_record(meeting)

    # Email messages

    async def _email_message_exists(self, user_id: UUID, message_id: str) -> bool:
        result = await self.session.execute(
            select(EmailMessage.id).where(
                EmailMessage.user_id == user_id,
                EmailMessage.message_id == message_id,
            )
        )
        return result.first() is not None

    async def create_email_message(self, message: NewEmailMessage) -> UUID:
        row = EmailMessage(
            user_id=message.user_id,
            message_id=message.message_id,
            thread_id=message.thread_id,
            from_address=message.from_address,
            to_addresses=list(message.to_addresses),
            cc_addresses=list(message.cc_addresses),
            subject=message.subject,
            text_body=message.text_body,
            html_body=message.html_body,
            sent_at=message.sent_at,
            meeting_id=message.meeting_id,
            deal_id=message.deal_id,
        )
        try:
            await self._insert(row)
        except IntegrityError:
            if not await self._email_message_exists(message.user_id, message.message_id):
                raise
            logger.debug(f"Duplicate email_message for message_id={message.message_id}")
            raise DuplicateMessageError(message.user_id, message.message_id)

        return row.id

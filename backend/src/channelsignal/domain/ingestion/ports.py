"""Ingestion Persistence Port - Domain interface for the relational store.

The pipeline reads and writes users, orgs, contacts, meetings and email
messages only through this interface. Adapters must surface unique-key
conflicts as PersistenceConflictError so the resolvers can re-read the row
written by a concurrent delivery.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from .models import (
    ContactRecord,
    MeetingRecord,
    NewEmailMessage,
    OrgRecord,
    UserRecord,
)


class PersistenceConflictError(Exception):
    """A create hit a unique constraint (another writer got there first)."""

    def __init__(self, entity: str, key: dict):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} already exists for {key}")


class DuplicateMessageError(PersistenceConflictError):
    """EmailMessage (user_id, message_id) already recorded."""

    def __init__(self, user_id: UUID, message_id: str):
        super().__init__("email_message", {"user_id": str(user_id), "message_id": message_id})
        self.user_id = user_id
        self.message_id = message_id


class IngestionRepositoryPort(ABC):
    """Port interface for ingestion persistence.

    Every write is committed on its own; there is no transaction spanning a
    whole message. Create methods raise PersistenceConflictError (or
    DuplicateMessageError for email messages) on unique-key conflicts and let
    any other failure propagate.
    """

    # Users

    @abstractmethod
    async def find_user_by_bcc_address(self, bcc_address: str) -> Optional[UserRecord]:
        """Exact-match lookup on the routing address."""

    @abstractmethod
    async def find_user_by_id(self, user_id: UUID) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def create_user(self, email: str, name: Optional[str], bcc_address: str) -> UserRecord:
        """Raises PersistenceConflictError if the email or routing address is taken."""

    # Orgs

    @abstractmethod
    async def find_org(self, user_id: UUID, domain: str) -> Optional[OrgRecord]:
        ...

    @abstractmethod
    async def create_org(self, user_id: UUID, domain: str, name: str) -> OrgRecord:
        ...

    # Contacts

    @abstractmethod
    async def find_contact(self, user_id: UUID, email: str) -> Optional[ContactRecord]:
        ...

    @abstractmethod
    async def create_contact(
        self,
        user_id: UUID,
        email: str,
        name: Optional[str],
        org_id: Optional[UUID],
    ) -> ContactRecord:
        ...

    @abstractmethod
    async def update_contact_name(self, contact_id: UUID, name: str) -> None:
        """Single-field patch; no other column is touched."""

    # Meetings

    @abstractmethod
    async def find_latest_meeting_by_title(self, user_id: UUID, title: str) -> Optional[MeetingRecord]:
        """Newest meeting of the user whose title matches case-insensitively."""

    @abstractmethod
    async def create_meeting(
        self,
        user_id: UUID,
        title: str,
        meeting_type: str,
        org_id: Optional[UUID],
    ) -> MeetingRecord:
        ...

    # Email messages

    @abstractmethod
    async def create_email_message(self, message: NewEmailMessage) -> UUID:
        """Insert the message and return its id.

        Raises:
            DuplicateMessageError: (user_id, message_id) already exists
        """

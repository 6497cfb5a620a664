"""Integration tests for SqlAlchemyIngestionRepository on SQLite."""

from datetime import datetime, timezone
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from channelsignal.domain.ingestion.handler import IngestionOutcome, handle_inbound_email
from channelsignal.domain.ingestion.models import InboundEmailPayload, NewEmailMessage
from channelsignal.domain.ingestion.ports import DuplicateMessageError, PersistenceConflictError
from channelsignal.infrastructure.repositories import SqlAlchemyIngestionRepository
from channelsignal.models import Contact, EmailMessage, Meeting, Org


def new_message(user_id, message_id="msg-1", **overrides) -> NewEmailMessage:
    fields = dict(
        user_id=user_id,
        message_id=message_id,
        thread_id=None,
        from_address="jane@acme.com",
        to_addresses=["u_abc123@in.example.com"],
        cc_addresses=[],
        subject="Hello",
        text_body="Hi",
        html_body=None,
        sent_at=datetime(2026, 3, 1, 10, tzinfo=timezone.utc),
    )
    fields.update(overrides)
    return NewEmailMessage(**fields)


async def count(session, model) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


class TestUsers:

    @pytest.mark.asyncio
    async def test_lookup_by_routing_address(self, repository, db_user):
        user = await repository.find_user_by_bcc_address("u_abc123@in.example.com")

        assert user.id == db_user.id
        assert await repository.find_user_by_bcc_address("u_nobody@in.example.com") is None

    @pytest.mark.asyncio
    async def test_lookup_by_id_and_email(self, repository, db_user):
        assert (await repository.find_user_by_id(db_user.id)).email == "rep@mycompany.com"
        assert (await repository.find_user_by_email("REP@mycompany.com")).id == db_user.id

    @pytest.mark.asyncio
    async def test_create_user_conflict(self, repository, db_user):
        with pytest.raises(PersistenceConflictError):
            await repository.create_user("other@mycompany.com", None, "u_abc123@in.example.com")


class TestOrgsAndContacts:

    @pytest.mark.asyncio
    async def test_create_and_find_org(self, repository, db_user):
        created = await repository.create_org(db_user.id, "acme.com", "Acme")

        found = await repository.find_org(db_user.id, "acme.com")
        assert found.id == created.id
        assert found.name == "Acme"

    @pytest.mark.asyncio
    async def test_duplicate_org_raises_conflict(self, repository, db_user, db_session):
        await repository.create_org(db_user.id, "acme.com", "Acme")

        with pytest.raises(PersistenceConflictError) as exc_info:
            await repository.create_org(db_user.id, "acme.com", "Acme Again")

        assert exc_info.value.entity == "org"
        assert await count(db_session, Org) == 1

    @pytest.mark.asyncio
    async def test_duplicate_contact_raises_conflict(self, repository, db_user):
        await repository.create_contact(db_user.id, "jane@acme.com", None, None)

        with pytest.raises(PersistenceConflictError):
            await repository.create_contact(db_user.id, "jane@acme.com", "Jane", None)

    @pytest.mark.asyncio
    async def test_update_contact_name_only_fills_empty(self, repository, db_user, db_session):
        contact = await repository.create_contact(db_user.id, "jane@acme.com", None, None)

        await repository.update_contact_name(contact.id, "Jane")
        await repository.update_contact_name(contact.id, "Janet")

        stored = await db_session.get(Contact, contact.id, populate_existing=True)
        assert stored.name == "Jane"


class TestMeetings:

    @pytest.mark.asyncio
    async def test_title_lookup_is_case_insensitive(self, repository, db_user):
        created = await repository.create_meeting(db_user.id, "Q4 QBR", "QBR", None)

        found = await repository.find_latest_meeting_by_title(db_user.id, "q4 qbr")

        assert found.id == created.id
        assert found.meeting_type == "QBR"

    @pytest.mark.asyncio
    async def test_latest_meeting_wins(self, repository, db_user, db_session):
        await repository.create_meeting(db_user.id, "Weekly sync", "WEEKLY_CHECKIN", None)
        newer = Meeting(
            user_id=db_user.id,
            title="WEEKLY SYNC",
            meeting_type="OTHER",
            created_at=datetime(2100, 1, 1, tzinfo=timezone.utc),
        )
        db_session.add(newer)
        await db_session.commit()

        found = await repository.find_latest_meeting_by_title(db_user.id, "weekly sync")

        assert found.id == newer.id

    @pytest.mark.asyncio
    async def test_other_users_meetings_are_ignored(self, repository, db_user):
        await repository.create_meeting(db_user.id, "Q4 QBR", "QBR", None)

        assert await repository.find_latest_meeting_by_title(uuid4(), "Q4 QBR") is None


class TestEmailMessages:

    @pytest.mark.asyncio
    async def test_create_stores_address_lists(self, repository, db_user, db_session):
        message_id = await repository.create_email_message(
            new_message(db_user.id, cc_addresses=["bob@acme.com"])
        )

        stored = await db_session.get(EmailMessage, message_id)
        assert stored.to_addresses == ["u_abc123@in.example.com"]
        assert stored.cc_addresses == ["bob@acme.com"]
        assert stored.deal_id is None

    @pytest.mark.asyncio
    async def test_duplicate_message_id(self, repository, db_user, db_session):
        await repository.create_email_message(new_message(db_user.id))

        with pytest.raises(DuplicateMessageError):
            await repository.create_email_message(new_message(db_user.id))

        assert await count(db_session, EmailMessage) == 1

    @pytest.mark.asyncio
    async def test_session_usable_after_duplicate(self, repository, db_user, db_session):
        # the rollback after a conflict expires ORM instances held by the session
        user_id = db_user.id
        await repository.create_email_message(new_message(user_id))
        with pytest.raises(DuplicateMessageError):
            await repository.create_email_message(new_message(user_id))

        await repository.create_email_message(new_message(user_id, message_id="msg-2"))

        assert await count(db_session, EmailMessage) == 2

    @pytest.mark.asyncio
    async def test_org_then_contact_after_conflict(self, repository, db_user, db_session):
        user_id = db_user.id
        org = await repository.create_org(user_id, "acme.com", "Acme")
        with pytest.raises(PersistenceConflictError):
            await repository.create_org(user_id, "acme.com", "Acme Again")

        contact = await repository.create_contact(user_id, "jane@acme.com", "Jane", org.id)

        assert contact.org_id == org.id
        assert await count(db_session, Contact) == 1

    @pytest.mark.asyncio
    async def test_non_unique_integrity_error_propagates(self, repository, db_user):
        with pytest.raises(IntegrityError):
            await repository.create_email_message(new_message(db_user.id, subject=None))


class TestPipelineOnDatabase:

    @pytest.mark.asyncio
    async def test_replayed_webhook_records_one_message(self, session_factory, db_user):
        payload = InboundEmailPayload(
            message_id="<abc@mail>",
            from_="Sarah <sarah@acme-corp.com>",
            to=["rep@mycompany.com"],
            cc=["jane@gmail.com"],
            bcc=["u_abc123@in.example.com"],
            subject="Q4 QBR with Acme Corp",
        )

        outcomes = []
        for _ in range(2):
            async with session_factory() as session:
                outcomes.append(
                    await handle_inbound_email(payload, SqlAlchemyIngestionRepository(session))
                )

        assert outcomes == [IngestionOutcome.PROCESSED, IngestionOutcome.DUPLICATE]
        async with session_factory() as session:
            assert await count(session, EmailMessage) == 1
            assert await count(session, Meeting) == 1
            domains = (await session.execute(select(Org.domain))).scalars().all()
            assert sorted(domains) == ["acme-corp.com", "mycompany.com"]
            gmail_contact = (
                await session.execute(select(Contact).where(Contact.email == "jane@gmail.com"))
            ).scalar_one()
            assert gmail_contact.org_id is None

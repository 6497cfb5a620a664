"""Unit tests for user provisioning and the welcome email."""

from unittest.mock import AsyncMock

import pytest

from channelsignal.domain.accounts.service import (
    MAX_ADDRESS_ATTEMPTS,
    UserAlreadyExistsError,
    generate_routing_address,
    provision_user,
    render_welcome_email,
)
from channelsignal.domain.ingestion.parser import is_routing_address
from channelsignal.domain.ingestion.ports import PersistenceConflictError
from channelsignal.domain.mail.ports import MailResult


@pytest.fixture
def mailer():
    sender = AsyncMock()
    sender.send.return_value = MailResult(success=True, message_id="email_1")
    return sender


class TestGenerateRoutingAddress:

    def test_routing_shape(self):
        address = generate_routing_address("in.example.com")

        assert is_routing_address(address)
        assert address.endswith("@in.example.com")
        assert len(address.split("@")[0]) == len("u_") + 12

    def test_addresses_are_unique(self):
        assert generate_routing_address("in.example.com") != generate_routing_address("in.example.com")

    def test_rejects_non_inbound_domain(self):
        with pytest.raises(ValueError):
            generate_routing_address("example.com")


def test_welcome_email_contains_routing_address():
    message = render_welcome_email("rep@acme.com", "Alex <b>", "u_abc@in.example.com", "https://app")

    assert message.to == "rep@acme.com"
    assert "u_abc@in.example.com" in message.html
    assert "u_abc@in.example.com" in message.text
    assert "Alex &lt;b&gt;" in message.html


class TestProvisionUser:

    @pytest.mark.asyncio
    async def test_creates_user_and_sends_welcome(self, fake_repo, mailer):
        user = await provision_user(
            fake_repo, mailer, "Rep@Acme.com", "Alex", inbound_domain="in.example.com"
        )

        assert user.email == "rep@acme.com"
        assert is_routing_address(user.bcc_address)
        sent = mailer.send.await_args.args[0]
        assert sent.to == "rep@acme.com"
        assert user.bcc_address in sent.html

    @pytest.mark.asyncio
    async def test_existing_email_rejected(self, fake_repo, fake_user, mailer):
        with pytest.raises(UserAlreadyExistsError):
            await provision_user(
                fake_repo, mailer, fake_user.email, None, inbound_domain="in.example.com"
            )
        mailer.send.assert_not_called()

    @pytest.mark.asyncio
    async def test_mail_failure_is_not_fatal(self, fake_repo, mailer):
        mailer.send.return_value = MailResult(success=False, error="provider down")

        user = await provision_user(fake_repo, mailer, "rep@acme.com", None, inbound_domain="in.example.com")

        assert await fake_repo.find_user_by_email("rep@acme.com") == user

    @pytest.mark.asyncio
    async def test_without_mailer(self, fake_repo):
        user = await provision_user(fake_repo, None, "rep@acme.com", None, inbound_domain="in.example.com")

        assert user.email == "rep@acme.com"

    @pytest.mark.asyncio
    async def test_retries_routing_address_collision(self, fake_repo, mailer):
        original_create = fake_repo.create_user
        calls = []

        async def collide_once(email, name, bcc_address):
            calls.append(bcc_address)
            if len(calls) == 1:
                raise PersistenceConflictError("user", {"bcc_address": bcc_address})
            return await original_create(email, name, bcc_address)

        fake_repo.create_user = collide_once

        user = await provision_user(fake_repo, mailer, "rep@acme.com", None, inbound_domain="in.example.com")

        assert len(calls) == 2
        assert user.bcc_address == calls[1]

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, fake_repo, mailer):
        fake_repo.create_user = AsyncMock(side_effect=PersistenceConflictError("user", {}))

        with pytest.raises(PersistenceConflictError):
            await provision_user(fake_repo, mailer, "rep@acme.com", None, inbound_domain="in.example.com")

        assert fake_repo.create_user.await_count == MAX_ADDRESS_ATTEMPTS
        mailer.send.assert_not_called()

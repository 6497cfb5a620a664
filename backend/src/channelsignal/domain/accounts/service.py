"""User provisioning.

Creates a user with a fresh routing address (u_<id>@in.<domain>) and sends
the welcome email telling them which address to Bcc.
"""

import logging
import secrets
from html import escape
from typing import Optional

from ..ingestion.models import UserRecord
from ..ingestion.parser import is_routing_address
from ..ingestion.ports import IngestionRepositoryPort, PersistenceConflictError
from ..mail.ports import MailMessage, MailSenderPort

logger = logging.getLogger(__name__)

MAX_ADDRESS_ATTEMPTS = 5


class UserAlreadyExistsError(Exception):
    """A user with this email is already registered."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"User with email {email} already exists")


def generate_routing_address(inbound_domain: str) -> str:
    """Build a new routing address on the inbound domain.

    Args:
        inbound_domain: Domain starting with "in.", e.g. in.channelsignal.com

    Raises:
        ValueError: If the domain would not produce a routing-shaped address
    """
    address = f"u_{secrets.token_hex(6)}@{inbound_domain.strip().lower()}"
    if not is_routing_address(address):
        raise ValueError(f"Inbound domain must start with 'in.': {inbound_domain}")
    return address


def render_welcome_email(to: str, name: Optional[str], bcc_address: str, app_url: str) -> MailMessage:
    """Welcome email body (HTML and plain text)."""
    greeting = f"Hi {name}," if name else "Hi there,"
    html = (
        f"<p>{escape(greeting)}</p>"
        "<p>Welcome to ChannelSignal. Bcc this address on your customer emails "
        "and we will track contacts, organizations and meetings for you:</p>"
        f"<p><strong>{escape(bcc_address)}</strong></p>"
        f'<p><a href="{escape(app_url)}">Open ChannelSignal</a></p>'
    )
    text = (
        f"{greeting}\n\n"
        "Welcome to ChannelSignal. Bcc this address on your customer emails "
        "and we will track contacts, organizations and meetings for you:\n\n"
        f"    {bcc_address}\n\n"
        f"{app_url}\n"
    )
    return MailMessage(to=to, subject="Welcome to ChannelSignal", html=html, text=text)


async def provision_user(
    repository: IngestionRepositoryPort,
    mailer: Optional[MailSenderPort],
    email: str,
    name: Optional[str],
    inbound_domain: str,
    app_url: str = "",
) -> UserRecord:
    """Create a user with a unique routing address and send the welcome email.

    A failed welcome email is logged; the user is still created.

    Raises:
        UserAlreadyExistsError: The email is already registered
        PersistenceConflictError: No free routing address after MAX_ADDRESS_ATTEMPTS
    """
    email = email.strip().lower()
    if await repository.find_user_by_email(email):
        raise UserAlreadyExistsError(email)

    user: Optional[UserRecord] = None
    for attempt in range(1, MAX_ADDRESS_ATTEMPTS + 1):
        bcc_address = generate_routing_address(inbound_domain)
        try:
            user = await repository.create_user(email, name, bcc_address)
            break
        except PersistenceConflictError:
            if await repository.find_user_by_email(email):
                raise UserAlreadyExistsError(email)
            if attempt == MAX_ADDRESS_ATTEMPTS:
                raise
            logger.warning(f"Routing address collision on attempt {attempt}, retrying")

    logger.info(f"Provisioned user {user.id} with routing address {user.bcc_address}")

    if mailer is not None:
        message = render_welcome_email(user.email, name, user.bcc_address, app_url)
        result = await mailer.send(message)
        if not result.success:
            logger.error(f"Welcome email to {user.email} failed: {result.error}")

    return user

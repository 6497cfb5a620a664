#!/usr/bin/env python
"""Provision a ChannelSignal user from the command line.

Creates the user with a fresh routing address and sends the welcome email
(logged instead of sent when RESEND_API_KEY is not configured).

Usage:
    python backend/scripts/seed_user.py --email rep@acme.com --name "Alex Rep"

Environment Variables:
    DATABASE_URL: Async SQLAlchemy connection string
    INBOUND_EMAIL_DOMAIN: Domain for routing addresses (default: in.channelsignal.com)
    RESEND_API_KEY: Resend API key (optional)
    EMAIL_FROM: Sender for the welcome email
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add backend/src to Python path
backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

from channelsignal.config import settings
from channelsignal.database import engine, get_db_session
from channelsignal.domain.accounts import UserAlreadyExistsError, provision_user
from channelsignal.infrastructure.mail import ResendMailSender
from channelsignal.infrastructure.repositories import SqlAlchemyIngestionRepository
from channelsignal.observability import configure_logging, request_context


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Provision a ChannelSignal user")
    parser.add_argument("--email", required=True, help="User email address")
    parser.add_argument("--name", default=None, help="Display name")
    parser.add_argument(
        "--no-welcome",
        action="store_true",
        help="Skip the welcome email",
    )
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    mailer = None
    if not args.no_welcome:
        mailer = ResendMailSender(settings.RESEND_API_KEY, settings.EMAIL_FROM)

    try:
        with request_context():
            async with get_db_session() as session:
                repository = SqlAlchemyIngestionRepository(session)
                user = await provision_user(
                    repository,
                    mailer,
                    email=args.email,
                    name=args.name,
                    inbound_domain=settings.INBOUND_EMAIL_DOMAIN,
                    app_url=settings.APP_BASE_URL,
                )
    except UserAlreadyExistsError as e:
        print(f"ERROR: {e}")
        return 1
    finally:
        await engine.dispose()

    print("SUCCESS: User created")
    print(f"  ID:          {user.id}")
    print(f"  Email:       {user.email}")
    print(f"  Name:        {user.name}")
    print(f"  BCC address: {user.bcc_address}")
    return 0


def main():
    configure_logging(level=settings.LOG_LEVEL, json_format=False)
    sys.exit(asyncio.run(run(parse_args())))


if __name__ == "__main__":
    main()

"""Resend mail adapter.

Sends transactional email through the Resend API. Without an API key the
adapter runs in dev mode: the message is logged and reported as sent with a
synthetic dev-<ms> id.
"""

import asyncio
import logging
import time
from typing import Optional

import resend

from ...domain.mail.ports import MailMessage, MailResult, MailSenderPort
from ...observability.metrics import mail_sent_total

logger = logging.getLogger(__name__)


class ResendMailSender(MailSenderPort):
    """MailSenderPort implementation backed by resend.Emails.send.

    The SDK call blocks on HTTP, so it runs in a worker thread.
    """

    def __init__(self, api_key: Optional[str], email_from: str):
        self._api_key = api_key or None
        self.email_from = email_from
        if not self._api_key:
            logger.warning("RESEND_API_KEY not configured - emails will be logged but not sent")
        else:
            resend.api_key = self._api_key

    @property
    def dev_mode(self) -> bool:
        return self._api_key is None

    async def send(self, message: MailMessage) -> MailResult:
        if self.dev_mode:
            logger.info(
                f"Email not sent (dev mode): to={message.to} subject={message.subject!r}"
            )
            mail_sent_total.labels(status="dev").inc()
            return MailResult(success=True, message_id=f"dev-{int(time.time() * 1000)}")

        params: resend.Emails.SendParams = {
            "from": self.email_from,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
        }
        if message.text:
            params["text"] = message.text

        try:
            result = await asyncio.to_thread(resend.Emails.send, params)
        except Exception as e:
            logger.exception(f"Error sending email to {message.to}")
            mail_sent_total.labels(status="error").inc()
            return MailResult(success=False, error=str(e))

        email_id = result.get("id") if isinstance(result, dict) else getattr(result, "id", None)
        logger.info(f"Email sent: id={email_id} to={message.to}")
        mail_sent_total.labels(status="sent").inc()
        return MailResult(success=True, message_id=email_id)

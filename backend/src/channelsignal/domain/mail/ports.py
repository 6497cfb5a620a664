"""Mail Delivery Port - Domain interface for outgoing transactional email.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class MailMessage:
    to: str
    subject: str
    html: str
    text: Optional[str] = None


@dataclass
class MailResult:
    """Outcome of a send attempt.

    Attributes:
        success: Provider accepted the message (or dev mode logged it)
        message_id: Provider message id, or dev-<ms> in dev mode
        error: Provider error message when success is False
    """
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class MailSenderPort(ABC):
    """Port interface for sending one email.

    Implementations report provider failures through MailResult instead of
    raising, so callers can decide whether a failed send matters.
    """

    @abstractmethod
    async def send(self, message: MailMessage) -> MailResult:
        ...

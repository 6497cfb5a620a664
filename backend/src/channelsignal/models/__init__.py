"""SQLAlchemy models"""

from .base import Base
from .user import User
from .org import Org
from .contact import Contact
from .meeting import Meeting, MEETING_TYPES
from .email_message import EmailMessage

__all__ = [
    "Base",
    "User",
    "Org",
    "Contact",
    "Meeting",
    "MEETING_TYPES",
    "EmailMessage",
]

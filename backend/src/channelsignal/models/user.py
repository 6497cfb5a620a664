"""User SQLAlchemy model"""

import re
import uuid

from sqlalchemy import Column, Text, DateTime, UniqueConstraint, Uuid, func
from sqlalchemy.orm import relationship, validates

from .base import Base, utcnow


ROUTING_ADDRESS_RE = re.compile(r'^u_[^@\s]+@in\.[^@\s]+$')


class User(Base):
    """A sales rep using the service.

    Each user owns exactly one routing address (bcc_address). Inbound mail is
    attributed to a user only through this address, and it never changes once
    assigned.
    """
    __tablename__ = "user"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(Text, nullable=False)
    name = Column(Text, nullable=True)
    bcc_address = Column(Text, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now()
    )

    orgs = relationship("Org", back_populates="user")
    contacts = relationship("Contact", back_populates="user")
    meetings = relationship("Meeting", back_populates="user")
    email_messages = relationship("EmailMessage", back_populates="user")

    __table_args__ = (
        UniqueConstraint('email', name='uq_user_email'),
        UniqueConstraint('bcc_address', name='uq_user_bcc_address'),
    )

    @validates('email')
    def validate_email(self, key, value):
        """Basic email format validation"""
        if not value or not re.match(r'^[^\s@]+@[^\s@]+\.[^\s@]+$', value.strip()):
            raise ValueError("Invalid email format")
        return value.strip().lower()

    @validates('bcc_address')
    def validate_bcc_address(self, key, value):
        """Routing addresses look like u_<id>@in.<domain> and are write-once."""
        value = value.strip().lower()
        if not ROUTING_ADDRESS_RE.match(value):
            raise ValueError("Routing address must look like u_<id>@in.<domain>")
        if self.bcc_address is not None and self.bcc_address != value:
            raise ValueError("Routing address cannot be changed once assigned")
        return value

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', bcc_address='{self.bcc_address}')>"

"""Org model - a customer organization derived from a corporate email domain"""

import uuid

from sqlalchemy import Column, Text, DateTime, ForeignKey, UniqueConstraint, Index, Uuid, func
from sqlalchemy.orm import relationship, validates

from .base import Base, utcnow


class Org(Base):
    """
    Organization seen in a user's mail.

    Created lazily the first time a contact from a corporate domain shows up.
    The name is derived from the domain at creation and is not updated by
    later emails. Personal webmail domains never get an Org.
    """
    __tablename__ = "org"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid,
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False
    )
    name = Column(Text, nullable=False)
    domain = Column(Text, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now()
    )

    user = relationship("User", back_populates="orgs")
    contacts = relationship("Contact", back_populates="org")
    meetings = relationship("Meeting", back_populates="org")

    __table_args__ = (
        UniqueConstraint('user_id', 'domain', name='uq_org_user_domain'),
        Index('idx_org_user_id', 'user_id'),
    )

    @validates('domain')
    def validate_domain(self, key, value):
        if not value or not value.strip():
            raise ValueError("Organization domain cannot be empty")
        return value.strip().lower()

    @validates('name')
    def validate_name(self, key, value):
        """
        Ensure organization name is not empty and within length limits.

        Raises:
            ValueError: If name is empty/whitespace or exceeds 200 characters
        """
        if not value or len(value.strip()) == 0:
            raise ValueError("Organization name cannot be empty")
        if len(value) > 200:
            raise ValueError("Organization name cannot exceed 200 characters")
        return value.strip()

    def __repr__(self):
        return f"<Org(id={self.id}, domain='{self.domain}', name='{self.name}')>"

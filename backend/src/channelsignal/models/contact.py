"""Contact SQLAlchemy model"""

import uuid

from sqlalchemy import Column, Text, DateTime, ForeignKey, UniqueConstraint, Index, Uuid, func
from sqlalchemy.orm import relationship

from .base import Base, utcnow

class Contact(Base):
    """A person who appeared as sender or recipient in a user's mail.

    Keyed by (user_id, email). org_id is null for personal-domain senders and
    is never reassigned after creation.
    """
    __tablename__ = "contact"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    org_id = Column(Uuid, ForeignKey("org.id", ondelete="SET NULL"), nullable=True)
    email = Column(Text, nullable=False)
    name = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now()
    )

    user = relationship("User", back_populates="contacts")
    org = relationship("Org", back_populates="contacts")

    __table_args__ = (
        UniqueConstraint('user_id', 'email', name='uq_contact_user_email'),
        Index('idx_contact_org_id', 'org_id'),
    )

    def __repr__(self):
        return f"<Contact(id={self.id}, email='{self.email}', org_id={self.org_id})>"

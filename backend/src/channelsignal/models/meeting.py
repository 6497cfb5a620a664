"""Meeting model - a recurring or one-off meeting detected from email subjects"""

import uuid

from sqlalchemy import Column, Text, DateTime, ForeignKey, CheckConstraint, Index, Uuid, func
from sqlalchemy.orm import relationship

from .base import Base, utcnow


MEETING_TYPES = ('QBR', 'ANNUAL_REVIEW', 'WEEKLY_CHECKIN', 'DEAL_REVIEW', 'OTHER')


class Meeting(Base):
    """
    Meeting detected from a classified email subject.

    Looked up by (user_id, lower(title)); there is no unique constraint, the
    resolver returns the newest row with a matching title. The functional
    index on lower(title) lives in the migration. meeting_type and
    org_id are set once at creation.
    """
    __tablename__ = "meeting"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    org_id = Column(Uuid, ForeignKey("org.id", ondelete="SET NULL"), nullable=True)
    title = Column(Text, nullable=False)
    meeting_type = Column(Text, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now()
    )

    user = relationship("User", back_populates="meetings")
    org = relationship("Org", back_populates="meetings")
    email_messages = relationship("EmailMessage", back_populates="meeting")

    __table_args__ = (
        CheckConstraint(
            "meeting_type IN (" + ", ".join(f"'{t}'" for t in MEETING_TYPES) + ")",
            name='ck_meeting_type'
        ),
        Index('idx_meeting_user_created', 'user_id', 'created_at'),
    )

    def __repr__(self):
        return f"<Meeting(id={self.id}, title='{self.title}', type={self.meeting_type})>"

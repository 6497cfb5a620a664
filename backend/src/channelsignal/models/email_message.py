"""EmailMessage model - append-only ledger of ingested mail.

One row per (user, provider message id). A second delivery of the same
message for the same user is rejected by uq_email_message_user_message_id
and treated by the pipeline as an idempotent no-op.
"""

import uuid

from sqlalchemy import Column, Text, DateTime, ForeignKey, UniqueConstraint, Index, Uuid, func
from sqlalchemy.orm import relationship

from .base import AddressList, Base, utcnow


class EmailMessage(Base):
    """Inbound email attributed to a user.

    Rows are created once and never updated.
    """
    __tablename__ = "email_message"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("user.id", ondelete="CASCADE"), nullable=False)

    # Provider-supplied identifier (deduplication key together with user_id)
    message_id = Column(Text, nullable=False)
    thread_id = Column(Text, nullable=True)

    from_address = Column(Text, nullable=False)
    to_addresses = Column(AddressList, nullable=False, default=list)
    cc_addresses = Column(AddressList, nullable=False, default=list)
    subject = Column(Text, nullable=False)
    text_body = Column(Text, nullable=True)
    html_body = Column(Text, nullable=True)

    sent_at = Column(DateTime(timezone=True), nullable=False)
    received_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now()
    )

    meeting_id = Column(Uuid, ForeignKey("meeting.id", ondelete="SET NULL"), nullable=True)
    # Deal linkage is not populated by the ingestion pipeline yet
    deal_id = Column(Uuid, nullable=True)

    user = relationship("User", back_populates="email_messages")
    meeting = relationship("Meeting", back_populates="email_messages")

    __table_args__ = (
        UniqueConstraint('user_id', 'message_id', name='uq_email_message_user_message_id'),
        Index('idx_email_message_user_sent', 'user_id', 'sent_at'),
        Index('idx_email_message_thread', 'user_id', 'thread_id'),
    )

    def __repr__(self):
        return (
            f"<EmailMessage(id={self.id}, user_id={self.user_id}, "
            f"message_id='{self.message_id}', from={self.from_address})>"
        )

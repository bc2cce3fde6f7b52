"""Persistent in-app notifications."""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, Boolean, Text, Uuid
from sqlalchemy.orm import relationship

from logiflow.db.base import Base


class Notification(Base):
    """
    One notification addressed to one employee.
    """
    __tablename__ = "notifications"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    recipient_id = Column(Uuid, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)

    # Content
    title = Column(String(255), nullable=False)
    body = Column(Text, nullable=True)
    notification_type = Column(String(50), nullable=False, default="approval")
    event_name = Column(String(50), nullable=False, index=True)

    # Related document
    reference_table = Column(String(50), nullable=True)
    reference_id = Column(Uuid, nullable=True, index=True)
    payload = Column(JSON, nullable=True)

    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    recipient = relationship("Employee")

    def __repr__(self) -> str:
        return f"<Notification {self.event_name} to {self.recipient_id}>"

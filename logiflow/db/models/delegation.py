import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Date, Boolean, Text, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from logiflow.db.base import Base


class DelegationRule(Base):
    """
    Lets ``delegate`` act with ``delegator``'s role between two calendar days.

    ``scope`` is either ``"all"`` or a single document type.
    """
    __tablename__ = "delegation_rules"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    delegator_id = Column(Uuid, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    delegate_id = Column(Uuid, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    scope = Column(String(50), nullable=False, default="all")
    is_active = Column(Boolean, nullable=False, default=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    delegator = relationship("Employee", foreign_keys=[delegator_id], back_populates="delegations_given")
    delegate = relationship("Employee", foreign_keys=[delegate_id], back_populates="delegations_received")

    def __repr__(self) -> str:
        return f"<DelegationRule {self.delegator_id} -> {self.delegate_id} [{self.scope}]>"

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Boolean, Uuid
from sqlalchemy.orm import relationship

from logiflow.db.base import Base


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    system_role = Column(String(50), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    delegations_given = relationship(
        "DelegationRule", foreign_keys="DelegationRule.delegator_id", back_populates="delegator"
    )
    delegations_received = relationship(
        "DelegationRule", foreign_keys="DelegationRule.delegate_id", back_populates="delegate"
    )

    def __repr__(self) -> str:
        return f"<Employee {self.email} [{self.system_role}]>"

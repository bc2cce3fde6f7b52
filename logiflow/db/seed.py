"""Database seeding for LogiFlow.

Creates the default approval rule matrix and the initial administrator.
"""

import logging
import uuid
from typing import Dict, List, Optional, Sequence

from sqlalchemy import and_
from sqlalchemy.orm import Session

from logiflow.core.config import get_settings
from logiflow.db.models import Employee, WorkflowRule

logger = logging.getLogger(__name__)


# Legacy logistics matrix: material issues (mirv) and job orders (jo)
DEFAULT_WORKFLOW_RULES: List[Dict] = [
    {"document_type": "mirv", "min_amount": 0, "max_amount": 10000, "approver_role": "warehouse_staff", "sla_hours": 4},
    {"document_type": "mirv", "min_amount": 10000, "max_amount": 50000, "approver_role": "logistics_coordinator", "sla_hours": 8},
    {"document_type": "mirv", "min_amount": 50000, "max_amount": 100000, "approver_role": "manager", "sla_hours": 24},
    {"document_type": "mirv", "min_amount": 100000, "max_amount": 500000, "approver_role": "manager", "sla_hours": 48},
    {"document_type": "mirv", "min_amount": 500000, "max_amount": 999999999, "approver_role": "admin", "sla_hours": 72},
    {"document_type": "jo", "min_amount": 0, "max_amount": 5000, "approver_role": "logistics_coordinator", "sla_hours": 4},
    {"document_type": "jo", "min_amount": 5000, "max_amount": 20000, "approver_role": "manager", "sla_hours": 8},
    {"document_type": "jo", "min_amount": 20000, "max_amount": 100000, "approver_role": "manager", "sla_hours": 24},
    {"document_type": "jo", "min_amount": 100000, "max_amount": 999999999, "approver_role": "admin", "sla_hours": 48},
]


def seed_workflow_rules(
    db: Session,
    rules: Sequence[Dict] = DEFAULT_WORKFLOW_RULES,
) -> List[WorkflowRule]:
    """
    Create workflow rules.

    Rules are idempotent - a rule with the same document type, band and
    role is reused instead of inserted again.

    Args:
        db: Database session
        rules: Rule definitions (document_type, min_amount, max_amount,
            approver_role, sla_hours)

    Returns:
        List of WorkflowRule objects, in input order
    """
    seeded = []

    for config in rules:
        max_amount = config.get("max_amount")
        existing = db.query(WorkflowRule).filter(
            and_(
                WorkflowRule.document_type == config["document_type"],
                WorkflowRule.min_amount == config["min_amount"],
                WorkflowRule.max_amount.is_(None) if max_amount is None
                else WorkflowRule.max_amount == max_amount,
                WorkflowRule.approver_role == config["approver_role"],
            )
        ).first()

        if existing:
            seeded.append(existing)
            continue

        rule = WorkflowRule(
            id=uuid.uuid4(),
            document_type=config["document_type"],
            min_amount=config["min_amount"],
            max_amount=max_amount,
            approver_role=config["approver_role"],
            sla_hours=config.get("sla_hours", 24),
        )
        db.add(rule)
        seeded.append(rule)

    db.flush()
    logger.info("Seeded %d workflow rules", len(seeded))
    return seeded


def seed_admin(
    db: Session,
    email: str,
    *,
    full_name: str = "System Administrator",
    role: Optional[str] = None,
) -> Employee:
    """
    Create the initial administrator, or return the existing one.

    Args:
        db: Database session
        email: Administrator email
        full_name: Display name
        role: System role (defaults to the configured admin role)
    """
    existing = db.query(Employee).filter(Employee.email == email).first()
    if existing:
        return existing

    admin = Employee(
        id=uuid.uuid4(),
        full_name=full_name,
        email=email,
        system_role=role or get_settings().admin_role,
        is_active=True,
    )
    db.add(admin)
    db.flush()
    logger.info("Created administrator %s", email)
    return admin

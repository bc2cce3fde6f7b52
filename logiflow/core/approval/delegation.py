"""Approver authorization with delegation of authority.

An employee may act on a step when they hold the step's role, when they
are an administrator, or when an active delegation lets them act for an
active employee holding that role. Delegation windows are compared by
calendar day so a delegation stays valid for the whole of its first and
last day.
"""

import logging
from datetime import date, datetime
from typing import Dict, Optional, Set, Union
from uuid import UUID

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, aliased

from logiflow.core.config import get_settings
from logiflow.db.models import DelegationRule, Employee

logger = logging.getLogger(__name__)

ALL_SCOPES = "all"

DateLike = Union[date, datetime]


def as_calendar_day(value: Optional[DateLike]) -> date:
    """Truncate a timestamp to its calendar day."""
    if value is None:
        return datetime.utcnow().date()
    if isinstance(value, datetime):
        return value.date()
    return value


class DelegationAuthorizer:
    """
    Decides whether an employee may act for a required approver role.

    Reads delegation state on every call; delegations are time-sensitive
    and are never cached here.
    """

    def __init__(self, db: Session, *, admin_role: Optional[str] = None):
        self.db = db
        self.admin_role = admin_role or get_settings().admin_role

    def is_authorized(
        self,
        actor_id: UUID,
        required_role: str,
        document_type: str,
        as_of: Optional[DateLike] = None,
    ) -> bool:
        actor = self.db.get(Employee, actor_id)
        if actor is None or not actor.is_active:
            return False

        if actor.system_role == self.admin_role:
            return True

        if actor.system_role == required_role:
            return True

        return self.has_active_delegation(actor_id, required_role, document_type, as_of)

    def has_active_delegation(
        self,
        actor_id: UUID,
        required_role: str,
        document_type: str,
        as_of: Optional[DateLike] = None,
    ) -> bool:
        """Check for a delegation from an active holder of ``required_role``."""
        day = as_calendar_day(as_of)
        delegator = aliased(Employee)

        delegation = self.db.query(DelegationRule).join(
            delegator, DelegationRule.delegator_id == delegator.id
        ).filter(
            and_(
                DelegationRule.delegate_id == actor_id,
                DelegationRule.is_active.is_(True),
                DelegationRule.start_date <= day,
                DelegationRule.end_date >= day,
                or_(
                    DelegationRule.scope == ALL_SCOPES,
                    DelegationRule.scope == document_type,
                ),
                delegator.system_role == required_role,
                delegator.is_active.is_(True),
            )
        ).first()

        if delegation is None:
            return False

        logger.info(
            "Delegation active: %s (%s) -> employee %s",
            delegation.delegator_id, required_role, actor_id,
        )
        return True

    def reachable_grants(self, actor: Employee, as_of: Optional[DateLike] = None) -> Dict[str, Set[str]]:
        """
        Map each role the actor can act for to the document scopes it covers.

        The actor's own role covers every scope. Delegated roles cover the
        delegation's scope.
        """
        grants: Dict[str, Set[str]] = {actor.system_role: {ALL_SCOPES}}
        day = as_calendar_day(as_of)
        delegator = aliased(Employee)

        rows = self.db.query(DelegationRule.scope, delegator.system_role).join(
            delegator, DelegationRule.delegator_id == delegator.id
        ).filter(
            and_(
                DelegationRule.delegate_id == actor.id,
                DelegationRule.is_active.is_(True),
                DelegationRule.start_date <= day,
                DelegationRule.end_date >= day,
                delegator.is_active.is_(True),
            )
        ).all()

        for scope, role in rows:
            grants.setdefault(role, set()).add(scope)

        return grants


def grant_covers(grants: Dict[str, Set[str]], role: str, document_type: str) -> bool:
    """Check if a grant map lets its holder act on ``role`` for ``document_type``."""
    scopes = grants.get(role)
    if not scopes:
        return False
    return ALL_SCOPES in scopes or document_type in scopes

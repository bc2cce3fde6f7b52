from typing import Generator, Optional
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from logiflow.db.session import new_session
from logiflow.db.models import Employee
from logiflow.core.approval import ApprovalOrchestrator


def get_db() -> Generator:
    """Database session dependency."""
    db = new_session()
    try:
        yield db
    finally:
        db.close()


def get_current_employee(
    db: Session = Depends(get_db),
    employee_id: Optional[str] = Header(None, alias="X-Employee-Id"),
) -> Employee:
    """Get the calling employee from the header set by the authentication gateway."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not identify employee",
    )

    if not employee_id:
        raise credentials_exception

    try:
        employee_uuid = UUID(employee_id)
    except ValueError:
        raise credentials_exception

    employee = db.get(Employee, employee_uuid)
    if employee is None:
        raise credentials_exception

    if not employee.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Employee account is inactive",
        )
    return employee


def get_orchestrator(db: Session = Depends(get_db)) -> ApprovalOrchestrator:
    return ApprovalOrchestrator(db)

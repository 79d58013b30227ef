from typing import Optional
from sqlalchemy.orm import Session
from mall_admin.models.operation_log import OperationLog


def write_log(
    db: Session,
    *,
    user_id: Optional[int],
    operation: str,
    target: Optional[str] = None,
    detail: Optional[str] = None,
    ip: Optional[str] = None,
) -> OperationLog:
    entry = OperationLog(user_id=user_id, operation=operation, target=target, detail=detail, ip=ip)
    db.add(entry)
    db.commit()
    return entry

"""
Update Helpers - apply partial updates to entities
"""
from typing import TypeVar, List, Union
from sqlalchemy.orm import Session
from pydantic import BaseModel

T = TypeVar('T')


def update_entity(
    db: Session,
    entity: T,
    update_data: Union[BaseModel, dict],
    exclude_fields: List[str] = None,
    commit: bool = True
) -> T:
    """
    Update an entity from a Pydantic schema or a dict.

    Only fields the client actually sent are applied (exclude_unset).

    Args:
        db: Database session
        entity: Entity to update
        update_data: Pydantic schema or dict with the new values
        exclude_fields: Fields to ignore
        commit: Commit and refresh afterwards

    Returns:
        The updated entity

    Usage:
        role = update_entity(db, role, role_update)
        user = update_entity(db, user, user_update, exclude_fields=["password"])
    """
    if isinstance(update_data, BaseModel):
        data = update_data.model_dump(exclude_unset=True)
    else:
        data = dict(update_data)

    if exclude_fields:
        data = {k: v for k, v in data.items() if k not in exclude_fields}

    for field, value in data.items():
        if hasattr(entity, field):
            setattr(entity, field, value)

    if commit:
        db.commit()
        db.refresh(entity)

    return entity

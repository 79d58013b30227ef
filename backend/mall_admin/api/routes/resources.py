"""
Resource routes (resource:manage)
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from mall_admin.api.deps import get_db, require_permission
from mall_admin.models.access import Resource
from mall_admin.models.user import AdminUser
from mall_admin.schemas.common import Envelope, Page
from mall_admin.schemas.access import ResourceCreate, ResourceUpdate, ResourceResponse
from mall_admin.api.utils import (
    get_by_id, validate_unique, paginate_query, apply_search_filter, apply_filters,
    update_entity, ok, ok_page, MAX_PAGE_SIZE
)

router = APIRouter()


@router.get("/", response_model=Envelope[Page[ResourceResponse]])
def list_resources(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    keyword: Optional[str] = Query(None, description="Search name or url"),
    type: Optional[str] = Query(None, description="menu, page, api, button..."),
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("resource:manage"))
):
    query = apply_search_filter(db.query(Resource), keyword, Resource.name, Resource.url)
    query = apply_filters(query, [(type, Resource.type, "eq")])
    items, total = paginate_query(query, page, size, Resource.id)
    return ok_page([ResourceResponse.model_validate(r) for r in items], total, page, size)


@router.post("/", response_model=Envelope[ResourceResponse], status_code=201)
def create_resource(
    data: ResourceCreate,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("resource:manage"))
):
    validate_unique(db, Resource, "name", data.name, display_name="Resource name")
    resource = Resource(**data.model_dump())
    db.add(resource)
    db.commit()
    db.refresh(resource)
    return ok(ResourceResponse.model_validate(resource), "Resource created", 201)


@router.put("/{resource_id}", response_model=Envelope[ResourceResponse])
def update_resource(
    resource_id: int,
    data: ResourceUpdate,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("resource:manage"))
):
    resource = get_by_id(db, Resource, resource_id, error_message="Resource not found")
    if data.name and data.name != resource.name:
        validate_unique(db, Resource, "name", data.name, exclude_id=resource_id, display_name="Resource name")
    resource = update_entity(db, resource, data)
    return ok(ResourceResponse.model_validate(resource), "Resource updated")


@router.delete("/{resource_id}", response_model=Envelope[None])
def delete_resource(
    resource_id: int,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("resource:manage"))
):
    resource = get_by_id(db, Resource, resource_id, error_message="Resource not found")
    db.delete(resource)
    db.commit()
    return ok(None, "Resource deleted")

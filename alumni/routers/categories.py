# alumni/routers/categories.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from alumni.core.database import get_db
from alumni.core.dependencies import get_current_user
from alumni.models.user import User
from alumni.schemas.category import (
    CategoryCreate,
    CategoryEntityType,
    CategoryResponse,
    CategoryUpdate,
)
from alumni.schemas.common import ApiResponse, Page
from alumni.services.category import CategoryService

router = APIRouter(
    prefix="/categories",
    tags=["Categories"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=ApiResponse[CategoryResponse], status_code=201)
def create_category(
    category_in: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Create a category for the caller's tenant.
    Only college admins, HODs, staff and super admins can create categories.
    """
    service = CategoryService(db)
    category = service.create_category(category_in, current_user)
    return {"success": True, "message": "Category created successfully", "data": category}


@router.get("/", response_model=ApiResponse[Page[CategoryResponse]])
def get_categories(
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=100),
    entity_type: Optional[CategoryEntityType] = Query(None),
    is_active: Optional[bool] = Query(True),
    tenant_id: Optional[int] = Query(None, description="Super admins only"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = CategoryService(db)
    categories, pagination = service.get_categories(
        current_user,
        page,
        size,
        entity_type=entity_type,
        is_active=is_active,
        tenant_id=tenant_id,
    )
    return {"success": True, "data": {"items": categories, **pagination}}


@router.get("/{category_id}", response_model=ApiResponse[CategoryResponse])
def get_category(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = CategoryService(db)
    return {"success": True, "data": service.get_category(category_id, current_user)}


@router.patch("/{category_id}", response_model=ApiResponse[CategoryResponse])
def update_category(
    category_id: int,
    category_in: CategoryUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = CategoryService(db)
    category = service.update_category(category_id, category_in, current_user)
    return {"success": True, "message": "Category updated successfully", "data": category}


@router.delete("/{category_id}", response_model=ApiResponse[None])
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete a category. Fails while any item still uses it."""
    service = CategoryService(db)
    service.delete_category(category_id, current_user)
    return {"success": True, "message": "Category deleted successfully"}

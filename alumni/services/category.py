# alumni/services/category.py
import logging
import re
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from alumni.core import permissions
from alumni.core.decorator import db_exception
from alumni.models.category import Category
from alumni.models.community import Community
from alumni.models.event import Event
from alumni.models.job_post import JobPost
from alumni.models.user import User
from alumni.schemas.category import CategoryCreate, CategoryUpdate
from alumni.utils.pagination import paginate

logger = logging.getLogger(__name__)

# entity_type -> column holding a reference to the category
CATEGORY_USAGE = {
    "community": Community.category_id,
    "event_type": Event.event_type_id,
    "job_type": JobPost.job_type_id,
    "job_experience": JobPost.experience_id,
    "job_industry": JobPost.industry_id,
}


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


class CategoryService:
    def __init__(self, db: Session):
        self.db = db

    def _slug_taken(
        self, tenant_id, entity_type: str, slug: str, exclude_id: Optional[int] = None
    ) -> bool:
        query = self.db.query(Category).filter(
            Category.tenant_id == tenant_id,
            Category.entity_type == entity_type,
            Category.slug == slug,
        )
        if exclude_id is not None:
            query = query.filter(Category.id != exclude_id)
        return query.first() is not None

    def _get_for_edit(self, category_id: int, user: User, roles: tuple, action: str) -> Category:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions to {action} category",
            )
        category = self.get_category(category_id, user)
        if not permissions.same_tenant(user, category.tenant_id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions to {action} category",
            )
        return category

    @db_exception
    def create_category(self, category_in: CategoryCreate, user: User) -> Category:
        if user.role not in permissions.CATEGORY_EDITOR_ROLES:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions to create category",
            )

        slug = slugify(category_in.name)
        if not slug:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Category name must contain letters or numbers",
            )
        if self._slug_taken(user.tenant_id, category_in.entity_type, slug):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"A {category_in.entity_type} category with this name already exists",
            )

        category = Category(
            **category_in.model_dump(),
            slug=slug,
            tenant_id=user.tenant_id,
            created_by=user.id,
        )
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)

        return category

    def get_categories(
        self,
        user: User,
        page: int = 1,
        size: int = 50,
        entity_type: Optional[str] = None,
        is_active: Optional[bool] = True,
        tenant_id: Optional[int] = None,
    ) -> Tuple[List[Category], dict]:
        """Get the tenant's categories ordered for display"""
        if permissions.is_super_admin(user) and tenant_id is not None:
            scope = tenant_id
        else:
            scope = user.tenant_id

        query = self.db.query(Category).filter(Category.tenant_id == scope)

        if entity_type:
            query = query.filter(Category.entity_type == entity_type)
        if is_active is not None:
            query = query.filter(Category.is_active == is_active)

        query = query.order_by(Category.order.asc(), Category.name.asc())
        return paginate(query, page, size)

    def get_category(self, category_id: int, user: User) -> Category:
        category = self.db.query(Category).filter(Category.id == category_id).first()
        if not category or not permissions.same_tenant(user, category.tenant_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Category not found",
            )
        return category

    @db_exception
    def update_category(
        self, category_id: int, category_in: CategoryUpdate, user: User
    ) -> Category:
        category = self._get_for_edit(
            category_id, user, permissions.CATEGORY_EDITOR_ROLES, "update"
        )

        updates = category_in.model_dump(exclude_unset=True)
        if updates.get("name"):
            slug = slugify(updates["name"])
            if not slug:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Category name must contain letters or numbers",
                )
            if self._slug_taken(category.tenant_id, category.entity_type, slug, category.id):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"A {category.entity_type} category with this name already exists",
                )
            category.slug = slug

        for field, value in updates.items():
            if value is not None:
                setattr(category, field, value)

        self.db.commit()
        self.db.refresh(category)

        return category

    def usage_count(self, category: Category) -> int:
        column = CATEGORY_USAGE.get(category.entity_type)
        if column is None:
            return 0
        return self.db.query(column.class_).filter(column == category.id).count()

    def delete_category(self, category_id: int, user: User) -> bool:
        """Delete a category that nothing references any more."""
        category = self._get_for_edit(
            category_id, user, permissions.CATEGORY_DELETER_ROLES, "delete"
        )

        usage = self.usage_count(category)
        if usage > 0:
            logger.info(
                f"Refused to delete category {category.id}: used by {usage} item(s)"
            )
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Cannot delete category. It is used by {usage} item{'s' if usage > 1 else ''}.",
            )

        self.db.delete(category)
        self.db.commit()
        logger.info(f"Category {category_id} deleted by user {user.id}")

        return True

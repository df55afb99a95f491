from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from quizprep.schemas.common import CamelModel


class CategoryType(str, Enum):
    exam = "exam"
    course = "course"


class CategoryBase(CamelModel):
    """Base fields shared across Category DTOs."""

    name: str
    type: CategoryType
    parent_category: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    order: int = 0


class CategoryCreate(CamelModel):
    """Payload to create a category. Required fields are checked by the service."""

    name: Optional[str] = None
    type: Optional[CategoryType] = None
    parent_category: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    order: Optional[int] = None


class CategoryUpdate(CamelModel):
    """Payload to update a category. Only fields that are sent get written."""

    name: Optional[str] = None
    type: Optional[CategoryType] = None
    parent_category: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    order: Optional[int] = None
    is_active: Optional[bool] = None


class CategoryResponse(CategoryBase):
    """Representation of a persisted category."""

    id: str
    level: int = Field(default=0, ge=0)
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class CategoryTreeNode(CategoryResponse):
    """A category with its recursively built children."""

    subcategories: List["CategoryTreeNode"] = Field(default_factory=list)


class CategoryDeleteResult(CamelModel):
    status: str = "deleted"
    category_id: str
    deleted_count: int


CategoryTreeNode.model_rebuild()

import logging
import uuid
from datetime import datetime
from typing import List, Optional

from quizprep.core.errors import NotFoundError, ValidationError
from quizprep.db.session import Database
from quizprep.schemas.category import (
    CategoryCreate,
    CategoryResponse,
    CategoryTreeNode,
    CategoryType,
    CategoryUpdate,
)

logger = logging.getLogger(__name__)

# Patchable fields that a stored category always carries a value for.
NON_NULLABLE_FIELDS = ("type", "order", "is_active")


def _derive_level(parent_id: Optional[str], db: Database) -> int:
    """Level of a node placed under ``parent_id``: parent.level + 1, or 0 for roots and unresolved parents."""

    if not parent_id:
        return 0
    parent = db.get_category(parent_id)
    if not parent:
        logger.warning("Parent category %s not found; storing node at level 0", parent_id)
        return 0
    return parent.level + 1


def _ensure_no_cycle(category_id: str, parent_id: Optional[str], db: Database) -> None:
    """Reject re-parenting a category under itself or one of its descendants."""

    seen = set()
    current = parent_id
    while current and current not in seen:
        if current == category_id:
            raise ValidationError("parentCategory would create a cycle in the category tree")
        seen.add(current)
        ancestor = db.get_category(current)
        current = ancestor.parent_category if ancestor else None


def create_category(payload: CategoryCreate, db: Database) -> CategoryResponse:
    """Create a category, deriving its level from the parent.

    An unknown ``parentCategory`` is stored as given (level 0); see
    build_category_tree for how such nodes are listed.
    """

    if not payload.name or not payload.type:
        raise ValidationError("Name and type are required.")

    now = datetime.utcnow()
    category = CategoryResponse(
        id=f"category_{uuid.uuid4()}",
        name=payload.name,
        type=payload.type,
        parent_category=payload.parent_category or None,
        description=payload.description,
        image=payload.image,
        order=payload.order or 0,
        level=_derive_level(payload.parent_category, db),
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    db.insert_category(category)
    logger.info("Created category %s (%s) at level %d", category.id, category.name, category.level)
    return category


def get_category(category_id: str, db: Database) -> CategoryResponse:
    """Fetch a category or raise 404."""

    category = db.get_category(category_id)
    if not category:
        raise NotFoundError("Category not found")
    return category


def list_categories(
    db: Database, category_type: Optional[CategoryType] = None, active_only: bool = False
) -> List[CategoryResponse]:
    return db.list_categories(category_type=category_type, active_only=active_only)


def list_root_categories(db: Database, active_only: bool = False) -> List[CategoryResponse]:
    return db.list_root_categories(active_only=active_only)


def list_child_categories(category_id: str, db: Database, active_only: bool = False) -> List[CategoryResponse]:
    """Direct children of a category, ordered for display."""

    return db.list_child_categories(category_id, active_only=active_only)


def update_category(category_id: str, payload: CategoryUpdate, db: Database) -> CategoryResponse:
    """Patch a category in place.

    When ``parentCategory`` is part of the patch (including an explicit null),
    the node's level is recomputed. Descendant levels are left untouched.
    """

    category = get_category(category_id, db)
    changes = payload.model_dump(exclude_unset=True)
    if "name" in changes and not changes["name"]:
        raise ValidationError("Name cannot be empty.")
    for field in NON_NULLABLE_FIELDS:
        if field in changes and changes[field] is None:
            raise ValidationError(f"{field} cannot be null.")

    if "parent_category" in changes:
        parent_id = changes["parent_category"] or None
        _ensure_no_cycle(category_id, parent_id, db)
        changes["parent_category"] = parent_id
        changes["level"] = _derive_level(parent_id, db)

    updated = category.model_copy(update=changes)
    updated.updated_at = datetime.utcnow()
    db.update_category(updated)
    return updated


def _build_children(parent_id: str, db: Database, active_only: bool) -> List[CategoryTreeNode]:
    return [
        CategoryTreeNode(
            **child.model_dump(),
            subcategories=_build_children(child.id, db, active_only),
        )
        for child in db.list_child_categories(parent_id, active_only=active_only)
    ]


def build_category_tree(db: Database, active_only: bool = False) -> List[CategoryTreeNode]:
    """Materialize the whole category forest from parent pointers.

    One store round-trip per node. Store failures propagate, so a tree is
    either complete or not returned at all. A node whose ``parentCategory``
    does not resolve is neither a root nor anyone's child, so it stays out of
    the forest until that parent is created or the node is re-parented.
    """

    return [
        CategoryTreeNode(
            **root.model_dump(),
            subcategories=_build_children(root.id, db, active_only),
        )
        for root in db.list_root_categories(active_only=active_only)
    ]


def _delete_descendants(parent_id: str, db: Database) -> int:
    removed = 0
    for child in db.list_child_categories(parent_id):
        removed += _delete_descendants(child.id, db)
        if db.delete_category(child.id):
            removed += 1
    return removed


def delete_category_tree(category_id: str, db: Database) -> int:
    """Delete a category and all of its descendants, children before parents.

    Not transactional: a failure part-way leaves the remaining nodes in place
    and a retry picks up where the last attempt stopped. Raises NotFoundError
    only when the root itself was absent.
    """

    removed = _delete_descendants(category_id, db)
    if not db.delete_category(category_id):
        raise NotFoundError("Category not found")
    removed += 1
    logger.info("Deleted category %s and %d descendant(s)", category_id, removed - 1)
    return removed

from typing import List, Optional

from fastapi import APIRouter, Depends

from quizprep.db.session import Database, get_db
from quizprep.schemas.category import (
    CategoryCreate,
    CategoryDeleteResult,
    CategoryResponse,
    CategoryTreeNode,
    CategoryType,
    CategoryUpdate,
)
from quizprep.services.category_service import (
    build_category_tree,
    create_category,
    delete_category_tree,
    get_category,
    list_categories,
    list_child_categories,
    update_category,
)

router = APIRouter()


@router.post("/categories", response_model=CategoryResponse, status_code=201)
def create_category_endpoint(payload: CategoryCreate, db: Database = Depends(get_db)) -> CategoryResponse:
    return create_category(payload, db)


@router.get("/categories", response_model=List[CategoryResponse])
def list_categories_endpoint(
    type: Optional[CategoryType] = None,
    active_only: bool = False,
    db: Database = Depends(get_db),
) -> List[CategoryResponse]:
    return list_categories(db, category_type=type, active_only=active_only)


@router.get("/categories/tree", response_model=List[CategoryTreeNode])
def category_tree_endpoint(active_only: bool = False, db: Database = Depends(get_db)) -> List[CategoryTreeNode]:
    return build_category_tree(db, active_only=active_only)


@router.get("/categories/{category_id}", response_model=CategoryResponse)
def get_category_endpoint(category_id: str, db: Database = Depends(get_db)) -> CategoryResponse:
    return get_category(category_id, db)


@router.get("/categories/{category_id}/children", response_model=List[CategoryResponse])
def list_children_endpoint(
    category_id: str, active_only: bool = False, db: Database = Depends(get_db)
) -> List[CategoryResponse]:
    return list_child_categories(category_id, db, active_only=active_only)


@router.put("/categories/{category_id}", response_model=CategoryResponse)
def update_category_endpoint(
    category_id: str, payload: CategoryUpdate, db: Database = Depends(get_db)
) -> CategoryResponse:
    return update_category(category_id, payload, db)


@router.delete("/categories/{category_id}", response_model=CategoryDeleteResult)
def delete_category_endpoint(category_id: str, db: Database = Depends(get_db)) -> CategoryDeleteResult:
    deleted = delete_category_tree(category_id, db)
    return CategoryDeleteResult(category_id=category_id, deleted_count=deleted)

import pytest

from quizprep.core.errors import NotFoundError, StoreError, ValidationError
from quizprep.db.session import InMemoryDatabase
from quizprep.schemas.category import CategoryCreate, CategoryType, CategoryUpdate
from quizprep.services.category_service import (
    build_category_tree,
    create_category,
    delete_category_tree,
    get_category,
    list_categories,
    list_child_categories,
    update_category,
)


def _create(db, name, parent=None, order=None, category_type=CategoryType.exam):
    return create_category(
        CategoryCreate(name=name, type=category_type, parent_category=parent, order=order), db
    )


def _flatten(nodes):
    for node in nodes:
        yield node
        yield from _flatten(node.subcategories)


def test_create_requires_name_and_type(db):
    with pytest.raises(ValidationError):
        create_category(CategoryCreate(type=CategoryType.exam), db)
    with pytest.raises(ValidationError):
        create_category(CategoryCreate(name="Banking"), db)
    assert db.categories == {}


def test_level_follows_parent_at_creation(db):
    root = _create(db, "Government Exams")
    child = _create(db, "Banking", parent=root.id)
    grandchild = _create(db, "IBPS PO", parent=child.id)

    assert root.level == 0
    assert child.level == 1
    assert grandchild.level == 2
    assert root.is_active is True
    assert root.order == 0


def test_unresolved_parent_yields_level_zero(db):
    orphan = _create(db, "Orphan", parent="category_missing")
    assert orphan.level == 0
    assert orphan.parent_category == "category_missing"

    # Kept off the forest until the parent exists; still reachable by id.
    assert build_category_tree(db) == []
    assert get_category(orphan.id, db).name == "Orphan"


def test_children_ordered_by_order_then_name(db):
    root = _create(db, "Root")
    _create(db, "Zeta", parent=root.id, order=1)
    _create(db, "Beta", parent=root.id, order=2)
    _create(db, "Alpha", parent=root.id, order=1)

    names = [c.name for c in list_child_categories(root.id, db)]
    assert names == ["Alpha", "Zeta", "Beta"]


def test_list_categories_filters_by_type(db):
    _create(db, "SSC", category_type=CategoryType.exam)
    _create(db, "Python", category_type=CategoryType.course)

    courses = list_categories(db, category_type=CategoryType.course)
    assert [c.name for c in courses] == ["Python"]
    assert len(list_categories(db)) == 2


def test_update_recomputes_level_only_for_touched_node(db):
    a = _create(db, "A")
    b = _create(db, "B")
    c = _create(db, "C", parent=b.id)

    moved = update_category(b.id, CategoryUpdate(parent_category=a.id), db)
    assert moved.level == 1
    # descendants keep their cached level
    assert get_category(c.id, db).level == 1

    back_to_root = update_category(b.id, CategoryUpdate(parent_category=None), db)
    assert back_to_root.level == 0
    assert back_to_root.parent_category is None


def test_update_without_parent_keeps_level(db):
    root = _create(db, "Root")
    child = _create(db, "Child", parent=root.id)

    renamed = update_category(child.id, CategoryUpdate(name="Renamed", order=3), db)
    assert renamed.name == "Renamed"
    assert renamed.level == 1
    assert get_category(child.id, db).order == 3


def test_update_rejects_cycles(db):
    a = _create(db, "A")
    b = _create(db, "B", parent=a.id)
    c = _create(db, "C", parent=b.id)

    with pytest.raises(ValidationError):
        update_category(a.id, CategoryUpdate(parent_category=c.id), db)
    with pytest.raises(ValidationError):
        update_category(a.id, CategoryUpdate(parent_category=a.id), db)
    assert get_category(a.id, db).parent_category is None


@pytest.mark.parametrize("field", ["type", "order", "is_active", "name"])
def test_update_rejects_null_for_required_fields(db, field):
    category = _create(db, "Banking", order=2)

    with pytest.raises(ValidationError):
        update_category(category.id, CategoryUpdate(**{field: None}), db)

    stored = get_category(category.id, db)
    assert stored.order == 2
    assert stored.is_active is True
    assert stored.type == CategoryType.exam


def test_update_allows_clearing_optional_fields(db):
    category = create_category(
        CategoryCreate(name="Banking", type=CategoryType.exam, description="IBPS and SBI"), db
    )
    updated = update_category(category.id, CategoryUpdate(description=None, image=None), db)
    assert updated.description is None
    assert get_category(category.id, db).description is None


def test_update_missing_category(db):
    with pytest.raises(NotFoundError):
        update_category("category_missing", CategoryUpdate(name="x"), db)


def test_build_tree_contains_every_node_once(db):
    r1 = _create(db, "R1", order=1)
    r2 = _create(db, "R2", order=0)
    a = _create(db, "A", parent=r1.id)
    _create(db, "B", parent=r1.id)
    _create(db, "A1", parent=a.id)
    _create(db, "C", parent=r2.id)

    tree = build_category_tree(db)
    nodes = list(_flatten(tree))

    assert [n.name for n in tree] == ["R2", "R1"]
    assert len(nodes) == len(db.categories)
    assert len({n.id for n in nodes}) == len(nodes)
    for node in nodes:
        for sub in node.subcategories:
            assert sub.parent_category == node.id
    r1_node = tree[1]
    assert [s.name for s in r1_node.subcategories] == ["A", "B"]
    assert [s.name for s in r1_node.subcategories[0].subcategories] == ["A1"]


def test_build_tree_active_only_skips_inactive_branches(db):
    root = _create(db, "Root")
    hidden = _create(db, "Hidden", parent=root.id)
    _create(db, "Under Hidden", parent=hidden.id)
    update_category(hidden.id, CategoryUpdate(is_active=False), db)

    tree = build_category_tree(db, active_only=True)
    assert len(tree) == 1
    assert tree[0].subcategories == []


class FailingChildrenDatabase(InMemoryDatabase):
    def list_child_categories(self, parent_id, active_only=False):
        if parent_id is not None:
            raise StoreError("unreachable")
        return super().list_child_categories(parent_id, active_only)


def test_build_tree_fails_as_a_whole_on_store_error():
    db = FailingChildrenDatabase()
    _create(db, "Root")
    with pytest.raises(StoreError):
        build_category_tree(db)


def test_delete_subtree_removes_all_descendants(db):
    keep = _create(db, "Keep")
    root = _create(db, "Root")
    a = _create(db, "A", parent=root.id)
    b = _create(db, "B", parent=root.id)
    a1 = _create(db, "A1", parent=a.id)

    removed = delete_category_tree(root.id, db)

    assert removed == 4
    for removed_id in (root.id, a.id, b.id, a1.id):
        assert db.get_category(removed_id) is None
        assert list_child_categories(removed_id, db) == []
    assert list(db.categories) == [keep.id]


def test_delete_missing_root_raises_not_found(db):
    with pytest.raises(NotFoundError):
        delete_category_tree("category_missing", db)


def test_delete_reports_not_found_after_clearing_dangling_children(db):
    root = _create(db, "Root")
    child = _create(db, "Child", parent=root.id)
    # simulate an earlier partial delete that removed only the root
    db.delete_category(root.id)

    with pytest.raises(NotFoundError):
        delete_category_tree(root.id, db)
    assert db.get_category(child.id) is None

from fastapi.testclient import TestClient

from quizprep.core.config import get_settings
from quizprep.main import create_app

API = "/api/v1"


def _create_category(client, name, parent=None, **extra):
    body = {"name": name, "type": "exam", "parentCategory": parent, **extra}
    resp = client.post(f"{API}/categories", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


def _create_quiz(client, category_id, **extra):
    body = {"name": "Mock 1", "duration": 20, "totalQuestions": 5, "categoryId": category_id, **extra}
    return client.post(f"{API}/quizzes", json=body, headers={"X-User-Id": "user_42"})


def test_category_crud_and_tree(client):
    root = _create_category(client, "Government Exams")
    child = _create_category(client, "Banking", parent=root["id"], order=2)
    assert child["level"] == 1
    assert child["parentCategory"] == root["id"]
    assert child["isActive"] is True

    tree = client.get(f"{API}/categories/tree").json()
    assert len(tree) == 1
    assert tree[0]["subcategories"][0]["name"] == "Banking"
    assert tree[0]["subcategories"][0]["subcategories"] == []

    resp = client.put(f"{API}/categories/{child['id']}", json={"parentCategory": None})
    assert resp.status_code == 200
    assert resp.json()["level"] == 0

    assert client.get(f"{API}/categories/{root['id']}/children").json() == []


def test_category_validation_and_not_found(client):
    assert client.post(f"{API}/categories", json={"type": "exam"}).status_code == 400
    assert client.get(f"{API}/categories/category_missing").status_code == 404
    assert client.delete(f"{API}/categories/category_missing").status_code == 404


def test_category_update_rejects_null_required_fields(client):
    category = _create_category(client, "Banking", order=2)

    resp = client.put(f"{API}/categories/{category['id']}", json={"isActive": None, "order": None})
    assert resp.status_code == 400

    stored = client.get(f"{API}/categories/{category['id']}")
    assert stored.status_code == 200
    assert stored.json()["isActive"] is True
    assert stored.json()["order"] == 2


def test_cascade_delete(client):
    root = _create_category(client, "Root")
    child = _create_category(client, "Child", parent=root["id"])
    _create_category(client, "Leaf", parent=child["id"])

    resp = client.delete(f"{API}/categories/{root['id']}")
    assert resp.status_code == 200
    assert resp.json()["deletedCount"] == 3
    assert client.get(f"{API}/categories").json() == []


def test_quiz_flow_with_redaction(client):
    category = _create_category(client, "SSC")
    resp = _create_quiz(client, category["id"], price=10)
    assert resp.status_code == 201
    quiz = resp.json()
    assert quiz["isLocked"] is True
    assert quiz["createdBy"] == "user_42"

    question = {
        "text": "2 + 2 = ?",
        "options": [{"id": "A", "text": "3"}, {"id": "B", "text": "4"}],
        "correctOptionId": "B",
        "explanation": "Basic arithmetic",
    }
    resp = client.post(f"{API}/quizzes/{quiz['id']}/questions", json=question)
    assert resp.status_code == 201
    assert resp.json()["order"] == 0

    bad = dict(question, correctOptionId="Z")
    assert client.post(f"{API}/quizzes/{quiz['id']}/questions", json=bad).status_code == 400

    public = client.get(f"{API}/quizzes/{quiz['id']}").json()
    assert public["totalQuestions"] == 1
    assert "correctOptionId" not in public["questions"][0]
    assert "explanation" not in public["questions"][0]

    assert public["questions"][0]["nativeText"] is None

    full = client.get(f"{API}/quizzes/{quiz['id']}", params={"include_answers": True}).json()
    assert full["questions"][0]["correctOptionId"] == "B"
    assert full["questions"][0]["explanation"] == "Basic arithmetic"
    assert "nativeText" in full["questions"][0]
    assert full["questions"][0]["nativeText"] is None
    assert full["createdBy"] == "user_42"

    listing = client.get(f"{API}/quizzes/category/{category['id']}").json()
    assert [q["id"] for q in listing] == [quiz["id"]]


def test_quiz_patch_rejects_null_required_fields(client):
    category = _create_category(client, "SSC")
    quiz = _create_quiz(client, category["id"], price=10, tags=["ssc"]).json()

    resp = client.patch(f"{API}/quizzes/{quiz['id']}", json={"price": None, "tags": None})
    assert resp.status_code == 400

    stored = client.get(f"{API}/quizzes/{quiz['id']}")
    assert stored.status_code == 200
    assert stored.json()["price"] == 10
    assert stored.json()["tags"] == ["ssc"]

    resp = client.patch(f"{API}/quizzes/{quiz['id']}", json={"price": 0})
    assert resp.status_code == 200
    assert resp.json()["isLocked"] is True


def test_quiz_create_errors(client):
    assert _create_quiz(client, "category_missing").status_code == 404
    category = _create_category(client, "SSC")
    resp = client.post(f"{API}/quizzes", json={"name": "No duration", "categoryId": category["id"]})
    assert resp.status_code == 400


def test_submit_attempt_and_results(client):
    scores = [90, 70, 50]
    for idx, score in enumerate(scores):
        body = {"userId": f"user_{idx}", "score": score, "totalQuestions": 10, "correctAnswers": score // 10}
        assert client.post(f"{API}/quizzes/quiz_1/results", json=body).status_code == 201

    body = {
        "score": 80,
        "totalQuestions": 10,
        "correctAnswers": 8,
        "incorrectAnswers": 1,
        "notAttempted": 1,
        "timeTaken": 300,
        "answers": [{"questionId": "question_1", "selectedOptionId": "A", "isCorrect": True, "timeSpent": 12}],
    }
    resp = client.post(f"{API}/quizzes/quiz_1/results", json=body, headers={"X-User-Id": "user_new"})
    assert resp.status_code == 201
    result = resp.json()
    assert result["userId"] == "user_new"
    assert result["percentage"] == 80
    assert result["points"] == 780
    assert result["rank"] == "2/4"

    assert client.get(f"{API}/results/{result['id']}").json()["rank"] == "2/4"
    assert len(client.get(f"{API}/results/user/user_new").json()) == 1
    assert client.get(f"{API}/results/result_missing").status_code == 404

    board = client.get(f"{API}/quizzes/quiz_1/leaderboard").json()
    assert [r["score"] for r in board] == [90, 80, 70, 50]


def test_submit_attempt_without_user_is_rejected(client):
    assert client.post(f"{API}/quizzes/quiz_1/results", json={"score": 1}).status_code == 400


def test_lifespan_builds_memory_store(monkeypatch):
    monkeypatch.setenv("QUIZPREP_STORE_BACKEND", "memory")
    get_settings.cache_clear()  # type: ignore[attr-defined]
    try:
        app = create_app()
        with TestClient(app) as client:
            assert client.get(f"{API}/health").json() == {"status": "ok"}
            _create_category(client, "Root")
            assert len(client.get(f"{API}/categories/tree").json()) == 1
        assert app.state.db is None
    finally:
        get_settings.cache_clear()  # type: ignore[attr-defined]

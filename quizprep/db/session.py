import copy
import functools
import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

from fastapi import Request
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.errors import PyMongoError

from quizprep.core.config import Settings, get_settings
from quizprep.core.errors import StoreError
from quizprep.schemas.category import CategoryResponse, CategoryType
from quizprep.schemas.quiz import QuizResponse
from quizprep.schemas.result import QuizResultResponse

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

NO_ID = {"_id": 0}
SIBLING_SORT = [("order", ASCENDING), ("name", ASCENDING)]


def _store_call(func: F) -> F:
    """Re-raise driver failures as StoreError so they surface as a generic store failure."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except PyMongoError as exc:
            logger.error("Store call %s failed: %s", func.__name__, exc)
            raise StoreError(f"Document store failure during {func.__name__}") from exc

    return wrapper  # type: ignore[return-value]


class Database:
    """
    Mongo-backed repository layer.

    Swapping to another database should only require replacing this class while
    preserving method signatures used by services.
    """

    def __init__(self, uri: Optional[str] = None, db_name: Optional[str] = None) -> None:
        settings = get_settings()
        self.uri = uri or settings.mongo_uri
        self.db_name = db_name or settings.mongo_db_name
        self.client = MongoClient(self.uri)
        self.db = self.client[self.db_name]
        self._init_indexes()

    @_store_call
    def _init_indexes(self) -> None:
        self.db.categories.create_index([("id", ASCENDING)], unique=True)
        self.db.categories.create_index([("parentCategory", ASCENDING), ("type", ASCENDING), ("level", ASCENDING)])
        self.db.categories.create_index([("parentCategory", ASCENDING), ("order", ASCENDING), ("name", ASCENDING)])
        self.db.quizzes.create_index([("id", ASCENDING)], unique=True)
        self.db.quizzes.create_index([("categoryId", ASCENDING), ("isActive", ASCENDING)])
        self.db.quizzes.create_index([("name", "text"), ("description", "text")], name="quiz_search_text")
        self.db.quiz_results.create_index([("id", ASCENDING)], unique=True)
        self.db.quiz_results.create_index([("userId", ASCENDING), ("quizId", ASCENDING)])
        self.db.quiz_results.create_index([("quizId", ASCENDING), ("score", DESCENDING)])

    @_store_call
    def ping(self) -> bool:
        self.client.admin.command("ping")
        return True

    def close(self) -> None:
        self.client.close()

    # Category methods
    @_store_call
    def insert_category(self, category: CategoryResponse) -> None:
        self.db.categories.insert_one(category.to_doc())

    @_store_call
    def update_category(self, category: CategoryResponse) -> None:
        self.db.categories.update_one(
            {"id": category.id}, {"$set": category.to_doc(exclude={"id", "created_at"})}
        )

    @_store_call
    def delete_category(self, category_id: str) -> bool:
        return self.db.categories.delete_one({"id": category_id}).deleted_count > 0

    @_store_call
    def get_category(self, category_id: str) -> Optional[CategoryResponse]:
        doc = self.db.categories.find_one({"id": category_id}, NO_ID)
        return CategoryResponse.model_validate(doc) if doc else None

    @_store_call
    def list_categories(
        self, category_type: Optional[CategoryType] = None, active_only: bool = False
    ) -> List[CategoryResponse]:
        query: dict = {}
        if category_type is not None:
            query["type"] = CategoryType(category_type).value
        if active_only:
            query["isActive"] = True
        cursor = self.db.categories.find(query, NO_ID).sort(SIBLING_SORT)
        return [CategoryResponse.model_validate(doc) for doc in cursor]

    @_store_call
    def list_child_categories(self, parent_id: Optional[str], active_only: bool = False) -> List[CategoryResponse]:
        query: dict = {"parentCategory": parent_id}
        if active_only:
            query["isActive"] = True
        cursor = self.db.categories.find(query, NO_ID).sort(SIBLING_SORT)
        return [CategoryResponse.model_validate(doc) for doc in cursor]

    def list_root_categories(self, active_only: bool = False) -> List[CategoryResponse]:
        return self.list_child_categories(None, active_only=active_only)

    # Quiz methods
    @_store_call
    def insert_quiz(self, quiz: QuizResponse) -> None:
        self.db.quizzes.insert_one(quiz.to_doc())

    @_store_call
    def update_quiz(self, quiz: QuizResponse) -> None:
        self.db.quizzes.update_one({"id": quiz.id}, {"$set": quiz.to_doc(exclude={"id", "created_at"})})

    @_store_call
    def get_quiz(self, quiz_id: str) -> Optional[QuizResponse]:
        doc = self.db.quizzes.find_one({"id": quiz_id}, NO_ID)
        return QuizResponse.model_validate(doc) if doc else None

    @_store_call
    def list_quizzes(self, category_id: str, active_only: bool = True) -> List[QuizResponse]:
        query: dict = {"categoryId": category_id}
        if active_only:
            query["isActive"] = True
        return [QuizResponse.model_validate(doc) for doc in self.db.quizzes.find(query, NO_ID)]

    # Quiz result methods
    @_store_call
    def insert_result(self, result: QuizResultResponse) -> None:
        self.db.quiz_results.insert_one(result.to_doc())

    @_store_call
    def update_result(self, result_id: str, patch: Dict[str, Any]) -> None:
        self.db.quiz_results.update_one({"id": result_id}, {"$set": patch})

    @_store_call
    def get_result(self, result_id: str) -> Optional[QuizResultResponse]:
        doc = self.db.quiz_results.find_one({"id": result_id}, NO_ID)
        return QuizResultResponse.model_validate(doc) if doc else None

    @_store_call
    def count_results(self, quiz_id: str, score_above: Optional[int] = None) -> int:
        query: dict = {"quizId": quiz_id}
        if score_above is not None:
            query["score"] = {"$gt": score_above}
        return self.db.quiz_results.count_documents(query)

    @_store_call
    def list_results_by_user(self, user_id: str) -> List[QuizResultResponse]:
        cursor = self.db.quiz_results.find({"userId": user_id}, NO_ID).sort([("createdAt", DESCENDING)])
        return [QuizResultResponse.model_validate(doc) for doc in cursor]

    @_store_call
    def list_results_by_quiz(self, quiz_id: str, limit: int = 50) -> List[QuizResultResponse]:
        cursor = (
            self.db.quiz_results.find({"quizId": quiz_id}, NO_ID)
            .sort([("score", DESCENDING), ("completedAt", ASCENDING)])
            .limit(max(0, limit))
        )
        return [QuizResultResponse.model_validate(doc) for doc in cursor]


class InMemoryDatabase(Database):
    """Dict-backed store with the same contract, for unit tests and local runs."""

    def __init__(self) -> None:
        self.categories: Dict[str, Dict[str, Any]] = {}
        self.quizzes: Dict[str, Dict[str, Any]] = {}
        self.results: Dict[str, Dict[str, Any]] = {}

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        return None

    @staticmethod
    def _sibling_key(doc: Dict[str, Any]) -> tuple:
        return (doc.get("order", 0), doc.get("name", ""))

    def insert_category(self, category: CategoryResponse) -> None:
        self.categories[category.id] = category.to_doc()

    def update_category(self, category: CategoryResponse) -> None:
        if category.id not in self.categories:
            return
        self.categories[category.id].update(category.to_doc(exclude={"id", "created_at"}))

    def delete_category(self, category_id: str) -> bool:
        return self.categories.pop(category_id, None) is not None

    def get_category(self, category_id: str) -> Optional[CategoryResponse]:
        doc = self.categories.get(category_id)
        return CategoryResponse.model_validate(copy.deepcopy(doc)) if doc else None

    def list_categories(
        self, category_type: Optional[CategoryType] = None, active_only: bool = False
    ) -> List[CategoryResponse]:
        docs = [
            doc
            for doc in self.categories.values()
            if (category_type is None or doc["type"] == CategoryType(category_type).value)
            and (not active_only or doc.get("isActive", True))
        ]
        docs.sort(key=self._sibling_key)
        return [CategoryResponse.model_validate(copy.deepcopy(doc)) for doc in docs]

    def list_child_categories(self, parent_id: Optional[str], active_only: bool = False) -> List[CategoryResponse]:
        docs = [
            doc
            for doc in self.categories.values()
            if doc.get("parentCategory") == parent_id and (not active_only or doc.get("isActive", True))
        ]
        docs.sort(key=self._sibling_key)
        return [CategoryResponse.model_validate(copy.deepcopy(doc)) for doc in docs]

    def insert_quiz(self, quiz: QuizResponse) -> None:
        self.quizzes[quiz.id] = quiz.to_doc()

    def update_quiz(self, quiz: QuizResponse) -> None:
        if quiz.id not in self.quizzes:
            return
        self.quizzes[quiz.id].update(quiz.to_doc(exclude={"id", "created_at"}))

    def get_quiz(self, quiz_id: str) -> Optional[QuizResponse]:
        doc = self.quizzes.get(quiz_id)
        return QuizResponse.model_validate(copy.deepcopy(doc)) if doc else None

    def list_quizzes(self, category_id: str, active_only: bool = True) -> List[QuizResponse]:
        return [
            QuizResponse.model_validate(copy.deepcopy(doc))
            for doc in self.quizzes.values()
            if doc["categoryId"] == category_id and (not active_only or doc.get("isActive", True))
        ]

    def insert_result(self, result: QuizResultResponse) -> None:
        self.results[result.id] = result.to_doc()

    def update_result(self, result_id: str, patch: Dict[str, Any]) -> None:
        if result_id not in self.results:
            return
        self.results[result_id].update(patch)

    def get_result(self, result_id: str) -> Optional[QuizResultResponse]:
        doc = self.results.get(result_id)
        return QuizResultResponse.model_validate(copy.deepcopy(doc)) if doc else None

    def count_results(self, quiz_id: str, score_above: Optional[int] = None) -> int:
        return len(
            [
                1
                for doc in self.results.values()
                if doc["quizId"] == quiz_id and (score_above is None or doc["score"] > score_above)
            ]
        )

    def list_results_by_user(self, user_id: str) -> List[QuizResultResponse]:
        docs = [doc for doc in self.results.values() if doc["userId"] == user_id]
        docs.sort(key=lambda doc: doc["createdAt"], reverse=True)
        return [QuizResultResponse.model_validate(copy.deepcopy(doc)) for doc in docs]

    def list_results_by_quiz(self, quiz_id: str, limit: int = 50) -> List[QuizResultResponse]:
        docs = [doc for doc in self.results.values() if doc["quizId"] == quiz_id]
        docs.sort(key=lambda doc: (-doc["score"], doc.get("completedAt") or doc["createdAt"]))
        return [QuizResultResponse.model_validate(copy.deepcopy(doc)) for doc in docs[: max(0, limit)]]


def init_db(settings: Optional[Settings] = None) -> Database:
    """Construct the store handle selected by settings."""

    settings = settings or get_settings()
    if settings.store_backend == "memory":
        logger.info("Using in-memory document store")
        return InMemoryDatabase()
    logger.info("Connecting to MongoDB database %s", settings.mongo_db_name)
    return Database(settings.mongo_uri, settings.mongo_db_name)


def close_db(db: Optional[Database]) -> None:
    """Release the store handle created by init_db."""

    if db is not None:
        db.close()


def get_db(request: Request) -> Database:
    """Return the store handle attached to the running application."""

    return request.app.state.db

import logging
import uuid
from datetime import datetime
from typing import List, Optional, Union

from quizprep.core.errors import NotFoundError, ValidationError
from quizprep.db.session import Database
from quizprep.schemas.quiz import (
    Difficulty,
    QuestionCreate,
    QuestionDoc,
    QuizCreate,
    QuizPublicView,
    QuizResponse,
    QuizSummary,
    QuizUpdate,
)

logger = logging.getLogger(__name__)

# Patchable fields that a stored quiz always carries a value for.
NON_NULLABLE_FIELDS = ("name", "duration", "category_id", "price", "is_locked", "is_active", "tags", "rating")


def _missing(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _validate_question(payload: QuestionCreate) -> None:
    if _missing(payload.text) or not payload.options or _missing(payload.correct_option_id):
        raise ValidationError("Text, options, and correctOptionId are required.")
    if not any(option.id == payload.correct_option_id for option in payload.options):
        raise ValidationError("correctOptionId must match one of the option ids")


def _build_question(payload: QuestionCreate, order: int) -> QuestionDoc:
    return QuestionDoc(
        id=f"question_{uuid.uuid4()}",
        text=payload.text,
        native_text=payload.native_text,
        options=payload.options,
        correct_option_id=payload.correct_option_id,
        explanation=payload.explanation,
        difficulty=payload.difficulty or Difficulty.medium,
        order=order,
    )


def _next_order(questions: List[QuestionDoc]) -> int:
    return max(q.order for q in questions) + 1 if questions else 0


def _get_quiz(quiz_id: str, db: Database) -> QuizResponse:
    quiz = db.get_quiz(quiz_id)
    if not quiz:
        raise NotFoundError("Quiz not found")
    return quiz


def _ensure_category_exists(category_id: str, db: Database) -> None:
    if not db.get_category(category_id):
        raise NotFoundError("Category not found")


def create_quiz(payload: QuizCreate, db: Database, created_by: Optional[str] = None) -> QuizResponse:
    """Create a quiz under an existing category.

    ``isLocked`` is derived from ``price`` here and nowhere else. Questions sent
    with the quiz go through the same checks as add_question and, when present,
    define ``totalQuestions``.
    """

    if any(_missing(value) for value in (payload.name, payload.duration, payload.total_questions, payload.category_id)):
        raise ValidationError("Name, duration, totalQuestions, and categoryId are required.")
    _ensure_category_exists(payload.category_id, db)

    questions: List[QuestionDoc] = []
    for question in payload.questions or []:
        _validate_question(question)
        questions.append(_build_question(question, _next_order(questions)))

    price = payload.price or 0
    now = datetime.utcnow()
    quiz = QuizResponse(
        id=f"quiz_{uuid.uuid4()}",
        name=payload.name,
        description=payload.description,
        duration=payload.duration,
        total_questions=len(questions) if questions else payload.total_questions,
        category_id=payload.category_id,
        questions=questions,
        price=price,
        is_locked=price > 0,
        is_active=True,
        tags=payload.tags or [],
        created_by=created_by,
        created_at=now,
        updated_at=now,
    )
    db.insert_quiz(quiz)
    logger.info("Created quiz %s in category %s with %d question(s)", quiz.id, quiz.category_id, len(questions))
    return quiz


def get_quiz(quiz_id: str, db: Database, include_answers: bool = False) -> Union[QuizResponse, QuizPublicView]:
    """Fetch a quiz; without ``include_answers`` the questions come back without answer and explanation."""

    quiz = _get_quiz(quiz_id, db)
    if include_answers:
        return quiz
    return QuizPublicView.model_validate(quiz.model_dump())


def list_quizzes_by_category(category_id: str, db: Database) -> List[QuizSummary]:
    """Active quizzes of a category, without their questions."""

    _ensure_category_exists(category_id, db)
    return [QuizSummary.model_validate(quiz.model_dump()) for quiz in db.list_quizzes(category_id, active_only=True)]


def update_quiz(quiz_id: str, payload: QuizUpdate, db: Database) -> QuizResponse:
    """Patch quiz metadata. A price change does not touch ``isLocked``."""

    quiz = _get_quiz(quiz_id, db)
    changes = payload.model_dump(exclude_unset=True)
    for field in NON_NULLABLE_FIELDS:
        if field in changes and _missing(changes[field]):
            raise ValidationError(f"{field} cannot be empty.")
    if "category_id" in changes and changes["category_id"] != quiz.category_id:
        _ensure_category_exists(changes["category_id"], db)

    updated = quiz.model_copy(update=changes)
    updated.updated_at = datetime.utcnow()
    db.update_quiz(updated)
    return updated


def add_question(quiz_id: str, payload: QuestionCreate, db: Database) -> QuestionDoc:
    """Append a question to a quiz and persist the whole quiz.

    The question is validated before the quiz is loaded, so a rejected
    question never changes stored data.
    """

    _validate_question(payload)
    quiz = _get_quiz(quiz_id, db)

    question = _build_question(payload, _next_order(quiz.questions))
    quiz.questions.append(question)
    quiz.total_questions = len(quiz.questions)
    quiz.updated_at = datetime.utcnow()
    db.update_quiz(quiz)
    logger.info("Added question %s to quiz %s (order %d)", question.id, quiz_id, question.order)
    return question

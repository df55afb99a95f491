import logging
import math
import uuid
from datetime import datetime
from typing import List, Optional

from quizprep.core.errors import NotFoundError, ValidationError
from quizprep.db.session import Database
from quizprep.schemas.result import AttemptSubmit, QuizResultResponse

logger = logging.getLogger(__name__)

POINTS_PER_CORRECT = 100
PENALTY_PER_INCORRECT = 20


def compute_percentage(correct_answers: int, total_questions: int) -> int:
    """Share of correct answers, rounded half up to a whole percent."""

    if total_questions <= 0:
        return 0
    return math.floor(correct_answers / total_questions * 100 + 0.5)


def compute_points(correct_answers: int, incorrect_answers: int) -> int:
    return correct_answers * POINTS_PER_CORRECT - incorrect_answers * PENALTY_PER_INCORRECT


def compute_rank(result: QuizResultResponse, db: Database) -> str:
    """``"{position}/{takers}"`` among all results for the same quiz; ties share a position."""

    better = db.count_results(result.quiz_id, score_above=result.score)
    takers = db.count_results(result.quiz_id)
    return f"{better + 1}/{takers}"


def submit_attempt(quiz_id: Optional[str], payload: AttemptSubmit, db: Database) -> QuizResultResponse:
    """Score and persist a finished attempt, then rank it.

    The result is written first and ranked in a second write. Submissions
    racing on the same quiz can make the rank slightly stale; it is advisory.
    """

    if not payload.user_id or not quiz_id:
        raise ValidationError("UserId and quizId are required.")

    now = datetime.utcnow()
    result = QuizResultResponse(
        id=f"result_{uuid.uuid4()}",
        user_id=payload.user_id,
        quiz_id=quiz_id,
        score=payload.score,
        total_questions=payload.total_questions,
        correct_answers=payload.correct_answers,
        incorrect_answers=payload.incorrect_answers,
        not_attempted=payload.not_attempted,
        time_taken=payload.time_taken,
        answers=payload.answers,
        percentage=compute_percentage(payload.correct_answers, payload.total_questions),
        points=compute_points(payload.correct_answers, payload.incorrect_answers),
        completed=True,
        completed_at=now,
        created_at=now,
        updated_at=now,
    )
    db.insert_result(result)

    result.rank = compute_rank(result, db)
    result.updated_at = datetime.utcnow()
    db.update_result(result.id, {"rank": result.rank, "updatedAt": result.updated_at})
    logger.info("Recorded result %s for user %s on quiz %s (rank %s)", result.id, result.user_id, quiz_id, result.rank)
    return result


def get_result(result_id: str, db: Database) -> QuizResultResponse:
    result = db.get_result(result_id)
    if not result:
        raise NotFoundError("Quiz result not found")
    return result


def list_user_results(user_id: str, db: Database) -> List[QuizResultResponse]:
    """All attempts of a user, newest first."""

    return db.list_results_by_user(user_id)


def get_quiz_leaderboard(quiz_id: str, db: Database, limit: int = 50) -> List[QuizResultResponse]:
    """Top attempts for a quiz by score; earlier completion wins ties."""

    limit = max(1, min(limit, 200))
    return db.list_results_by_quiz(quiz_id, limit=limit)

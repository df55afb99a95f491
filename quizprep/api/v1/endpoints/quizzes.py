from typing import List, Optional, Union

from fastapi import APIRouter, Depends

from quizprep.api.deps import get_caller_id
from quizprep.db.session import Database, get_db
from quizprep.schemas.quiz import (
    QuestionCreate,
    QuestionDoc,
    QuizCreate,
    QuizPublicView,
    QuizResponse,
    QuizSummary,
    QuizUpdate,
)
from quizprep.schemas.result import AttemptSubmit, QuizResultResponse
from quizprep.services.quiz_service import add_question, create_quiz, get_quiz, list_quizzes_by_category, update_quiz
from quizprep.services.result_service import get_quiz_leaderboard, submit_attempt

router = APIRouter()


@router.post("/quizzes", response_model=QuizResponse, status_code=201)
def create_quiz_endpoint(
    payload: QuizCreate,
    db: Database = Depends(get_db),
    caller_id: Optional[str] = Depends(get_caller_id),
) -> QuizResponse:
    return create_quiz(payload, db, created_by=caller_id)


@router.get("/quizzes/category/{category_id}", response_model=List[QuizSummary])
def list_quizzes_by_category_endpoint(category_id: str, db: Database = Depends(get_db)) -> List[QuizSummary]:
    return list_quizzes_by_category(category_id, db)


@router.get("/quizzes/{quiz_id}", response_model=None)
def get_quiz_endpoint(
    quiz_id: str, include_answers: bool = False, db: Database = Depends(get_db)
) -> Union[QuizResponse, QuizPublicView]:
    return get_quiz(quiz_id, db, include_answers=include_answers)


@router.patch("/quizzes/{quiz_id}", response_model=QuizResponse)
def update_quiz_endpoint(quiz_id: str, payload: QuizUpdate, db: Database = Depends(get_db)) -> QuizResponse:
    return update_quiz(quiz_id, payload, db)


@router.post("/quizzes/{quiz_id}/questions", response_model=QuestionDoc, status_code=201)
def add_question_endpoint(quiz_id: str, payload: QuestionCreate, db: Database = Depends(get_db)) -> QuestionDoc:
    return add_question(quiz_id, payload, db)


@router.post("/quizzes/{quiz_id}/results", response_model=QuizResultResponse, status_code=201)
def submit_attempt_endpoint(
    quiz_id: str,
    payload: AttemptSubmit,
    db: Database = Depends(get_db),
    caller_id: Optional[str] = Depends(get_caller_id),
) -> QuizResultResponse:
    if not payload.user_id and caller_id:
        payload.user_id = caller_id
    return submit_attempt(quiz_id, payload, db)


@router.get("/quizzes/{quiz_id}/leaderboard", response_model=List[QuizResultResponse])
def quiz_leaderboard_endpoint(quiz_id: str, limit: int = 50, db: Database = Depends(get_db)) -> List[QuizResultResponse]:
    return get_quiz_leaderboard(quiz_id, db, limit=limit)

from typing import List

from fastapi import APIRouter, Depends

from quizprep.db.session import Database, get_db
from quizprep.schemas.result import QuizResultResponse
from quizprep.services.result_service import get_result, list_user_results

router = APIRouter()


@router.get("/results/user/{user_id}", response_model=List[QuizResultResponse])
def list_user_results_endpoint(user_id: str, db: Database = Depends(get_db)) -> List[QuizResultResponse]:
    return list_user_results(user_id, db)


@router.get("/results/{result_id}", response_model=QuizResultResponse)
def get_result_endpoint(result_id: str, db: Database = Depends(get_db)) -> QuizResultResponse:
    return get_result(result_id, db)

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from quizprep.schemas.common import CamelModel


class AnswerDoc(CamelModel):
    """One answered (or skipped) question within an attempt."""

    question_id: str
    selected_option_id: Optional[str] = None
    is_correct: Optional[bool] = None
    time_spent: Optional[int] = Field(default=None, ge=0, description="Seconds spent on the question")


class AttemptSubmit(CamelModel):
    """Raw counts for a finished attempt, as reported by the client."""

    user_id: Optional[str] = None
    answers: List[AnswerDoc] = Field(default_factory=list)
    time_taken: int = Field(default=0, ge=0, description="Seconds")
    score: int = 0
    total_questions: int = Field(default=0, ge=0)
    correct_answers: int = Field(default=0, ge=0)
    incorrect_answers: int = Field(default=0, ge=0)
    not_attempted: int = Field(default=0, ge=0)


class QuizResultResponse(CamelModel):
    """Representation of a persisted quiz attempt."""

    id: str
    user_id: str
    quiz_id: str
    score: int
    total_questions: int
    correct_answers: int
    incorrect_answers: int
    not_attempted: int
    time_taken: int
    answers: List[AnswerDoc] = Field(default_factory=list)
    completed: bool = False
    completed_at: Optional[datetime] = None
    percentage: int = 0
    points: int = 0
    rank: Optional[str] = None
    created_at: datetime
    updated_at: datetime

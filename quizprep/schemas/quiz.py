from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from quizprep.schemas.common import CamelModel


class Difficulty(str, Enum):
    easy = "easy"
    medium = "medium"
    hard = "hard"


class OptionDoc(CamelModel):
    id: str = Field(..., min_length=1, description="Short option id, e.g. A..D")
    text: str


class QuestionCreate(CamelModel):
    """Payload to add a question to a quiz. Required fields are checked by the service."""

    text: Optional[str] = None
    native_text: Optional[str] = None
    options: Optional[List[OptionDoc]] = None
    correct_option_id: Optional[str] = None
    explanation: Optional[str] = None
    difficulty: Optional[Difficulty] = None


class QuestionPublicView(CamelModel):
    """Question as shown to quiz takers: no answer, no explanation."""

    id: str
    text: str
    native_text: Optional[str] = None
    options: List[OptionDoc]
    difficulty: Difficulty = Difficulty.medium
    order: int = 0


class QuestionDoc(QuestionPublicView):
    """A question embedded in a quiz, as stored."""

    correct_option_id: str
    explanation: Optional[str] = None


class QuizCreate(CamelModel):
    """Payload to create a quiz. Required fields are checked by the service."""

    name: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[int] = Field(default=None, description="Duration in minutes")
    total_questions: Optional[int] = None
    category_id: Optional[str] = None
    questions: Optional[List[QuestionCreate]] = None
    price: Optional[int] = Field(default=None, ge=0, description="0 means free")
    tags: Optional[List[str]] = None


class QuizUpdate(CamelModel):
    """Payload to update quiz metadata. Questions are managed through add_question."""

    name: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[int] = None
    category_id: Optional[str] = None
    price: Optional[int] = Field(default=None, ge=0)
    is_locked: Optional[bool] = None
    is_active: Optional[bool] = None
    tags: Optional[List[str]] = None
    rating: Optional[float] = Field(default=None, ge=0, le=5)


class QuizSummary(CamelModel):
    """Listing view of a quiz without its questions."""

    id: str
    name: str
    description: Optional[str] = None
    duration: int
    total_questions: int
    price: int = 0
    is_locked: bool = False
    tags: List[str] = Field(default_factory=list)
    rating: float = 4.5


class QuizPublicView(QuizSummary):
    """Quiz with its questions redacted for quiz takers."""

    category_id: str
    questions: List[QuestionPublicView] = Field(default_factory=list)
    is_active: bool = True
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class QuizResponse(QuizPublicView):
    """Representation of a persisted quiz."""

    questions: List[QuestionDoc] = Field(default_factory=list)

from pydantic import BaseModel, Field
from typing import Any, FrozenSet, List, Literal, Optional, Union
from datetime import datetime
from uuid import UUID

from app.models import Difficulty, QuestionType


# ---------------------------
# Authoring payloads
# ---------------------------
class QuestionCreate(BaseModel):
    text: str = Field(min_length=1)
    # Kept as a plain string so unknown types reach the validator (400) instead of 422.
    type: str
    options: List[str] = []
    correct_answer: Any = None
    marks: int = Field(1, ge=1)
    subject: Optional[str] = None
    explanation: Optional[str] = None
    answer_link: Optional[str] = None
    difficulty: Difficulty = Difficulty.MEDIUM
    tags: List[str] = []


class QuestionUpdate(BaseModel):
    text: Optional[str] = Field(None, min_length=1)
    type: Optional[str] = None
    options: Optional[List[str]] = None
    correct_answer: Any = None
    marks: Optional[int] = Field(None, ge=1)
    subject: Optional[str] = None
    explanation: Optional[str] = None
    answer_link: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    tags: Optional[List[str]] = None


# ---------------------------
# Views
# ---------------------------
class ImageView(BaseModel):
    id: UUID
    image_url: str
    file_name: str
    file_size: int
    file_type: str

    model_config = {"from_attributes": True}


class QuestionView(BaseModel):
    """Question as shown to someone attempting the quiz (no answers)."""
    id: UUID
    text: str
    type: QuestionType
    options: List[str]
    marks: int
    subject: Optional[str] = None
    difficulty: Difficulty
    tags: List[str]
    images: List[ImageView] = []

    model_config = {"from_attributes": True}


class QuestionEditView(QuestionView):
    correct_answer: Any
    explanation: Optional[str] = None
    answer_link: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# ---------------------------
# Gradable question variants
# ---------------------------
class _Gradable(BaseModel):
    model_config = {"frozen": True}

    id: Any = None
    marks: int = 1


class SingleSelectQuestion(_Gradable):
    type: Literal["SINGLE_SELECT"] = "SINGLE_SELECT"
    options: List[str]
    correct_answer: int


class MultipleSelectQuestion(_Gradable):
    type: Literal["MULTIPLE_SELECT"] = "MULTIPLE_SELECT"
    options: List[str]
    correct_answer: FrozenSet[int]


class FillInBlankQuestion(_Gradable):
    type: Literal["FILL_IN_BLANK"] = "FILL_IN_BLANK"
    correct_answer: List[str]


class IntegerQuestion(_Gradable):
    type: Literal["INTEGER"] = "INTEGER"
    correct_answer: Union[int, float]


class UngradableQuestion(_Gradable):
    """A stored question whose shape no longer validates; it scores zero."""
    type: str


GradableQuestion = Union[
    SingleSelectQuestion,
    MultipleSelectQuestion,
    FillInBlankQuestion,
    IntegerQuestion,
    UngradableQuestion,
]

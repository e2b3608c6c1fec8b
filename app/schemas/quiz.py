from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from uuid import UUID

from app.schemas.question import QuestionCreate, QuestionView, QuestionEditView, ImageView


class QuizCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    duration: int = Field(gt=0)
    is_public: bool = False
    password: Optional[str] = Field(None, min_length=1)
    class_id: Optional[UUID] = None
    questions: List[QuestionCreate] = Field(min_length=1)


class QuizUpdate(BaseModel):
    """Partial update; omitted fields are left as they are."""
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    duration: Optional[int] = Field(None, gt=0)
    is_public: Optional[bool] = None
    # An empty string clears the password.
    password: Optional[str] = None
    class_id: Optional[UUID] = None


class QuizLite(BaseModel):
    id: UUID
    title: str
    description: Optional[str]
    duration: int
    is_public: bool
    has_password: bool
    class_id: Optional[UUID]
    total_marks: int
    question_count: int
    attempt_count: int
    created_at: datetime


class QuizDetailView(BaseModel):
    id: UUID
    title: str
    description: Optional[str]
    duration: int
    is_public: bool
    has_password: bool
    total_marks: int
    attempt_count: int
    images: List[ImageView]
    questions: List[QuestionView]


class QuizEditView(QuizDetailView):
    class_id: Optional[UUID]
    questions: List[QuestionEditView]

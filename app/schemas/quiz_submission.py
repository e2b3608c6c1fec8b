from pydantic import BaseModel
from typing import Any, List, Optional
from uuid import UUID
from datetime import datetime

from app.models import QuestionType


class QuizAnswerSubmit(BaseModel):
    question_id: UUID
    answer: Any = None


class QuizSubmitRequest(BaseModel):
    answers: List[QuizAnswerSubmit]
    password: Optional[str] = None


class QuizSubmitResponse(BaseModel):
    response_id: UUID
    quiz_id: UUID
    score: float
    total_marks: int
    percentage: int
    submitted_at: datetime


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: UUID
    name: Optional[str]
    email: str
    score: float
    total_marks: int
    percentage: int
    submitted_at: datetime


class QuestionResult(BaseModel):
    question_id: UUID
    text: str
    type: QuestionType
    options: List[str]
    marks: int
    submitted_answer: Any
    correct_answer: Any
    is_correct: bool
    obtained_marks: float
    explanation: Optional[str] = None


class ResponseDetailView(BaseModel):
    response_id: UUID
    quiz_id: UUID
    user_id: UUID
    name: Optional[str]
    email: str
    score: float
    total_marks: int
    percentage: int
    submitted_at: datetime
    questions: List[QuestionResult]

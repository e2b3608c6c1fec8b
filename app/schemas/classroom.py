from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from uuid import UUID


class ClassCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    password: str = Field(min_length=1)


class ClassUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    password: Optional[str] = Field(None, min_length=1)


class ClassJoin(BaseModel):
    class_id: UUID
    password: str


class PersonLite(BaseModel):
    id: UUID
    name: Optional[str]
    email: str

    model_config = {"from_attributes": True}


class QuizBrief(BaseModel):
    id: UUID
    title: str
    description: Optional[str]

    model_config = {"from_attributes": True}


class ClassView(BaseModel):
    id: UUID
    name: str
    description: Optional[str]
    created_at: datetime
    teacher: PersonLite
    students: List[PersonLite] = []
    quizzes: List[QuizBrief] = []

    model_config = {"from_attributes": True}

from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime
from uuid import UUID
from app.models import UserRole


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    name: Optional[str] = None
    # Admin accounts are created with create_admin.py or by another admin.
    role: UserRole = UserRole.STUDENT


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    role: str


class CurrentUser(BaseModel):
    id: UUID
    email: str
    role: UserRole


class UserProfile(BaseModel):
    id: UUID
    email: str
    name: Optional[str]
    role: UserRole
    created_at: datetime
    updated_at: datetime
    last_login: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }


class UserProfileUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6)


class TeacherStats(BaseModel):
    quizzes: int
    students: int
    classes: int
    total_attempts: int


class StudentStats(BaseModel):
    attempted_quizzes: int
    classes: int
    total_score: float
    average_score: int


#for admin

class AdminUserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    name: Optional[str] = None
    role: UserRole


class AdminUserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    name: Optional[str] = None
    role: Optional[UserRole] = None

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, distinct

from app.database import get_db
from app.models import User, UserRole, Quiz, Class, Response, class_students
from app.schemas.user import UserProfile, UserProfileUpdate, PasswordChange, TeacherStats, StudentStats
from app.auth.dependencies import get_current_user
from app.auth.password_security import hash_password, verify_password


router = APIRouter(prefix="/user", tags=["User Profile"])


@router.get("/profile", response_model=UserProfile)
async def get_my_profile(
    current_user: User = Depends(get_current_user),
):
    return current_user


@router.put("/profile", response_model=UserProfile)
async def update_my_profile(
    payload: UserProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if payload.email and payload.email != current_user.email:
        result = await db.execute(select(User).where(User.email == payload.email))
        existing = result.scalars().first()
        if existing and existing.id != current_user.id:
            raise HTTPException(409, "Email already exists")
        current_user.email = payload.email

    if payload.name:
        current_user.name = payload.name

    db.add(current_user)
    await db.commit()
    await db.refresh(current_user)
    return current_user


@router.put("/password")
async def change_password(
    payload: PasswordChange,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not verify_password(payload.current_password, current_user.password_hash):
        raise HTTPException(400, "Current password is incorrect")

    current_user.password_hash = hash_password(payload.new_password)
    db.add(current_user)
    await db.commit()

    return {"message": "Password changed successfully"}


@router.get("/stats")
async def get_my_stats(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if current_user.role == UserRole.TEACHER:
        quizzes = await db.scalar(
            select(func.count(Quiz.id)).where(Quiz.teacher_id == current_user.id)
        )
        students = await db.scalar(
            select(func.count(distinct(Response.user_id)))
            .join(Quiz, Response.quiz_id == Quiz.id)
            .where(Quiz.teacher_id == current_user.id)
        )
        classes = await db.scalar(
            select(func.count(Class.id)).where(Class.teacher_id == current_user.id)
        )
        total_attempts = await db.scalar(
            select(func.count(Response.id))
            .join(Quiz, Response.quiz_id == Quiz.id)
            .where(Quiz.teacher_id == current_user.id)
        )
        return {
            "stats": TeacherStats(
                quizzes=quizzes or 0,
                students=students or 0,
                classes=classes or 0,
                total_attempts=total_attempts or 0,
            )
        }

    attempted = await db.scalar(
        select(func.count(Response.id)).where(Response.user_id == current_user.id)
    )
    classes = await db.scalar(
        select(func.count()).select_from(class_students)
        .where(class_students.c.student_id == current_user.id)
    )
    total_score = await db.scalar(
        select(func.sum(Response.score)).where(Response.user_id == current_user.id)
    )
    average_score = await db.scalar(
        select(func.avg(Response.score)).where(Response.user_id == current_user.id)
    )
    return {
        "stats": StudentStats(
            attempted_quizzes=attempted or 0,
            classes=classes or 0,
            total_score=total_score or 0,
            average_score=round(average_score or 0),
        )
    }

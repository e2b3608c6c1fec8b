from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Quiz, User, class_students
from app.auth.password_security import verify_password


def is_quiz_owner(quiz: Quiz, user: Optional[User]) -> bool:
    return user is not None and quiz.teacher_id == user.id


def ensure_quiz_owner(quiz: Quiz, current_user: User, action: str = "modify"):
    """Only the teacher who created the quiz may change it."""
    if not is_quiz_owner(quiz, current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"You can only {action} your own quizzes",
        )


async def ensure_class_member(class_id, student_id, db: AsyncSession):
    result = await db.execute(
        select(class_students).where(
            class_students.c.class_id == class_id,
            class_students.c.student_id == student_id,
        )
    )
    if not result.first():
        raise HTTPException(403, "You are not enrolled in this quiz's class")


async def ensure_quiz_access(
    quiz: Quiz,
    current_user: Optional[User],
    password: Optional[str],
    db: AsyncSession,
):
    """
    Gate viewing and attempting a quiz.

    The owner always passes. Anonymous callers only see public quizzes.
    Class quizzes that are not public are limited to enrolled students.
    A quiz password, when set, applies to everyone but the owner.
    """
    if is_quiz_owner(quiz, current_user):
        return

    if current_user is None:
        if not quiz.is_public:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authentication required",
            )
    elif quiz.class_id and not quiz.is_public:
        await ensure_class_member(quiz.class_id, current_user.id, db)

    if quiz.password_hash:
        if not verify_password(password, quiz.password_hash):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid quiz password",
            )

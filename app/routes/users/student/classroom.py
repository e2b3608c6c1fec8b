from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from typing import List

from app.database import get_db
from app.auth.dependencies import get_current_user, is_student
from app.auth.password_security import verify_password
from app.models import Class, User, class_students
from app.schemas.classroom import ClassJoin, ClassView, PersonLite, QuizBrief

router = APIRouter(
    prefix="/class",
    tags=["Student Class Endpoints"]
)


@router.get("/enrolled", response_model=List[ClassView])
async def list_enrolled_classes(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Class)
        .join(class_students, class_students.c.class_id == Class.id)
        .options(
            selectinload(Class.teacher),
            selectinload(Class.quizzes),
        )
        .where(class_students.c.student_id == current_user.id)
        .order_by(Class.created_at)
    )
    # Students do not see the rest of the roster.
    return [
        ClassView(
            id=klass.id,
            name=klass.name,
            description=klass.description,
            created_at=klass.created_at,
            teacher=PersonLite.model_validate(klass.teacher),
            quizzes=[QuizBrief.model_validate(quiz) for quiz in klass.quizzes],
        )
        for klass in result.scalars().all()
    ]


@router.post("/join")
async def join_class(
    payload: ClassJoin,
    current_user: User = Depends(is_student),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Class)
        .options(selectinload(Class.students))
        .where(Class.id == payload.class_id)
    )
    klass = result.scalar_one_or_none()

    if not klass:
        raise HTTPException(404, "Class not found")

    if not verify_password(payload.password, klass.password_hash):
        raise HTTPException(401, "Invalid class password")

    if any(student.id == current_user.id for student in klass.students):
        return {"message": "Already enrolled in this class"}

    klass.students.append(current_user)
    await db.commit()

    return {"message": "Successfully joined the class"}

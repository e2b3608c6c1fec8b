from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from typing import List
from uuid import UUID

from app.database import get_db
from app.auth.dependencies import is_teacher
from app.auth.password_security import hash_password
from app.models import Class, User
from app.schemas.classroom import ClassCreate, ClassUpdate, ClassView

router = APIRouter(
    prefix="/class",
    tags=["Teacher Class Endpoints"]
)


def _with_roster(stmt):
    return stmt.options(
        selectinload(Class.teacher),
        selectinload(Class.students),
        selectinload(Class.quizzes),
    )


async def _get_owned_class(class_id: UUID, current_user: User, db: AsyncSession) -> Class:
    result = await db.execute(
        _with_roster(select(Class))
        .where(Class.id == class_id)
        .execution_options(populate_existing=True)
    )
    klass = result.scalar_one_or_none()

    # Same answer for "missing" and "not yours".
    if not klass or klass.teacher_id != current_user.id:
        raise HTTPException(404, "Class not found or unauthorized")
    return klass


@router.post("", response_model=ClassView, status_code=201)
async def create_class(
    payload: ClassCreate,
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
):
    klass = Class(
        name=payload.name,
        description=payload.description,
        password_hash=hash_password(payload.password),
        teacher_id=current_user.id,
    )
    db.add(klass)
    await db.commit()

    return await _get_owned_class(klass.id, current_user, db)


@router.get("/teaching", response_model=List[ClassView])
async def list_teaching_classes(
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        _with_roster(select(Class))
        .where(Class.teacher_id == current_user.id)
        .order_by(Class.created_at)
    )
    return result.scalars().all()


@router.put("/{class_id}")
async def update_class(
    class_id: UUID,
    payload: ClassUpdate,
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
):
    klass = await _get_owned_class(class_id, current_user, db)

    if payload.name:
        klass.name = payload.name
    if payload.description:
        klass.description = payload.description
    if payload.password:
        klass.password_hash = hash_password(payload.password)

    await db.commit()
    return {"message": "Successfully updated the class"}


@router.delete("/{class_id}")
async def delete_class(
    class_id: UUID,
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
):
    klass = await _get_owned_class(class_id, current_user, db)

    # Quizzes outlive their class.
    for quiz in klass.quizzes:
        quiz.class_id = None

    await db.delete(klass)
    await db.commit()
    return {"message": "Successfully deleted the class"}

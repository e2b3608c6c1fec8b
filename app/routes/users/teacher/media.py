import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, UploadFile, File
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import User, Quiz, Question, QuizImage, QuestionImage
from app.database import get_db
from app.auth.dependencies import is_teacher
from app.auth.quiz_access import ensure_quiz_owner
from app.helpers.storage import (
    FileStorage, get_storage, read_image_upload, delete_keys_best_effort,
    QUIZ_IMAGE_FOLDER, QUESTION_IMAGE_FOLDER,
)
from app.schemas.question import ImageView

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Teacher Upload Endpoints"],
    prefix="/upload"
)


@router.post("/quiz/{quiz_id}/image", status_code=201)
async def upload_quiz_image(
    quiz_id: UUID,
    file: UploadFile = File(...),
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
):
    # --------------------------
    # Validate quiz
    # --------------------------
    result = await db.execute(select(Quiz).where(Quiz.id == quiz_id))
    quiz = result.scalar_one_or_none()
    if not quiz:
        raise HTTPException(404, "Quiz not found")

    ensure_quiz_owner(quiz, current_user, action="add images to")

    # --------------------------
    # Save file
    # --------------------------
    data = await read_image_upload(file)
    stored = await storage.upload(data, file.filename, QUIZ_IMAGE_FOLDER)

    image = QuizImage(
        quiz_id=quiz.id,
        image_url=stored.url,
        storage_key=stored.key,
        file_name=file.filename or stored.key,
        file_size=len(data),
        file_type=file.content_type,
    )

    db.add(image)
    await db.commit()
    await db.refresh(image)

    return {
        "message": "Image uploaded successfully",
        "image": ImageView.model_validate(image),
    }


@router.delete("/quiz/image/{image_id}")
async def delete_quiz_image(
    image_id: UUID,
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
):
    result = await db.execute(
        select(QuizImage)
        .options(selectinload(QuizImage.quiz))
        .where(QuizImage.id == image_id)
    )
    image = result.scalar_one_or_none()
    if not image:
        raise HTTPException(404, "Image not found")

    ensure_quiz_owner(image.quiz, current_user, action="delete images from")

    await delete_keys_best_effort(storage, [image.storage_key])

    await db.delete(image)
    await db.commit()

    return {"message": "Image deleted successfully", "image_id": str(image_id)}


@router.post("/question/{question_id}/image", status_code=201)
async def upload_question_image(
    question_id: UUID,
    file: UploadFile = File(...),
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
):
    result = await db.execute(
        select(Question)
        .options(selectinload(Question.quiz))
        .where(Question.id == question_id)
    )
    question = result.scalar_one_or_none()
    if not question:
        raise HTTPException(404, "Question not found")

    ensure_quiz_owner(question.quiz, current_user, action="add images to")

    data = await read_image_upload(file)
    stored = await storage.upload(data, file.filename, QUESTION_IMAGE_FOLDER)

    image = QuestionImage(
        question_id=question.id,
        image_url=stored.url,
        storage_key=stored.key,
        file_name=file.filename or stored.key,
        file_size=len(data),
        file_type=file.content_type,
    )

    db.add(image)
    await db.commit()
    await db.refresh(image)

    return {
        "message": "Image uploaded successfully",
        "image": ImageView.model_validate(image),
    }


@router.delete("/question/image/{image_id}")
async def delete_question_image(
    image_id: UUID,
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
):
    result = await db.execute(
        select(QuestionImage)
        .options(selectinload(QuestionImage.question).selectinload(Question.quiz))
        .where(QuestionImage.id == image_id)
    )
    image = result.scalar_one_or_none()
    if not image:
        raise HTTPException(404, "Image not found")

    ensure_quiz_owner(image.question.quiz, current_user, action="delete images from")

    # Blob removal is best-effort; the record goes regardless.
    await delete_keys_best_effort(storage, [image.storage_key])

    await db.delete(image)
    await db.commit()

    return {"message": "Image deleted successfully", "image_id": str(image_id)}

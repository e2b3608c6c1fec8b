import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.database import get_db
from app.auth.dependencies import is_teacher
from app.auth.password_security import hash_optional_password
from app.auth.quiz_access import ensure_quiz_owner
from app.helpers.question_validator import validate_question, question_fields
from app.helpers.quiz_views import get_quiz_or_404, quiz_lite, quiz_edit_view
from app.helpers.storage import FileStorage, get_storage, delete_keys_best_effort
from app.models import Class, Quiz, Question, QuestionType, User
from app.schemas.question import QuestionCreate, QuestionUpdate, QuestionEditView
from app.schemas.quiz import QuizCreate, QuizUpdate, QuizLite

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/quiz",
    tags=["Teacher Quiz Endpoints"]
)


async def _ensure_own_class(class_id: Optional[UUID], current_user: User, db: AsyncSession):
    if class_id is None:
        return
    result = await db.execute(select(Class).where(Class.id == class_id))
    klass = result.scalar_one_or_none()
    if not klass:
        raise HTTPException(404, "Class not found")
    if klass.teacher_id != current_user.id:
        raise HTTPException(403, "You can only attach quizzes to your own classes")


def _question_from_payload(q: QuestionCreate, position: int) -> Question:
    return Question(
        text=q.text,
        type=QuestionType(q.type),
        options=q.options,
        correct_answer=q.correct_answer,
        marks=q.marks,
        position=position,
        subject=q.subject,
        explanation=q.explanation,
        answer_link=q.answer_link,
        difficulty=q.difficulty,
        tags=q.tags,
    )


async def _get_question_with_quiz(question_id: UUID, db: AsyncSession) -> Question:
    result = await db.execute(
        select(Question)
        .options(
            selectinload(Question.quiz),
            selectinload(Question.images),
        )
        .where(Question.id == question_id)
        .execution_options(populate_existing=True)
    )
    question = result.scalar_one_or_none()
    if not question:
        raise HTTPException(404, "Question not found")
    return question


@router.post("", status_code=201)
async def create_quiz(
    quiz_in: QuizCreate,
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
):
    # --------------------------
    # Every question must validate, or nothing is stored
    # --------------------------
    for index, q in enumerate(quiz_in.questions):
        if not validate_question(q.model_dump()):
            raise HTTPException(
                400,
                f"Question {index + 1} is not valid for type '{q.type}'"
            )

    await _ensure_own_class(quiz_in.class_id, current_user, db)

    quiz = Quiz(
        teacher_id=current_user.id,
        class_id=quiz_in.class_id,
        title=quiz_in.title,
        description=quiz_in.description,
        duration=quiz_in.duration,
        is_public=quiz_in.is_public,
        password_hash=hash_optional_password(quiz_in.password),
        questions=[
            _question_from_payload(q, position)
            for position, q in enumerate(quiz_in.questions)
        ],
    )

    db.add(quiz)
    await db.commit()

    logger.info("Teacher %s created quiz %s with %d questions", current_user.id, quiz.id, len(quiz_in.questions))

    quiz = await get_quiz_or_404(quiz.id, db)
    return {
        "message": "Quiz created successfully",
        "quiz": quiz_edit_view(quiz),
    }


@router.get("/mine", response_model=List[QuizLite])
async def list_my_quizzes(
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Quiz)
        .options(selectinload(Quiz.questions))
        .where(Quiz.teacher_id == current_user.id)
        .order_by(Quiz.created_at.desc())
    )
    return [quiz_lite(quiz) for quiz in result.scalars().all()]


@router.get("/{quiz_id}/edit")
async def get_quiz_for_editing(
    quiz_id: UUID,
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
):
    quiz = await get_quiz_or_404(quiz_id, db)
    ensure_quiz_owner(quiz, current_user, action="view answers of")
    return quiz_edit_view(quiz)


@router.put("/{quiz_id}")
async def update_quiz(
    quiz_id: UUID,
    quiz_in: QuizUpdate,
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
):
    quiz = await get_quiz_or_404(quiz_id, db)
    ensure_quiz_owner(quiz, current_user, action="update")

    fields = quiz_in.model_fields_set

    if quiz_in.title is not None:
        quiz.title = quiz_in.title
    if quiz_in.description is not None:
        quiz.description = quiz_in.description
    if quiz_in.duration is not None:
        quiz.duration = quiz_in.duration
    if quiz_in.is_public is not None:
        quiz.is_public = quiz_in.is_public
    if "password" in fields:
        quiz.password_hash = hash_optional_password(quiz_in.password)
    if "class_id" in fields:
        await _ensure_own_class(quiz_in.class_id, current_user, db)
        quiz.class_id = quiz_in.class_id

    await db.commit()

    quiz = await get_quiz_or_404(quiz.id, db)
    return {
        "message": "Quiz updated successfully",
        "quiz": quiz_edit_view(quiz),
    }


@router.delete("/{quiz_id}")
async def delete_quiz(
    quiz_id: UUID,
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
):
    quiz = await get_quiz_or_404(quiz_id, db)
    ensure_quiz_owner(quiz, current_user, action="delete")

    # --------------------------
    # Blobs first, joined before the record goes
    # --------------------------
    keys = [img.storage_key for img in quiz.images]
    keys += [img.storage_key for q in quiz.questions for img in q.images]
    failed = await delete_keys_best_effort(storage, keys)

    await db.delete(quiz)
    await db.commit()

    logger.info("Deleted quiz %s (%d stored files, %d not removed)", quiz_id, len(keys), failed)
    return {"message": "Quiz deleted successfully"}


@router.post("/{quiz_id}/questions", status_code=201)
async def add_question(
    quiz_id: UUID,
    question_in: QuestionCreate,
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
):
    quiz = await get_quiz_or_404(quiz_id, db)
    ensure_quiz_owner(quiz, current_user, action="add questions to")

    if not validate_question(question_in.model_dump()):
        raise HTTPException(400, f"Question is not valid for type '{question_in.type}'")

    last_position = await db.scalar(
        select(func.max(Question.position)).where(Question.quiz_id == quiz.id)
    )
    question = _question_from_payload(
        question_in,
        position=0 if last_position is None else last_position + 1,
    )
    question.quiz_id = quiz.id

    db.add(question)
    await db.commit()

    question = await _get_question_with_quiz(question.id, db)
    return {
        "message": "Question added successfully",
        "question": QuestionEditView.model_validate(question),
    }


@router.put("/questions/{question_id}")
async def update_question(
    question_id: UUID,
    question_in: QuestionUpdate,
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
):
    question = await _get_question_with_quiz(question_id, db)
    ensure_quiz_owner(question.quiz, current_user, action="update questions in")

    changes = question_in.model_dump(exclude_unset=True)

    # --------------------------
    # Validate the question as it will be after the update
    # --------------------------
    merged = question_fields(question)
    merged.update({k: v for k, v in changes.items() if k in merged})
    if not validate_question(merged):
        raise HTTPException(400, f"Question is not valid for type '{merged['type']}'")

    for field, value in changes.items():
        if field == "type":
            value = QuestionType(value)
        if value is None and field not in ("subject", "explanation", "answer_link"):
            continue
        setattr(question, field, value)

    await db.commit()

    question = await _get_question_with_quiz(question.id, db)
    return {
        "message": "Question updated successfully",
        "question": QuestionEditView.model_validate(question),
    }


@router.delete("/questions/{question_id}")
async def delete_question(
    question_id: UUID,
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
):
    question = await _get_question_with_quiz(question_id, db)
    ensure_quiz_owner(question.quiz, current_user, action="delete questions from")

    await delete_keys_best_effort(storage, [img.storage_key for img in question.images])

    await db.delete(question)
    await db.commit()

    return {"message": "Question deleted successfully"}

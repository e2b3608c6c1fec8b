from typing import List
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.models import Quiz, Question
from app.helpers.question_validator import question_snapshot, to_gradable
from app.schemas.question import GradableQuestion, ImageView, QuestionView, QuestionEditView
from app.schemas.quiz import QuizLite, QuizDetailView, QuizEditView


def select_quiz_with_content():
    return (
        select(Quiz)
        .options(
            selectinload(Quiz.images),
            selectinload(Quiz.questions).selectinload(Question.images),
        )
        .execution_options(populate_existing=True)
    )


async def get_quiz_or_404(quiz_id: UUID, db: AsyncSession) -> Quiz:
    """Fetch a quiz with its questions and images in one read."""
    result = await db.execute(
        select_quiz_with_content().where(Quiz.id == quiz_id)
    )
    quiz = result.scalar_one_or_none()

    if not quiz:
        raise HTTPException(404, "Quiz not found")
    return quiz


def question_snapshots(quiz: Quiz) -> List[dict]:
    """The quiz's questions as they are graded right now, in display order."""
    return [question_snapshot(q) for q in quiz.questions]


def gradable_questions(snapshots: List[dict]) -> List[GradableQuestion]:
    return [to_gradable(snapshot) for snapshot in snapshots]


def quiz_lite(quiz: Quiz) -> QuizLite:
    return QuizLite(
        id=quiz.id,
        title=quiz.title,
        description=quiz.description,
        duration=quiz.duration,
        is_public=quiz.is_public,
        has_password=bool(quiz.password_hash),
        class_id=quiz.class_id,
        total_marks=quiz.total_marks,
        question_count=len(quiz.questions),
        attempt_count=quiz.attempt_count,
        created_at=quiz.created_at,
    )


def quiz_detail_view(quiz: Quiz) -> QuizDetailView:
    return QuizDetailView(
        id=quiz.id,
        title=quiz.title,
        description=quiz.description,
        duration=quiz.duration,
        is_public=quiz.is_public,
        has_password=bool(quiz.password_hash),
        total_marks=quiz.total_marks,
        attempt_count=quiz.attempt_count,
        images=[ImageView.model_validate(img) for img in quiz.images],
        questions=[QuestionView.model_validate(q) for q in quiz.questions],
    )


def quiz_edit_view(quiz: Quiz) -> QuizEditView:
    return QuizEditView(
        id=quiz.id,
        title=quiz.title,
        description=quiz.description,
        duration=quiz.duration,
        is_public=quiz.is_public,
        has_password=bool(quiz.password_hash),
        class_id=quiz.class_id,
        total_marks=quiz.total_marks,
        attempt_count=quiz.attempt_count,
        images=[ImageView.model_validate(img) for img in quiz.images],
        questions=[QuestionEditView.model_validate(q) for q in quiz.questions],
    )

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.database import get_db
from app.auth.dependencies import get_current_user, get_optional_user
from app.auth.quiz_access import ensure_quiz_access, is_quiz_owner
from app.helpers.quiz_answer_evaluator import explain_submission, score_submission, percentage
from app.helpers.quiz_views import get_quiz_or_404, gradable_questions, question_snapshots
from app.models import Quiz, Response, User
from app.schemas.quiz_submission import (
    QuizSubmitRequest, QuizSubmitResponse,
    LeaderboardEntry, QuestionResult, ResponseDetailView,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/quiz",
    tags=["Quiz Submission Endpoints"]
)

ALREADY_SUBMITTED = "You have already submitted this quiz"


async def _has_submitted(quiz_id: UUID, user_id: UUID, db: AsyncSession) -> bool:
    result = await db.execute(
        select(Response.id).where(
            Response.quiz_id == quiz_id,
            Response.user_id == user_id,
        )
    )
    return result.first() is not None


@router.post(
    "/{quiz_id}/submit",
    response_model=QuizSubmitResponse,
    status_code=201,
)
async def submit_quiz(
    quiz_id: UUID,
    payload: QuizSubmitRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    # --------------------------
    # Fetch quiz with questions
    # --------------------------
    quiz = await get_quiz_or_404(quiz_id, db)
    await ensure_quiz_access(quiz, current_user, payload.password, db)

    # --------------------------
    # Answers must reference this quiz's questions, once each
    # --------------------------
    question_ids = {q.id for q in quiz.questions}
    seen = set()
    for entry in payload.answers:
        if entry.question_id not in question_ids:
            raise HTTPException(400, f"Question {entry.question_id} does not belong to this quiz")
        if entry.question_id in seen:
            raise HTTPException(400, f"Question {entry.question_id} answered more than once")
        seen.add(entry.question_id)

    # --------------------------
    # Prevent re-submission
    # --------------------------
    if await _has_submitted(quiz.id, current_user.id, db):
        raise HTTPException(status.HTTP_409_CONFLICT, ALREADY_SUBMITTED)

    # --------------------------
    # Score
    # --------------------------
    answers = [
        {"question_id": str(entry.question_id), "answer": entry.answer}
        for entry in payload.answers
    ]
    snapshots = question_snapshots(quiz)
    score, total_marks = score_submission(gradable_questions(snapshots), answers)

    # --------------------------
    # Record the response and bump the attempt counter together
    # --------------------------
    response = Response(
        quiz_id=quiz.id,
        user_id=current_user.id,
        score=score,
        total_marks=total_marks,
        answers=answers,
        questions=snapshots,
    )
    db.add(response)
    await db.execute(
        update(Quiz)
        .where(Quiz.id == quiz.id)
        .values(attempt_count=Quiz.attempt_count + 1)
    )

    try:
        await db.commit()
    except IntegrityError:
        # A concurrent submission won the (quiz_id, user_id) unique constraint.
        await db.rollback()
        raise HTTPException(status.HTTP_409_CONFLICT, ALREADY_SUBMITTED)

    logger.info(
        "User %s submitted quiz %s: %s/%s",
        current_user.id, quiz.id, score, total_marks,
    )

    return QuizSubmitResponse(
        response_id=response.id,
        quiz_id=quiz.id,
        score=score,
        total_marks=total_marks,
        percentage=percentage(score, total_marks),
        submitted_at=response.created_at,
    )


@router.get("/{quiz_id}/leaderboard", response_model=List[LeaderboardEntry])
async def get_leaderboard(
    quiz_id: UUID,
    x_quiz_password: Optional[str] = Header(None),
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    quiz = await get_quiz_or_404(quiz_id, db)
    await ensure_quiz_access(quiz, current_user, x_quiz_password, db)

    result = await db.execute(
        select(Response)
        .options(selectinload(Response.user))
        .where(Response.quiz_id == quiz.id)
        .order_by(Response.score.desc(), Response.created_at.asc())
    )

    return [
        LeaderboardEntry(
            rank=rank,
            user_id=response.user_id,
            name=response.user.name,
            email=response.user.email,
            score=response.score,
            total_marks=response.total_marks,
            percentage=percentage(response.score, response.total_marks),
            submitted_at=response.created_at,
        )
        for rank, response in enumerate(result.scalars().all(), start=1)
    ]


@router.get("/{quiz_id}/responses", response_model=List[ResponseDetailView])
async def list_responses(
    quiz_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Graded responses with a per-question breakdown.
    The quiz owner sees every response; anyone else only their own.
    """
    quiz = await get_quiz_or_404(quiz_id, db)

    stmt = (
        select(Response)
        .options(selectinload(Response.user))
        .where(Response.quiz_id == quiz.id)
        .order_by(Response.created_at.asc())
    )
    if not is_quiz_owner(quiz, current_user):
        stmt = stmt.where(Response.user_id == current_user.id)

    result = await db.execute(stmt)

    views = []
    for response in result.scalars().all():
        # Explained against the questions as they were graded, not as they are now.
        snapshots = response.questions or []
        outcomes = explain_submission(gradable_questions(snapshots), response.answers)
        views.append(
            ResponseDetailView(
                response_id=response.id,
                quiz_id=quiz.id,
                user_id=response.user_id,
                name=response.user.name,
                email=response.user.email,
                score=response.score,
                total_marks=response.total_marks,
                percentage=percentage(response.score, response.total_marks),
                submitted_at=response.created_at,
                questions=[
                    QuestionResult(
                        question_id=snapshot["id"],
                        text=snapshot["text"],
                        type=snapshot["type"],
                        options=snapshot["options"],
                        marks=outcome.question.marks,
                        submitted_answer=outcome.answer,
                        correct_answer=snapshot["correct_answer"],
                        is_correct=outcome.grade.is_correct,
                        obtained_marks=outcome.grade.obtained_marks,
                        explanation=snapshot.get("explanation"),
                    )
                    for snapshot, outcome in zip(snapshots, outcomes)
                ],
            )
        )

    return views

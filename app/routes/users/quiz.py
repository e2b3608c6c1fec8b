from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.auth.dependencies import get_optional_user
from app.auth.quiz_access import ensure_quiz_access
from app.helpers.quiz_views import get_quiz_or_404, quiz_detail_view
from app.models import User
from app.schemas.quiz import QuizDetailView

router = APIRouter(
    prefix="/quiz",
    tags=["Quiz Endpoints"]
)


@router.get("/{quiz_id}", response_model=QuizDetailView)
async def get_quiz(
    quiz_id: UUID,
    x_quiz_password: Optional[str] = Header(None),
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Quiz as seen by someone about to attempt it: no correct answers.
    Anonymous callers are allowed for public quizzes.
    """
    quiz = await get_quiz_or_404(quiz_id, db)
    await ensure_quiz_access(quiz, current_user, x_quiz_password, db)
    return quiz_detail_view(quiz)

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.database import get_db
from app.models import User, UserRole
from app.schemas.user import SignupRequest, UserProfile
from app.auth.password_security import hash_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["User Registration"])


@router.post("/signup", status_code=201)
async def signup(data: SignupRequest, db: AsyncSession = Depends(get_db)):
    if data.role == UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin accounts cannot be created through signup",
        )

    result = await db.execute(select(User).where(User.email == data.email))
    if result.scalars().first():
        raise HTTPException(409, "User already exists")

    user = User(
        role=data.role,
        name=data.name,
        email=data.email,
        password_hash=hash_password(data.password),
    )

    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info("Registered %s account %s", user.role.value, user.id)

    return {
        "message": "User created successfully. Please login to continue.",
        "user": UserProfile.model_validate(user),
    }

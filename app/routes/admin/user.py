import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from sqlalchemy import select

from app.database import get_db
from app.models import User
from app.auth.dependencies import is_admin
from app.auth.password_security import hash_password
from app.schemas.user import UserProfile, AdminUserCreate, AdminUserUpdate

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["Admin User Endpoints"],
    dependencies=[Depends(is_admin)]
)


async def _get_user_or_404(user_id: UUID, db: AsyncSession) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(404, "User not found")
    return user


async def _ensure_email_free(email: str, db: AsyncSession, user_id: UUID = None):
    result = await db.execute(select(User).where(User.email == email))
    existing = result.scalar_one_or_none()
    if existing and existing.id != user_id:
        raise HTTPException(409, "Email already exists")


@router.get("/users", response_model=List[UserProfile])
async def list_all_users(
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(select(User).order_by(User.created_at))
    return result.scalars().all()


@router.post("/users", response_model=UserProfile, status_code=201)
async def create_user(
    payload: AdminUserCreate,
    db: AsyncSession = Depends(get_db),
):
    await _ensure_email_free(payload.email, db)

    user = User(
        email=payload.email,
        name=payload.name,
        role=payload.role,
        password_hash=hash_password(payload.password),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info("Admin created %s account %s", user.role.value, user.id)
    return user


@router.put("/users/{user_id}", response_model=UserProfile)
async def update_user(
    user_id: UUID,
    payload: AdminUserUpdate,
    db: AsyncSession = Depends(get_db),
):
    user = await _get_user_or_404(user_id, db)

    if payload.email and payload.email != user.email:
        await _ensure_email_free(payload.email, db, user_id=user.id)
        user.email = payload.email
    if payload.name:
        user.name = payload.name
    if payload.role:
        user.role = payload.role
    if payload.password:
        user.password_hash = hash_password(payload.password)

    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@router.delete("/users/{user_id}", status_code=204)
async def delete_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    user = await _get_user_or_404(user_id, db)

    await db.delete(user)
    await db.commit()

    logger.info("Admin deleted account %s", user_id)
    return None

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from datetime import datetime
from jose import JWTError

from app.database import get_db
from app.models import User
from app.auth.dependencies import get_current_user
from app.auth.password_security import verify_password, password_needs_rehash, hash_password
from app.auth.jwt import issue_token_pair, user_id_from_token, REFRESH
from app.schemas.user import TokenResponse, LoginRequest, RefreshRequest, CurrentUser

router = APIRouter(prefix="/auth", tags=["User Login"])


def _token_response(user: User) -> TokenResponse:
    return TokenResponse(**issue_token_pair(user), role=user.role.value)


# ---------------------------
# Login (every role)
# ---------------------------
@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, db: AsyncSession = Depends(get_db)):
    """
    Authenticate a user using email and password.
    Returns access and refresh JWT tokens on success.
    Raises 401 if credentials are invalid.
    """
    result = await db.execute(select(User).where(User.email == request.email))
    user = result.scalars().first()

    if not user or not verify_password(request.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    if password_needs_rehash(user.password_hash):
        user.password_hash = hash_password(request.password)

    # Update last login
    user.last_login = datetime.utcnow()
    db.add(user)
    await db.commit()

    return _token_response(user)


# ---------------------------
# Exchange a refresh token
# ---------------------------
@router.post("/refresh", response_model=TokenResponse)
async def refresh_tokens(request: RefreshRequest, db: AsyncSession = Depends(get_db)):
    try:
        user_id = user_id_from_token(request.refresh_token, expected_type=REFRESH)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalars().first()
    if not user:
        raise HTTPException(status_code=401, detail="User not found")

    return _token_response(user)


@router.get("/me")
async def me(current_user: User = Depends(get_current_user)):
    return {"user": CurrentUser(id=current_user.id, email=current_user.email, role=current_user.role)}

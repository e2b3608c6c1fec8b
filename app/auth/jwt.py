from datetime import datetime, timedelta
from typing import Optional
import os
import uuid
from jose import JWTError, jwt
from dotenv import load_dotenv

load_dotenv()

SECRET_KEY = os.getenv("SECRET_KEY")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60))
REFRESH_TOKEN_EXPIRE_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", 7))

ACCESS = "access"
REFRESH = "refresh"


def token_claims(user) -> dict:
    """Identity claims carried by every token issued for `user`."""
    return {"user_id": str(user.id), "email": user.email, "role": user.role.value}


def _encode(claims: dict, token_type: str, lifetime: timedelta) -> str:
    to_encode = dict(claims)
    to_encode.update({"exp": datetime.utcnow() + lifetime, "type": token_type})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


# ---------------------------
# Create tokens
# ---------------------------
def create_access_token(claims: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Short-lived token sent as `Authorization: Bearer` on every request."""
    return _encode(claims, ACCESS, expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))


def create_refresh_token(claims: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Long-lived token that can only be exchanged at /auth/refresh."""
    return _encode(claims, REFRESH, expires_delta or timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS))


def issue_token_pair(user) -> dict:
    claims = token_claims(user)
    return {
        "access_token": create_access_token(claims),
        "refresh_token": create_refresh_token(claims),
    }


# ---------------------------
# Verify tokens
# ---------------------------
def verify_token(token: str, expected_type: str = ACCESS) -> dict:
    """
    Verify a JWT token and return its payload.

    Raises:
        JWTError: If token is invalid, expired, or of the wrong type.
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        raise JWTError("Invalid or expired token") from e

    if payload.get("type") != expected_type:
        raise JWTError(f"Invalid token type. Expected '{expected_type}'.")
    return payload


def user_id_from_token(token: str, expected_type: str = ACCESS) -> uuid.UUID:
    """
    The `user_id` claim of a verified token.

    Raises:
        JWTError: If the token does not verify or carries no usable user id.
    """
    payload = verify_token(token, expected_type)
    try:
        return uuid.UUID(payload.get("user_id") or "")
    except ValueError as e:
        raise JWTError("Invalid token payload") from e

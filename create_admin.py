import asyncio
from getpass import getpass

from sqlalchemy import select

from app.database import AsyncSessionLocal
from app.models import User, UserRole
from app.auth.password_security import hash_password

MIN_PASSWORD_LENGTH = 6


async def create_admin_interactive():
    """
    Interactively create an ADMIN account.
    Signup never hands out the ADMIN role, so the first admin is created here.
    """
    email = input("Enter admin email: ").strip()
    name = input("Enter admin name (optional): ").strip() or None
    password = getpass("Enter admin password: ").strip()
    password_confirm = getpass("Confirm password: ").strip()

    if not email:
        print("Email is required. Exiting.")
        return

    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"Password must be at least {MIN_PASSWORD_LENGTH} characters. Exiting.")
        return

    if password != password_confirm:
        print("Passwords do not match. Exiting.")
        return

    async with AsyncSessionLocal() as session:
        result = await session.execute(select(User).where(User.email == email))
        existing = result.scalar_one_or_none()
        if existing:
            print(f"A {existing.role.value} account with email {email} already exists.")
            return

        session.add(
            User(
                role=UserRole.ADMIN,
                email=email,
                name=name,
                password_hash=hash_password(password),
            )
        )
        await session.commit()
        print(f"Admin created successfully: {email}")


if __name__ == "__main__":
    asyncio.run(create_admin_interactive())

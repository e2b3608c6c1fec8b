import asyncio
from app.database import create_tables

# Import all models here so SQLAlchemy knows them
from app.models import User, Class, Quiz, Question, QuizImage, QuestionImage, Response, class_students  # noqa: F401


async def main():
    print("Creating database tables...")
    await create_tables()
    print("All tables created successfully!")


if __name__ == "__main__":
    asyncio.run(main())

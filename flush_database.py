import asyncio
from app.database import create_tables, drop_tables

# Import all models so SQLAlchemy knows them
from app.models import User, Class, Quiz, Question, QuizImage, QuestionImage, Response, class_students  # noqa: F401

async def flush_database():
    print("Dropping all tables...")
    await drop_tables()
    print("All tables dropped successfully!")

    print("Recreating tables...")
    await create_tables()
    print("All tables recreated successfully!")

if __name__ == "__main__":
    asyncio.run(flush_database())

import uuid
import enum
from datetime import datetime
from sqlalchemy import (
    Column, String, Boolean, DateTime, Integer, Float, Enum, ForeignKey, Table, Text,
    JSON, Uuid, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from app.database import Base


# ---------------------------
# Enums
# ---------------------------
class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"


class QuestionType(str, enum.Enum):
    SINGLE_SELECT = "SINGLE_SELECT"
    MULTIPLE_SELECT = "MULTIPLE_SELECT"
    FILL_IN_BLANK = "FILL_IN_BLANK"
    INTEGER = "INTEGER"


class Difficulty(str, enum.Enum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


# ---------------------------
# User Model
# ---------------------------
class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    role = Column(Enum(UserRole, name="user_role_enum"), nullable=False)
    name = Column(String(255), nullable=True)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = Column(DateTime, nullable=True)


# ---------------------------
# Class Model
# ---------------------------
class_students = Table(
    "class_students",
    Base.metadata,
    Column("class_id", Uuid, ForeignKey("classes.id", ondelete="CASCADE"), primary_key=True),
    Column("student_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Class(Base):
    __tablename__ = "classes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    teacher_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    password_hash = Column(String(255), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    teacher = relationship("User")
    students = relationship("User", secondary=class_students, backref="enrolled_classes")
    quizzes = relationship("Quiz", back_populates="klass")


# ---------------------------
# Quiz Model
# ---------------------------
class Quiz(Base):
    __tablename__ = "quizzes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    teacher_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    class_id = Column(Uuid, ForeignKey("classes.id", ondelete="SET NULL"), nullable=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    duration = Column(Integer, nullable=False)
    is_public = Column(Boolean, default=False, nullable=False)
    password_hash = Column(String(255), nullable=True)
    attempt_count = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    teacher = relationship("User")
    klass = relationship("Class", back_populates="quizzes")
    questions = relationship(
        "Question",
        back_populates="quiz",
        cascade="all, delete-orphan",
        order_by="Question.position",
    )
    images = relationship("QuizImage", back_populates="quiz", cascade="all, delete-orphan")
    responses = relationship("Response", back_populates="quiz", cascade="all, delete-orphan")

    @property
    def total_marks(self) -> int:
        # Derived from the current questions; requires `questions` to be loaded.
        return sum(q.marks or 1 for q in self.questions)


class Question(Base):
    __tablename__ = "questions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    quiz_id = Column(Uuid, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False)

    text = Column(Text, nullable=False)
    type = Column(Enum(QuestionType, name="question_type_enum"), nullable=False)
    options = Column(JSON, nullable=False, default=list)
    correct_answer = Column(JSON, nullable=False)
    marks = Column(Integer, default=1, nullable=False)
    position = Column(Integer, default=0, nullable=False)

    subject = Column(String(255), nullable=True)
    explanation = Column(Text, nullable=True)
    answer_link = Column(String(500), nullable=True)
    difficulty = Column(Enum(Difficulty, name="difficulty_enum"), default=Difficulty.MEDIUM, nullable=False)
    tags = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    quiz = relationship("Quiz", back_populates="questions")
    images = relationship("QuestionImage", back_populates="question", cascade="all, delete-orphan")


# ---------------------------
# Uploaded images
# ---------------------------
class QuizImage(Base):
    __tablename__ = "quiz_images"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    quiz_id = Column(Uuid, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False)

    image_url = Column(Text, nullable=False)
    storage_key = Column(String(500), nullable=False)
    file_name = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=False)
    file_type = Column(String(100), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    quiz = relationship("Quiz", back_populates="images")


class QuestionImage(Base):
    __tablename__ = "question_images"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    question_id = Column(Uuid, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)

    image_url = Column(Text, nullable=False)
    storage_key = Column(String(500), nullable=False)
    file_name = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=False)
    file_type = Column(String(100), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    question = relationship("Question", back_populates="images")


# ---------------------------
# Graded responses
# ---------------------------
class Response(Base):
    __tablename__ = "responses"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    quiz_id = Column(Uuid, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    score = Column(Float, nullable=False)
    total_marks = Column(Integer, nullable=False)
    answers = Column(JSON, nullable=False)
    # Questions as graded at submission; later quiz edits do not touch them.
    questions = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, default=datetime.utcnow)

    quiz = relationship("Quiz", back_populates="responses")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("quiz_id", "user_id", name="unique_quiz_response"),
    )

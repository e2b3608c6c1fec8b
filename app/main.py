import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from app.helpers.storage import StorageError, UPLOAD_DIR, UPLOAD_BASE_URL

from app.routes.users.user_creation import router as user_registration_router
from app.routes.users.user_login import router as user_login_router
from app.routes.users.user_profile import router as user_profile_router
from app.routes.users.quiz import router as quiz_router
from app.routes.users.quiz_submission import router as quiz_submission_router

from app.routes.admin.user import router as admin_user_router

from app.routes.users.teacher.classroom import router as teacher_class_router
from app.routes.users.teacher.quiz import router as teacher_quiz_router
from app.routes.users.teacher.media import router as teacher_media_router

from app.routes.users.student.classroom import router as student_class_router


logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


app=FastAPI(
    title="Quiz Hosting Backend"
)

@app.get("/")
def root():
    return {
        "message":"Quiz Hosting Backend is Running!"
        }


# ---------------------------
# Infrastructure failures never leak details to the caller
# ---------------------------
@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.exception("Storage error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


os.makedirs(UPLOAD_DIR, exist_ok=True)
app.mount(UPLOAD_BASE_URL, StaticFiles(directory=UPLOAD_DIR), name="uploads")


app.include_router(user_registration_router)
app.include_router(user_login_router)
app.include_router(user_profile_router)

app.include_router(admin_user_router)

app.include_router(teacher_class_router)
app.include_router(student_class_router)

# Fixed /quiz paths (/mine, /questions/...) must be registered before /quiz/{quiz_id}.
app.include_router(teacher_quiz_router)
app.include_router(teacher_media_router)
app.include_router(quiz_submission_router)
app.include_router(quiz_router)

import asyncio
import logging
import os
from typing import Iterable, NamedTuple
from uuid import uuid4

import aiofiles
from dotenv import load_dotenv
from fastapi import HTTPException, UploadFile

load_dotenv()

logger = logging.getLogger(__name__)

BASE_DIR = os.path.abspath(
    os.path.join(os.path.dirname(__file__), "..", "..")
)

UPLOAD_DIR = os.getenv("UPLOAD_DIR", os.path.join(BASE_DIR, "uploads"))
UPLOAD_BASE_URL = os.getenv("UPLOAD_BASE_URL", "/uploads").rstrip("/")
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", 10 * 1024 * 1024))

QUIZ_IMAGE_FOLDER = "quiz-images"
QUESTION_IMAGE_FOLDER = "question-images"


class StorageError(Exception):
    """Raised when the object store cannot complete an upload or delete."""


class StoredFile(NamedTuple):
    url: str
    key: str


class FileStorage:
    """
    Object store backed by a directory on disk.

    Keys look like `<folder>/<uuid>.<ext>` and are served under `base_url`.
    """

    def __init__(self, root: str = UPLOAD_DIR, base_url: str = UPLOAD_BASE_URL):
        self.root = os.path.abspath(root)
        self.base_url = base_url

    def _path_for(self, key: str) -> str:
        path = os.path.abspath(os.path.join(self.root, key))
        if os.path.commonpath([path, self.root]) != self.root:
            raise StorageError(f"Storage key escapes upload root: {key}")
        return path

    def url_for(self, key: str) -> str:
        return f"{self.base_url}/{key}"

    async def upload(self, data: bytes, filename: str, folder: str) -> StoredFile:
        ext = os.path.splitext(filename or "")[1].lower()
        key = f"{folder}/{uuid4()}{ext}"
        path = self._path_for(key)

        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
        except OSError as e:
            raise StorageError(f"Failed to store {key}") from e

        logger.info("Stored upload %s (%d bytes)", key, len(data))
        return StoredFile(url=self.url_for(key), key=key)

    async def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            if os.path.exists(path):
                await asyncio.to_thread(os.remove, path)
        except OSError as e:
            raise StorageError(f"Failed to delete {key}") from e


async def delete_keys_best_effort(storage: FileStorage, keys: Iterable[str]) -> int:
    """
    Delete several blobs concurrently and wait for all of them.

    Failures are logged and skipped so the owning records can still be
    removed. Returns the number of failed deletions.
    """
    keys = [key for key in keys if key]
    if not keys:
        return 0

    results = await asyncio.gather(
        *(storage.delete(key) for key in keys),
        return_exceptions=True,
    )

    failed = 0
    for key, result in zip(keys, results):
        if isinstance(result, Exception):
            failed += 1
            logger.warning("Could not delete stored file %s: %s", key, result)
    return failed


async def read_image_upload(file: UploadFile) -> bytes:
    """Read an uploaded image, enforcing content type and size limits."""
    if not file.content_type or not file.content_type.startswith("image/"):
        raise HTTPException(400, "Only image files are allowed")

    data = await file.read(MAX_UPLOAD_BYTES + 1)
    if not data:
        raise HTTPException(400, "No file uploaded")
    if len(data) > MAX_UPLOAD_BYTES:
        raise HTTPException(413, "File too large")
    return data


_storage = FileStorage()


def get_storage() -> FileStorage:
    return _storage

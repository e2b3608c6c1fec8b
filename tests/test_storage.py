import asyncio
import os

import pytest

from app.helpers.storage import FileStorage, StorageError, delete_keys_best_effort


def test_upload_writes_file_under_folder(tmp_path):
    storage = FileStorage(root=str(tmp_path), base_url='/files')

    stored = asyncio.run(storage.upload(b'png-bytes', 'Diagram.PNG', 'quiz-images'))

    assert stored.key.startswith('quiz-images/')
    assert stored.key.endswith('.png')
    assert stored.url == f'/files/{stored.key}'
    with open(tmp_path / stored.key, 'rb') as f:
        assert f.read() == b'png-bytes'


def test_delete_removes_file_and_tolerates_missing(tmp_path):
    storage = FileStorage(root=str(tmp_path), base_url='/files')
    stored = asyncio.run(storage.upload(b'x', 'a.jpg', 'question-images'))

    asyncio.run(storage.delete(stored.key))
    assert not os.path.exists(tmp_path / stored.key)

    # Already gone: nothing to do.
    asyncio.run(storage.delete(stored.key))


def test_keys_cannot_escape_the_upload_root(tmp_path):
    storage = FileStorage(root=str(tmp_path / 'root'), base_url='/files')
    with pytest.raises(StorageError):
        asyncio.run(storage.delete('../outside.txt'))


class FlakyStorage:
    def __init__(self, failing):
        self.failing = set(failing)
        self.deleted = []

    async def delete(self, key):
        await asyncio.sleep(0)
        if key in self.failing:
            raise StorageError(f'cannot delete {key}')
        self.deleted.append(key)


def test_best_effort_delete_reports_failures_and_keeps_going():
    storage = FlakyStorage(failing={'b'})

    failed = asyncio.run(delete_keys_best_effort(storage, ['a', 'b', 'c', None]))

    assert failed == 1
    assert sorted(storage.deleted) == ['a', 'c']


def test_best_effort_delete_with_nothing_to_do():
    assert asyncio.run(delete_keys_best_effort(FlakyStorage(failing=()), [])) == 0

import os

from app.helpers.storage import get_storage
from app.main import app


PNG = b'\x89PNG\r\n\x1a\n' + b'\x00' * 32


def image(name='figure.png', data=PNG, content_type='image/png'):
    return {'file': (name, data, content_type)}


def stored_path(url):
    storage = get_storage()
    key = url[len(storage.base_url) + 1:]
    return os.path.join(storage.root, key)


def test_quiz_image_upload_and_delete(client, teacher, make_quiz):
    quiz = make_quiz(teacher)

    r = client.post(f"/upload/quiz/{quiz['id']}/image", files=image(), headers=teacher)
    assert r.status_code == 201, r.text
    uploaded = r.json()['image']
    assert uploaded['file_name'] == 'figure.png'
    assert uploaded['file_size'] == len(PNG)
    assert os.path.exists(stored_path(uploaded['image_url']))

    served = client.get(uploaded['image_url'])
    assert served.status_code == 200
    assert served.content == PNG

    edit = client.get(f"/quiz/{quiz['id']}/edit", headers=teacher).json()
    assert [img['id'] for img in edit['images']] == [uploaded['id']]

    removed = client.delete(f"/upload/quiz/image/{uploaded['id']}", headers=teacher)
    assert removed.status_code == 200
    assert not os.path.exists(stored_path(uploaded['image_url']))
    assert client.get(f"/quiz/{quiz['id']}/edit", headers=teacher).json()['images'] == []


def test_question_image_upload_and_owner_check(client, teacher, other_teacher, make_quiz):
    quiz = make_quiz(teacher)
    question_id = quiz['questions'][0]['id']

    foreign = client.post(f'/upload/question/{question_id}/image', files=image(), headers=other_teacher)
    assert foreign.status_code == 403

    r = client.post(f'/upload/question/{question_id}/image', files=image('q.jpg', content_type='image/jpeg'), headers=teacher)
    assert r.status_code == 201
    image_id = r.json()['image']['id']

    edit = client.get(f"/quiz/{quiz['id']}/edit", headers=teacher).json()
    assert edit['questions'][0]['images'][0]['id'] == image_id

    assert client.delete(f'/upload/question/image/{image_id}', headers=other_teacher).status_code == 403
    assert client.delete(f'/upload/question/image/{image_id}', headers=teacher).status_code == 200


def test_upload_rejects_non_images_and_empty_files(client, teacher, make_quiz):
    quiz = make_quiz(teacher)
    url = f"/upload/quiz/{quiz['id']}/image"

    text = client.post(url, files=image('notes.txt', b'hello', 'text/plain'), headers=teacher)
    assert text.status_code == 400

    empty = client.post(url, files=image(data=b''), headers=teacher)
    assert empty.status_code == 400


def test_blob_failure_does_not_block_record_cleanup(client, teacher, make_quiz):
    quiz = make_quiz(teacher)
    question_id = quiz['questions'][0]['id']
    client.post(f"/upload/quiz/{quiz['id']}/image", files=image(), headers=teacher)
    client.post(f'/upload/question/{question_id}/image', files=image(), headers=teacher)

    class BrokenDeletes:
        async def delete(self, key):
            raise OSError('object store unavailable')

    app.dependency_overrides[get_storage] = BrokenDeletes
    try:
        r = client.delete(f"/quiz/{quiz['id']}", headers=teacher)
    finally:
        app.dependency_overrides.pop(get_storage, None)

    assert r.status_code == 200
    assert client.get(f"/quiz/{quiz['id']}/edit", headers=teacher).status_code == 404


def test_upload_to_missing_quiz(client, teacher):
    r = client.post('/upload/quiz/00000000-0000-0000-0000-000000000000/image', files=image(), headers=teacher)
    assert r.status_code == 404

import io
import os

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from dndspace.core.exceptions import MediaTooLargeError, UpstreamMediaError, ValidationError
from dndspace.services.media_service import (
    ImagePayload,
    read_image_upload,
    release_many,
    release_media,
    store_image,
)
from dndspace.services.storage import LocalStorage

from tests.helpers import PNG_BYTES


def _upload(data, content_type="image/png", filename="pic.png"):
    return UploadFile(file=io.BytesIO(data), filename=filename, headers=Headers({"content-type": content_type}))


async def test_read_image_upload_accepts_images():
    payload = await read_image_upload(_upload(PNG_BYTES), max_bytes=1024)
    assert payload.data == PNG_BYTES
    assert payload.content_type == "image/png"
    assert payload.filename == "pic.png"


@pytest.mark.parametrize("content_type", ["text/plain", "image/svg+xml", "application/pdf", ""])
async def test_read_image_upload_rejects_other_types(content_type):
    with pytest.raises(ValidationError):
        await read_image_upload(_upload(PNG_BYTES, content_type=content_type), max_bytes=1024)


async def test_read_image_upload_enforces_size_ceiling():
    with pytest.raises(MediaTooLargeError):
        await read_image_upload(_upload(b"\x00" * 11), max_bytes=10)
    with pytest.raises(ValidationError):
        await read_image_upload(_upload(b""), max_bytes=10)


def test_local_storage_saves_and_deletes(tmp_path):
    storage = LocalStorage(base_dir=str(tmp_path))

    stored = storage.save_bytes(PNG_BYTES, content_type="image/png", key_hint="face.PNG", folder="characters")

    assert stored.key.startswith("characters/") and stored.key.endswith(".png")
    assert stored.url == f"/static/{stored.key}"
    path = os.path.join(str(tmp_path), *stored.key.split("/"))
    assert open(path, "rb").read() == PNG_BYTES

    storage.delete(stored.key)
    assert not os.path.exists(path)
    # 이미 없는 키 삭제는 조용히 통과
    storage.delete(stored.key)


def test_local_storage_refuses_keys_outside_base(tmp_path):
    storage = LocalStorage(base_dir=str(tmp_path / "uploads"))
    with pytest.raises(ValueError):
        storage.delete("../secrets.txt")


class _BrokenStorage(LocalStorage):
    def save_bytes(self, *args, **kwargs):
        raise ConnectionError("upstream down")

    def delete(self, key):
        raise ConnectionError("upstream down")


def test_store_image_wraps_backend_failures(tmp_path):
    storage = _BrokenStorage(base_dir=str(tmp_path))
    with pytest.raises(UpstreamMediaError):
        store_image(storage, ImagePayload(data=PNG_BYTES, content_type="image/png", filename="a.png"), folder="photos")


def test_release_media_is_best_effort(tmp_path):
    storage = _BrokenStorage(base_dir=str(tmp_path))
    assert release_media(storage, None) is False
    assert release_media(storage, "photos/a.png") is False
    assert release_many(storage, ["photos/a.png", None, "photos/b.png"]) == ["photos/a.png", "photos/b.png"]

"""
미디어 업로드/정리 서비스

업로드는 실패 시 UpstreamMediaError 로 요청을 중단시키고,
삭제는 실패해도 로그만 남긴다 (DB 레코드 삭제는 항상 진행).
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional
import logging
import re

from fastapi import UploadFile

from dndspace.core.exceptions import ValidationError, MediaTooLargeError, UpstreamMediaError
from dndspace.services.storage import Storage, StoredMedia

logger = logging.getLogger(__name__)

_IMAGE_MIME = re.compile(r"^image/(jpeg|jpg|png|gif|webp)$")


@dataclass
class ImagePayload:
    data: bytes
    content_type: str
    filename: str


async def read_image_upload(upload: UploadFile, max_bytes: int) -> ImagePayload:
    """업로드 파일을 읽어 이미지 형식과 크기를 검증한다."""
    content_type = (upload.content_type or "").lower()
    if not _IMAGE_MIME.match(content_type):
        raise ValidationError("이미지 파일(jpg, png, gif, webp)만 업로드할 수 있습니다.")

    data = await upload.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise MediaTooLargeError(f"파일 크기는 최대 {max_bytes // (1024 * 1024)}MB까지 허용됩니다.")
    if not data:
        raise ValidationError("빈 파일은 업로드할 수 없습니다.")
    return ImagePayload(data=data, content_type=content_type, filename=upload.filename or "upload")


def store_image(storage: Storage, image: ImagePayload, *, folder: str) -> StoredMedia:
    """외부 스토리지에 저장. 실패하면 UpstreamMediaError."""
    try:
        return storage.save_bytes(
            image.data,
            content_type=image.content_type,
            key_hint=image.filename,
            folder=folder,
        )
    except Exception as e:
        logger.error(f"이미지 업로드 실패 ({image.filename}): {e}")
        raise UpstreamMediaError() from e


def release_media(storage: Storage, key: Optional[str]) -> bool:
    """외부 스토리지 파일 삭제 (best-effort). 성공 여부만 반환한다."""
    if not key:
        return False
    try:
        storage.delete(key)
        return True
    except Exception as e:
        logger.warning(f"미디어 삭제 실패, 레코드 삭제는 계속 진행: key={key} error={e}")
        return False


def release_many(storage: Storage, keys: Iterable[Optional[str]]) -> List[str]:
    """여러 키 삭제. 실패한 키 목록 반환."""
    failed = []
    for key in keys:
        if key and not release_media(storage, key):
            failed.append(key)
    return failed

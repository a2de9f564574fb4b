import os
import uuid
from dataclasses import dataclass
from typing import Optional

from dndspace.core.config import settings


@dataclass(frozen=True)
class StoredMedia:
    """외부에 저장된 미디어: 공개 URL + 삭제용 키"""
    url: str
    key: str


class Storage:
    def save_bytes(
        self,
        data: bytes,
        *,
        content_type: Optional[str] = None,
        key_hint: Optional[str] = None,
        folder: str = "uploads",
    ) -> StoredMedia:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


def _extension(key_hint: Optional[str], default: str = "") -> str:
    if key_hint and "." in key_hint:
        return "." + key_hint.rsplit(".", 1)[-1].lower()
    return default


class LocalStorage(Storage):
    def __init__(self, base_dir: str, public_base: str = "/static") -> None:
        self.base_dir = base_dir
        self.public_base = public_base.rstrip("/")
        os.makedirs(self.base_dir, exist_ok=True)

    def save_bytes(self, data: bytes, *, content_type: Optional[str] = None, key_hint: Optional[str] = None, folder: str = "uploads") -> StoredMedia:
        key = f"{folder}/{uuid.uuid4()}{_extension(key_hint, '.png')}"
        path = os.path.join(self.base_dir, *key.split("/"))
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)
        return StoredMedia(url=f"{self.public_base}/{key}", key=key)

    def delete(self, key: str) -> None:
        path = os.path.join(self.base_dir, *key.split("/"))
        # 상위 디렉토리로 빠져나가는 키는 거부
        if not os.path.abspath(path).startswith(os.path.abspath(self.base_dir) + os.sep):
            raise ValueError(f"invalid storage key: {key}")
        if os.path.exists(path):
            os.remove(path)


class S3Storage(Storage):
    def __init__(self, *, endpoint_url: str, access_key: str, secret_key: str, bucket: str, region: Optional[str] = None, public_base_url: Optional[str] = None) -> None:
        import boto3
        from botocore.config import Config

        addressing_style = (os.getenv("S3_ADDRESSING_STYLE") or "path").lower()
        # R2 등 S3 호환 스토리지는 SigV4 필요
        cfg = Config(signature_version="s3v4", s3={"addressing_style": addressing_style})
        self.client = boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
            config=cfg,
        )
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None

    def save_bytes(self, data: bytes, *, content_type: Optional[str] = None, key_hint: Optional[str] = None, folder: str = "uploads") -> StoredMedia:
        key = f"dnd-space/{folder}/{uuid.uuid4()}{_extension(key_hint)}"
        extra_args = {}
        if content_type:
            extra_args["ContentType"] = content_type
        self.client.put_object(Bucket=self.bucket, Key=key, Body=data, **extra_args)
        if self.public_base_url:
            return StoredMedia(url=f"{self.public_base_url}/{key}", key=key)
        # 기본 S3 URL (path-style: endpoint/bucket/key)
        endpoint = self.client.meta.endpoint_url.rstrip("/")
        return StoredMedia(url=f"{endpoint}/{self.bucket}/{key}", key=key)

    def delete(self, key: str) -> None:
        self.client.delete_object(Bucket=self.bucket, Key=key)


def get_storage() -> Storage:
    backend = (settings.STORAGE_BACKEND or "local").lower()
    if backend == "s3":
        return S3Storage(
            endpoint_url=settings.S3_ENDPOINT_URL,
            access_key=settings.S3_ACCESS_KEY_ID,
            secret_key=settings.S3_SECRET_ACCESS_KEY,
            bucket=settings.S3_BUCKET,
            region=settings.S3_REGION,
            public_base_url=settings.S3_PUBLIC_BASE_URL,
        )
    # local
    from dndspace.core.paths import get_upload_dir
    return LocalStorage(base_dir=get_upload_dir(), public_base="/static")

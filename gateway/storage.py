"""
Object storage for vault files: Supabase Storage (S3-compatible) and in-memory testing.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field
from typing import Optional, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from gateway.errors import StorageError

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def build_object_path(firebase_uid: str, filename: str, now_ms: Optional[int] = None) -> str:
    """Objects live under the owner's uid: <uid>/<epoch ms>_<file name>."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    safe_name = _UNSAFE_NAME_CHARS.sub("_", filename.rsplit("/", 1)[-1]).strip("._")
    return f"{firebase_uid}/{now_ms}_{safe_name or 'file'}"


def is_owned_path(firebase_uid: str, path: str) -> bool:
    """True for a plain object key inside the owner's prefix (no relative segments)."""
    if "\\" in path:
        return False
    segments = path.split("/")
    if len(segments) < 2 or segments[0] != firebase_uid:
        return False
    return all(segment not in ("", ".", "..") for segment in segments[1:])


class StorageClient(Protocol):
    """Defines the operations the API needs from object storage."""

    def presign_get(self, path: str, expires_in: int = 3600) -> str:
        ...

    def presign_put(
        self, path: str, expires_in: int = 3600, content_type: Optional[str] = None
    ) -> str:
        ...

    def delete_object(self, path: str) -> None:
        ...

    def public_url(self, path: str) -> str:
        ...


@dataclass
class InMemoryStorageClient:
    """Test double for storage interactions."""

    base_url: str = "https://example.test/storage"
    stored_objects: dict = field(default_factory=dict)
    deleted: list = field(default_factory=list)

    def presign_get(self, path: str, expires_in: int = 3600) -> str:
        return f"{self.base_url}/{path}?op=get&expires={expires_in}"

    def presign_put(
        self, path: str, expires_in: int = 3600, content_type: Optional[str] = None
    ) -> str:
        return f"{self.base_url}/{path}?op=put&expires={expires_in}"

    def delete_object(self, path: str) -> None:
        self.stored_objects.pop(path, None)
        self.deleted.append(path)

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/{path}"


@dataclass
class S3StorageClient:
    """
    S3-compatible storage client for Supabase Storage.
    """

    bucket: str
    region: str
    endpoint: str
    access_key_id: str
    secret_access_key: str

    def __post_init__(self):
        # Supabase's S3 gateway only understands path-style addressing.
        config = Config(
            s3={"addressing_style": "path"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint,
            region_name=self.region,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            config=config,
        )

    def presign_get(self, path: str, expires_in: int = 3600) -> str:
        return self._client.generate_presigned_url(
            ClientMethod="get_object",
            Params={"Bucket": self.bucket, "Key": path},
            ExpiresIn=expires_in,
        )

    def presign_put(
        self, path: str, expires_in: int = 3600, content_type: Optional[str] = None
    ) -> str:
        return self._client.generate_presigned_url(
            ClientMethod="put_object",
            Params={
                "Bucket": self.bucket,
                "Key": path,
                "ContentType": content_type or "application/octet-stream",
            },
            ExpiresIn=expires_in,
        )

    def delete_object(self, path: str) -> None:
        try:
            self._client.delete_object(Bucket=self.bucket, Key=path)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(str(exc)) from exc

    def public_url(self, path: str) -> str:
        # <project>.supabase.co/storage/v1/s3 -> /storage/v1/object/public/<bucket>/<path>
        base = self.endpoint.rstrip("/")
        if base.endswith("/s3"):
            base = base[: -len("/s3")]
        return f"{base}/object/public/{self.bucket}/{path}"

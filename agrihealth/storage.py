"""
Storage for images attached to diagnosis requests.

`S3ImageStore` is used when S3_BUCKET is configured; otherwise images land on
local disk under STORAGE_DIR/images and are served from /static/images.
"""
import logging
import mimetypes
import os
import time
import uuid
from dataclasses import dataclass
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from . import config
from .errors import UpstreamError, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class ImageUpload:
    filename: str
    content_type: str
    data: bytes


def validate_image(upload: ImageUpload, max_bytes: Optional[int] = None) -> None:
    max_bytes = config.MAX_IMAGE_BYTES if max_bytes is None else max_bytes
    if not (upload.content_type or '').startswith('image/'):
        raise ValidationError('Only images are allowed!')
    if not upload.data:
        raise ValidationError('Uploaded image is empty')
    if len(upload.data) > max_bytes:
        raise ValidationError(f'Image exceeds the {max_bytes} byte limit')


def object_name(upload: ImageUpload) -> str:
    ext = os.path.splitext(upload.filename or '')[1].lower()
    if not ext:
        ext = mimetypes.guess_extension(upload.content_type or '') or ''
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}{ext}"


class ImageStore:
    def save(self, upload: ImageUpload) -> str:
        """Persist the image and return a URL the client can fetch it from."""
        raise NotImplementedError

    def delete(self, url: str) -> None:
        """Best-effort removal of an image returned by `save`."""
        raise NotImplementedError


class LocalImageStore(ImageStore):
    def __init__(self, directory: Optional[str] = None, url_prefix: str = "/static/images"):
        self.directory = directory or config.IMAGES_DIR
        self.url_prefix = url_prefix.rstrip('/')

    def save(self, upload: ImageUpload) -> str:
        name = object_name(upload)
        os.makedirs(self.directory, exist_ok=True)
        path = os.path.join(self.directory, name)
        try:
            with open(path, 'wb') as f:
                f.write(upload.data)
        except OSError as exc:
            logger.exception("Failed to write image %s", path)
            raise UpstreamError('Error uploading image', detail=str(exc)) from exc
        return f"{self.url_prefix}/{name}"

    def delete(self, url: str) -> None:
        path = os.path.join(self.directory, url.rsplit('/', 1)[-1])
        try:
            os.remove(path)
        except OSError:
            logger.warning("Could not remove orphaned image %s", path)


class S3ImageStore(ImageStore):
    def __init__(self, bucket: str, prefix: str = "", region: Optional[str] = None, client=None):
        self.bucket = bucket
        self.prefix = prefix.strip('/')
        self.region = region
        self._client = client

    @property
    def client(self):
        if self._client is None:
            cfg = Config(region_name=self.region, retries={"max_attempts": 1})
            self._client = boto3.client("s3", region_name=self.region, config=cfg)
        return self._client

    def key_for(self, upload: ImageUpload) -> str:
        name = object_name(upload)
        return f"{self.prefix}/{name}" if self.prefix else name

    def public_url(self, key: str) -> str:
        if self.region:
            return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"
        return f"https://{self.bucket}.s3.amazonaws.com/{key}"

    def save(self, upload: ImageUpload) -> str:
        key = self.key_for(upload)
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=upload.data,
                ContentType=upload.content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.exception("Error uploading image to s3://%s/%s", self.bucket, key)
            raise UpstreamError('Error uploading image', detail=str(exc)) from exc
        return self.public_url(key)

    def delete(self, url: str) -> None:
        key = url.split('.amazonaws.com/', 1)[-1]
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError):
            logger.warning("Could not remove orphaned image s3://%s/%s", self.bucket, key)


_store: Optional[ImageStore] = None


def get_image_store() -> ImageStore:
    global _store
    if _store is None:
        if config.S3_BUCKET:
            _store = S3ImageStore(config.S3_BUCKET, config.S3_PREFIX, config.AWS_REGION)
        else:
            _store = LocalImageStore()
    return _store

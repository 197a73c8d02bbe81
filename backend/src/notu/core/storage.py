"""
Image storage for note attachments.

Two backends share one interface:
    - CloudinaryStorage: signed upload/destroy calls to Cloudinary's REST API
    - LocalImageStorage: files on disk under ``settings.upload_dir``, served at /uploads

Both take raw bytes or a ``data:<mime>;base64,<payload>`` URI and return
the public URL plus the id needed to delete the image later.
"""

import base64
import binascii
import hashlib
import logging
import re
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import aiofiles
import aiofiles.os
import aiohttp

from ..config import Settings, get_settings

logger = logging.getLogger(__name__)

DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>[\w.+/-]+);base64,(?P<data>.*)$", re.DOTALL)

EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


class StorageError(Exception):
    """The storage backend failed or is unreachable."""


class InvalidImageError(ValueError):
    """The payload is not an acceptable image."""


@dataclass
class StoredImage:
    url: str
    public_id: str


def is_data_uri(value: Optional[str]) -> bool:
    return bool(value) and value.startswith("data:")


def decode_data_uri(data_uri: str) -> Tuple[bytes, str]:
    """Split a base64 data URI into (bytes, content type)."""
    match = DATA_URI_PATTERN.match(data_uri.strip())
    if not match:
        raise InvalidImageError("Image must be a base64 data URI")

    content_type = match.group("mime").lower()
    if content_type == "image/jpg":
        content_type = "image/jpeg"
    try:
        data = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageError("Image data is not valid base64") from e
    return data, content_type


class ImageStorage(ABC):
    """Where note images live."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    @property
    def max_bytes(self) -> int:
        return self.settings.max_image_size_mb * 1024 * 1024

    def validate(self, data: bytes, content_type: str) -> None:
        if content_type not in self.settings.allowed_image_types:
            raise InvalidImageError(f"Unsupported image type: {content_type}")
        if not data:
            raise InvalidImageError("Image is empty")
        if len(data) > self.max_bytes:
            raise InvalidImageError(
                f"Image exceeds maximum size of {self.settings.max_image_size_mb}MB"
            )

    async def upload_data_uri(self, data_uri: str) -> StoredImage:
        data, content_type = decode_data_uri(data_uri)
        return await self.upload_bytes(data, content_type)

    async def upload_bytes(self, data: bytes, content_type: str) -> StoredImage:
        self.validate(data, content_type)
        return await self._store(data, content_type)

    @abstractmethod
    async def _store(self, data: bytes, content_type: str) -> StoredImage:
        """Persist validated image bytes."""

    @abstractmethod
    async def delete(self, public_id: str) -> None:
        """Remove an image. Unknown ids are ignored."""


class CloudinaryStorage(ImageStorage):
    """Cloudinary backend using signed REST calls."""

    API_BASE = "https://api.cloudinary.com/v1_1"

    def _sign(self, params: dict) -> dict:
        # Cloudinary signature: sha1 of sorted "k=v" pairs joined by "&", then the secret
        to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
        signature = hashlib.sha1(
            (to_sign + self.settings.cloudinary_api_secret).encode("utf-8")
        ).hexdigest()
        return {**params, "api_key": self.settings.cloudinary_api_key, "signature": signature}

    def _endpoint(self, action: str) -> str:
        return f"{self.API_BASE}/{self.settings.cloudinary_cloud_name}/image/{action}"

    async def _post(self, action: str, form: aiohttp.FormData) -> dict:
        timeout = aiohttp.ClientTimeout(total=30)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self._endpoint(action), data=form) as resp:
                    try:
                        body = await resp.json(content_type=None)
                    except ValueError:
                        # proxies answer errors with HTML pages
                        body = None
                    if not isinstance(body, dict):
                        body = None

                    if resp.status >= 400:
                        error = (body or {}).get("error") or {}
                        message = error.get("message", resp.reason) if isinstance(error, dict) else error
                        raise StorageError(f"Cloudinary {action} failed: {message}")
                    if body is None:
                        raise StorageError(f"Cloudinary {action} returned an unreadable response")
                    return body
        except aiohttp.ClientError as e:
            raise StorageError(f"Cloudinary {action} request failed: {e}") from e

    async def _store(self, data: bytes, content_type: str) -> StoredImage:
        params = self._sign(
            {"folder": self.settings.cloudinary_folder, "timestamp": int(time.time())}
        )
        form = aiohttp.FormData()
        for key, value in params.items():
            form.add_field(key, str(value))
        form.add_field(
            "file",
            data,
            filename=f"upload{EXTENSIONS.get(content_type, '')}",
            content_type=content_type,
        )

        body = await self._post("upload", form)
        if not body.get("secure_url") or not body.get("public_id"):
            raise StorageError("Cloudinary upload response is missing the image url")
        logger.info(f"Uploaded image to Cloudinary: {body['public_id']}")
        return StoredImage(url=body["secure_url"], public_id=body["public_id"])

    async def delete(self, public_id: str) -> None:
        params = self._sign({"public_id": public_id, "timestamp": int(time.time())})
        form = aiohttp.FormData()
        for key, value in params.items():
            form.add_field(key, str(value))

        body = await self._post("destroy", form)
        # "not found" is fine, the image is gone either way
        if body.get("result") not in ("ok", "not found"):
            raise StorageError(f"Cloudinary destroy returned {body.get('result')}")
        logger.info(f"Deleted image from Cloudinary: {public_id}")


class LocalImageStorage(ImageStorage):
    """Stores images on local disk. Meant for development and tests."""

    URL_PREFIX = "/uploads"

    def __init__(self, settings: Optional[Settings] = None, root: Optional[str] = None):
        super().__init__(settings)
        self.root = Path(root or self.settings.upload_dir).resolve()

    def _path_for(self, public_id: str) -> Path:
        # public ids are bare file names; refuse anything that could escape root
        name = Path(public_id).name
        if name != public_id or not name:
            raise InvalidImageError("Invalid image id")
        return self.root / name

    async def _store(self, data: bytes, content_type: str) -> StoredImage:
        name = f"{uuid.uuid4().hex}{EXTENSIONS[content_type]}"
        path = self.root / name
        try:
            await aiofiles.os.makedirs(self.root, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
        except OSError as e:
            logger.error(f"Failed to store image at {path}: {e}")
            raise StorageError("Failed to save image") from e

        base = self.settings.public_base_url.rstrip("/")
        logger.info(f"Stored image {name} ({len(data)} bytes)")
        return StoredImage(url=f"{base}{self.URL_PREFIX}/{name}", public_id=name)

    async def delete(self, public_id: str) -> None:
        path = self._path_for(public_id)
        if not await aiofiles.os.path.exists(path):
            logger.debug(f"Image already gone: {public_id}")
            return
        try:
            await aiofiles.os.remove(path)
        except OSError as e:
            raise StorageError(f"Failed to delete image {public_id}") from e
        logger.info(f"Deleted image {public_id}")


_image_storage: Optional[ImageStorage] = None


def create_image_storage(settings: Optional[Settings] = None) -> ImageStorage:
    settings = settings or get_settings()
    if settings.storage_backend == "cloudinary":
        return CloudinaryStorage(settings)
    if settings.storage_backend == "local":
        return LocalImageStorage(settings)
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")


def get_image_storage() -> ImageStorage:
    """Get the configured image storage singleton."""
    global _image_storage
    if _image_storage is None:
        _image_storage = create_image_storage()
    return _image_storage

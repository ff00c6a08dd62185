"""
Content Identity Service

Fingerprints uploaded bytes and registers them as content items, rejecting
byte-identical re-uploads platform-wide.

The fingerprint is the SHA-256 digest of the exact uploaded bytes (hex
encoded), independent of filename or upload time. It is both the
deduplication key and the stem of the blob storage key. Racing registrations
of the same bytes are serialized by the unique constraint on
``ContentItem.content_hash``: the row is flushed before the blob is written,
so the loser fails with ``DuplicateContentError`` without touching the
winner's blob.
"""

import hashlib
import io
import logging
import uuid
from pathlib import Path

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from content_shield.config import settings
from content_shield.constants.licensing import LicenseType
from content_shield.exceptions import DuplicateContentError, FileTooLargeError
from content_shield.models.content import ContentItem
from content_shield.models.user import User
from content_shield.schemas.content import ContentMetadata
from content_shield.services.blob_store import LocalBlobStore, blob_key, thumbnail_key
from content_shield.utils.security import safe_extension

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192
THUMBNAIL_SIZE = (300, 300)


def fingerprint(data: bytes) -> str:
    """Return the hex SHA-256 digest of *data*."""
    return hashlib.sha256(data).hexdigest()


def fingerprint_file(path: Path | str) -> str:
    """Return the hex SHA-256 digest of a file, read in chunks."""
    sha256 = hashlib.sha256()
    with Path(path).open("rb") as fh:
        while chunk := fh.read(CHUNK_SIZE):
            sha256.update(chunk)
    return sha256.hexdigest()


def render_thumbnail(data: bytes) -> bytes | None:
    """
    Render a thumbnail of an image, keeping its original format.

    Returns None when the bytes cannot be decoded as an image.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            image_format = img.format
            img.thumbnail(THUMBNAIL_SIZE, Image.Resampling.LANCZOS)
            buffer = io.BytesIO()
            img.save(buffer, format=image_format)
            return buffer.getvalue()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.warning(f"Could not render thumbnail: {e}")
        return None


async def stage_upload(
    upload: UploadFile,
    temp_dir: Path | None = None,
    max_size: int | None = None,
) -> Path:
    """
    Stream an incoming upload to a temporary file.

    Args:
        upload: Uploaded file
        temp_dir: Staging directory (defaults to settings.temp_upload_dir)
        max_size: Size limit in bytes (defaults to settings.max_upload_size)

    Returns:
        Path of the staged file

    Raises:
        FileTooLargeError: If the upload exceeds the size limit; the partial
            file is removed first
    """
    temp_dir = Path(temp_dir or settings.temp_upload_dir)
    max_size = max_size or settings.max_upload_size
    temp_dir.mkdir(parents=True, exist_ok=True)

    staged_path = temp_dir / f"{uuid.uuid4().hex}{safe_extension(upload.filename)}"
    size = 0
    try:
        with staged_path.open("wb") as buffer:
            while chunk := await upload.read(CHUNK_SIZE):
                size += len(chunk)
                if size > max_size:
                    raise FileTooLargeError(max_size)
                buffer.write(chunk)
    except BaseException:
        staged_path.unlink(missing_ok=True)
        raise

    logger.debug(f"Staged upload {upload.filename!r} at {staged_path} ({size} bytes)")
    return staged_path


class ContentIdentityService:
    """Registers uploaded bytes as content items, one item per fingerprint."""

    def __init__(self, db: AsyncSession, blob_store: LocalBlobStore):
        self.db = db
        self.blob_store = blob_store

    async def find_by_fingerprint(self, content_hash: str) -> ContentItem | None:
        result = await self.db.execute(select(ContentItem).where(ContentItem.content_hash == content_hash))
        return result.scalars().first()

    async def register_content(self, owner: User, data: bytes, metadata: ContentMetadata) -> ContentItem:
        """
        Register *data* as a new content item owned by *owner*.

        Args:
            owner: Uploading user
            data: Exact uploaded bytes
            metadata: Title, license policy and file details

        Returns:
            The created ContentItem

        Raises:
            DuplicateContentError: If byte-identical content is already registered
        """
        content_hash = fingerprint(data)
        owner_id = owner.id

        if await self.find_by_fingerprint(content_hash) is not None:
            logger.info(f"Duplicate upload rejected: hash={content_hash}, user={owner_id}")
            raise DuplicateContentError(content_hash)

        key = blob_key(content_hash, metadata.original_filename)
        price = None
        if metadata.license_type == LicenseType.PAID:
            price = metadata.price or settings.default_paid_price

        item = ContentItem(
            title=metadata.title,
            description=metadata.description or "",
            license_type=metadata.license_type.value,
            allow_download=metadata.allow_download,
            price=price,
            file_path=key,
            content_type=metadata.content_type,
            content_hash=content_hash,
            owner_id=owner_id,
        )
        self.db.add(item)

        # Claim the fingerprint before any bytes are written
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            if await self.find_by_fingerprint(content_hash) is not None:
                logger.info(f"Duplicate upload lost registration race: hash={content_hash}, user={owner_id}")
                raise DuplicateContentError(content_hash) from None
            raise

        written: list[str] = []
        try:
            self.blob_store.put(key, data)
            written.append(key)

            if metadata.content_type.startswith("image/"):
                thumbnail = render_thumbnail(data)
                if thumbnail is not None:
                    self.blob_store.put(thumbnail_key(key), thumbnail)
                    written.append(thumbnail_key(key))
                    item.thumbnail_path = thumbnail_key(key)

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            for written_key in written:
                self.blob_store.delete(written_key)
            raise

        await self.db.refresh(item)
        logger.info(
            f"Content registered: id={item.id}, hash={content_hash}, owner={owner_id}, license={item.license_type}"
        )
        return item

    async def register_staged_file(self, owner: User, staged_path: Path | str, metadata: ContentMetadata) -> ContentItem:
        """
        Register a staged upload. The staged file is removed on every
        outcome, including the duplicate path.
        """
        staged_path = Path(staged_path)
        try:
            data = staged_path.read_bytes()
            return await self.register_content(owner, data, metadata)
        finally:
            staged_path.unlink(missing_ok=True)

"""
Disk storage for uploaded files.

Files land in `<upload_dir>/<category>/<uuid>.<ext>` and are served by the
static mount at `/uploads/<category>/<filename>`.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional
import uuid

from fastapi import UploadFile
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session, SessionTransaction
import structlog

from bloxmarket.utils.file_validation import file_extension, validate_upload
from bloxmarket.core.config import settings
from bloxmarket.core.constants import UploadCategory
from bloxmarket.core.exceptions import InvalidInputError

logger = structlog.get_logger()

PENDING_DELETES_KEY = "pending_file_deletes"


@dataclass(frozen=True)
class StoredFile:
    filename: str
    original_filename: str
    path: str
    url: str
    mime_type: str
    size: int


def upload_root() -> Path:
    return Path(settings.upload_dir)


def ensure_upload_dirs() -> None:
    """Create the upload root and one directory per category."""
    for category in UploadCategory:
        (upload_root() / category.value).mkdir(parents=True, exist_ok=True)


async def read_upload(upload: UploadFile, max_size: int) -> bytes:
    """Read at most `max_size + 1` bytes so oversized files are detected without buffering them whole."""
    content = await upload.read(max_size + 1)
    await upload.close()
    return content


async def save_upload(
    upload: UploadFile,
    category: UploadCategory,
    allowed_extensions: Iterable[str],
    max_size: Optional[int] = None,
) -> StoredFile:
    """
    Validate and write one uploaded file.

    Raises:
        InvalidInputError: wrong type, empty, too large or content mismatch
    """
    max_size = max_size or settings.max_upload_size
    content = await read_upload(upload, max_size)

    is_valid, error, mime_type = validate_upload(upload.filename, content, allowed_extensions, max_size)
    if not is_valid:
        raise InvalidInputError(error)

    extension = file_extension(upload.filename)
    filename = f"{uuid.uuid4().hex}.{extension}"
    directory = upload_root() / category.value
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    path.write_bytes(content)

    logger.info(
        "file_uploaded",
        category=category.value,
        filename=filename,
        size=len(content),
    )

    return StoredFile(
        filename=filename,
        original_filename=upload.filename or filename,
        path=str(path),
        url=f"/uploads/{category.value}/{filename}",
        mime_type=mime_type,
        size=len(content),
    )


def delete_stored_file(path: str) -> None:
    """Remove a stored file; a missing file is not an error."""
    try:
        Path(path).unlink(missing_ok=True)
    except OSError as e:
        logger.warning("file_delete_failed", path=path, error=str(e))


def delete_after_commit(db: AsyncSession, paths: Iterable[str]) -> None:
    """
    Queue stored files for removal once the session's transaction commits.

    A rollback drops the queue, so rows that survive keep their files.
    """
    db.sync_session.info.setdefault(PENDING_DELETES_KEY, []).extend(paths)


@event.listens_for(Session, "after_commit")
def _delete_committed_files(session: Session) -> None:
    for path in session.info.pop(PENDING_DELETES_KEY, []):
        delete_stored_file(path)


@event.listens_for(Session, "after_soft_rollback")
def _discard_pending_deletes(session: Session, previous_transaction: SessionTransaction) -> None:
    # Savepoint rollbacks leave the outer transaction, and its queue, intact
    if previous_transaction.parent is None:
        session.info.pop(PENDING_DELETES_KEY, None)

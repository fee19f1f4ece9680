import logging
import os
from typing import Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import FileValidationError
from app.models.resume import Resume
from app.services.resume_records import create_resume
from app.services.storage import build_object_key
from app.services.text_extractor import MIME_TYPES

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = set(MIME_TYPES)
ALLOWED_MIME_TYPES = set(MIME_TYPES.values())
GENERIC_MIME_TYPE = "application/octet-stream"


def validate_upload(file_name: Optional[str], content_type: Optional[str], size: int) -> str:
    """Returns the lowercase extension when the file is acceptable."""
    if not file_name:
        raise FileValidationError("A file name is required")

    extension = os.path.splitext(file_name)[1].lower()
    if extension not in ALLOWED_EXTENSIONS:
        raise FileValidationError(
            f"Unsupported file type '{extension or file_name}'. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
        )

    # Browsers send octet-stream for unknown types; the extension decides then
    mime = (content_type or "").split(";")[0].strip().lower()
    if mime and mime != GENERIC_MIME_TYPE and mime not in ALLOWED_MIME_TYPES:
        raise FileValidationError(f"Unsupported content type '{mime}'")

    if size <= 0:
        raise FileValidationError("Uploaded file is empty")
    if size > settings.max_upload_bytes:
        limit_mb = settings.max_upload_bytes // (1024 * 1024)
        raise FileValidationError(f"File too large. Maximum size is {limit_mb}MB", status_code=413)
    return extension


def upload_resume(
    db: Session,
    storage,
    user_id: str,
    file_name: str,
    content_type: Optional[str],
    data: bytes,
) -> Resume:
    """Validate, store the bytes, then create the pending resume row."""
    extension = validate_upload(file_name, content_type, len(data))
    key = build_object_key(user_id, file_name)
    storage.upload(key, data, content_type or MIME_TYPES[extension])
    logger.info(f"Uploaded {file_name} ({len(data)} bytes) for user {user_id} as {key}")
    return create_resume(db, user_id, file_name, storage.public_url(key), file_path=key)

"""3D model (.spz) upload and download."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from functools import lru_cache

from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import settings
from app.core.errors import NotFoundError, PayloadTooLargeError, StorageError, ValidationError
from app.schemas.upload import ModelUploadResponse
from utils.s3_storage import S3ModelStorage

logger = logging.getLogger(__name__)

ALLOWED_EXTENSION = ".spz"


def validate_model_file(original_name: str | None, size: int, max_size: int | None = None) -> None:
    """Reject missing, oversized or non-SPZ uploads."""
    max_size = settings.max_model_size if max_size is None else max_size
    if not original_name:
        raise ValidationError("No file provided")
    if size > max_size:
        raise PayloadTooLargeError(
            f"File size exceeds {max_size // (1024 * 1024)}MB limit",
            f"size={size}",
        )
    if not original_name.lower().endswith(ALLOWED_EXTENSION):
        raise ValidationError("Only SPZ files are allowed", original_name)


def save_model(storage: S3ModelStorage, original_name: str, data: bytes) -> ModelUploadResponse:
    """Store the file under ``<epoch-millis>_<original name>``."""
    file_name = f"{int(time.time() * 1000)}_{original_name}"
    metadata = {
        "originalName": original_name,
        "size": str(len(data)),
        "uploadedAt": datetime.now(timezone.utc).isoformat(),
    }
    try:
        storage.put(file_name, data, metadata)
    except (BotoCoreError, ClientError) as exc:
        logger.exception("File upload failed")
        raise StorageError("File upload failed", str(exc)) from exc
    logger.info("Stored model %s (%d bytes)", file_name, len(data))
    return ModelUploadResponse(
        file_name=file_name,
        file_url=f"{settings.api_prefix}/models/{file_name}",
        original_name=original_name,
        size=len(data),
    )


def load_model(storage: S3ModelStorage, file_name: str) -> tuple[bytes, str]:
    """Return file bytes and the name to offer for download."""
    try:
        found = storage.get(file_name)
    except (BotoCoreError, ClientError) as exc:
        logger.exception("File serving failed")
        raise StorageError("File serving failed", str(exc)) from exc
    if found is None:
        raise NotFoundError("File not found", file_name)
    data, metadata = found
    return data, metadata.get("originalname") or file_name


@lru_cache
def get_model_storage() -> S3ModelStorage:
    """FastAPI dependency returning the configured blob store."""
    return S3ModelStorage(
        settings.model_bucket,
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
        region=settings.aws_region,
        endpoint_url=settings.s3_endpoint_url,
    )

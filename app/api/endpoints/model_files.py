"""3D model upload and download endpoints."""

from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response

from app.core.config import settings
from app.schemas.upload import ModelUploadResponse
from app.services.model_files import get_model_storage, load_model, save_model, validate_model_file
from utils.s3_storage import S3ModelStorage

router = APIRouter(tags=["models"])


@router.post("/upload-model", response_model=ModelUploadResponse)
def upload_model(
    model: Optional[UploadFile] = File(None),
    storage: S3ModelStorage = Depends(get_model_storage),
) -> ModelUploadResponse:
    """Accept a single .spz file in the ``model`` form field."""
    original_name = model.filename if model is not None else None
    # 한도 + 1 바이트까지만 읽어서 초과 여부 판단
    data = model.file.read(settings.max_model_size + 1) if model is not None else b""
    validate_model_file(original_name, len(data))
    return save_model(storage, original_name, data)


@router.get("/models/{file_name}")
def download_model(file_name: str, storage: S3ModelStorage = Depends(get_model_storage)) -> Response:
    data, original_name = load_model(storage, file_name)
    return Response(
        content=data,
        media_type="application/octet-stream",
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(original_name)}",
            "Cache-Control": "public, max-age=31536000",
        },
    )

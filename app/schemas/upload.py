"""Schemas for 3D model uploads."""

from pydantic import BaseModel, ConfigDict, Field


class ModelUploadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    file_name: str = Field(..., serialization_alias="fileName")
    file_url: str = Field(..., serialization_alias="fileUrl")
    original_name: str = Field(..., serialization_alias="originalName")
    size: int

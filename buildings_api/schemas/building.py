"""
Building and floor schemas.

Buildings and floors are free-form documents: only the keys declared here
are typed, anything else the client sends is kept as-is.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


def _id_as_string(v: Any) -> Any:
    """Numeric ids are stored as their string form (42 -> "42")."""
    if isinstance(v, bool):
        return v
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    if isinstance(v, (int, float)):
        return str(v)
    return v


class FloorCreate(BaseModel):
    """Schema for adding a floor. ``id`` is generated when omitted."""
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None

    @field_validator('id', mode='before')
    @classmethod
    def validate_id(cls, v: Any) -> Any:
        return _id_as_string(v)


class FloorUpdate(BaseModel):
    """Partial floor fields to merge into an existing floor."""
    model_config = ConfigDict(extra="allow")


class FloorResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str


class BuildingCreate(BaseModel):
    """Schema for creating a building. ``id`` is generated when omitted."""
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    floors: Optional[List[FloorCreate]] = None
    modelPath: Optional[str] = None

    @field_validator('id', mode='before')
    @classmethod
    def validate_id(cls, v: Any) -> Any:
        return _id_as_string(v)


class BuildingUpdate(BaseModel):
    """Partial building fields, shallow-merged into the stored document."""
    model_config = ConfigDict(extra="allow")

    modelPath: Optional[str] = None


class BuildingResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    floors: List[FloorResponse]
    modelPath: Optional[str] = None
    createdAt: datetime
    updatedAt: datetime


class MessageResponse(BaseModel):
    message: str


class FrameUploadResponse(BaseModel):
    success: bool = True
    url: str


class ModelUploadResponse(BaseModel):
    url: str


def submitted_fields(model: BaseModel) -> Dict[str, Any]:
    """Fields the client actually sent, declared and free-form alike."""
    return {**model.model_dump(exclude_unset=True), **(model.model_extra or {})}

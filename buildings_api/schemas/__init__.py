from buildings_api.schemas.auth import CurrentUser
from buildings_api.schemas.building import (
    BuildingCreate,
    BuildingUpdate,
    BuildingResponse,
    FloorCreate,
    FloorUpdate,
    FloorResponse,
    MessageResponse,
    FrameUploadResponse,
    ModelUploadResponse,
)

__all__ = [
    # Auth
    "CurrentUser",
    # Building
    "BuildingCreate",
    "BuildingUpdate",
    "BuildingResponse",
    "FloorCreate",
    "FloorUpdate",
    "FloorResponse",
    "MessageResponse",
    "FrameUploadResponse",
    "ModelUploadResponse",
]

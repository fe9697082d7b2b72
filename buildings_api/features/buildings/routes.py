"""
Building CRUD endpoints.

Supports:
- Building management (list, get, create, update, delete)
- Floors embedded in a building (add, update, remove)
- Frame image and 3D model uploads

Reads are public; every mutation requires a bearer access token.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from buildings_api.infra.asset_store import AssetStore
from buildings_api.infra.r2_storage import get_asset_store
from buildings_api.lib.database import get_db
from buildings_api.lib.deps import get_current_user
from buildings_api.lib.errors import (
    InvalidUploadError,
    MissingFieldError,
    NotFoundError,
    UploadChannelError,
)
from buildings_api.lib.uploads import read_frame, read_model
from buildings_api.models.building import Building
from buildings_api.schemas.auth import CurrentUser
from buildings_api.schemas.building import (
    BuildingCreate,
    BuildingUpdate,
    BuildingResponse,
    FloorCreate,
    FloorUpdate,
    FrameUploadResponse,
    MessageResponse,
    ModelUploadResponse,
)
from buildings_api.services.building_service import BuildingService
from buildings_api.services.upload_service import UploadService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/buildings", tags=["Buildings"])

BUILDING_NOT_FOUND = "Building not found"


def _found(building: Optional[Building], **extra) -> Building:
    if not building:
        raise NotFoundError(BUILDING_NOT_FOUND, **extra)
    return building


def get_upload_service(store: AssetStore = Depends(get_asset_store)) -> UploadService:
    return UploadService(store)


# ============================================
# BUILDING ENDPOINTS
# ============================================

@router.get("/", response_model=List[BuildingResponse])
async def list_buildings(db: AsyncSession = Depends(get_db)):
    """List all buildings, newest first."""
    buildings = await BuildingService(db).list_buildings()
    return [b.to_document() for b in buildings]


@router.get("/{building_id}", response_model=BuildingResponse)
async def get_building(building_id: str, db: AsyncSession = Depends(get_db)):
    building = await BuildingService(db).get_building(building_id)
    return _found(building).to_document()


@router.post(
    "/",
    response_model=BuildingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_building(
    data: BuildingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Create a building. A UUID is generated when the body has no ``id``."""
    building = await BuildingService(db).create_building(data)
    return building.to_document()


@router.put("/{building_id}", response_model=BuildingResponse)
async def update_building(
    building_id: str,
    data: BuildingUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Merge the given top-level fields into the building."""
    building = await BuildingService(db).update_building(building_id, data)
    return _found(building).to_document()


@router.delete("/{building_id}", response_model=MessageResponse)
async def delete_building(
    building_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Delete a building and its floors."""
    if not await BuildingService(db).delete_building(building_id):
        raise NotFoundError(BUILDING_NOT_FOUND)
    return MessageResponse(message="Building deleted successfully")


# ============================================
# FLOOR ENDPOINTS
# ============================================

@router.post(
    "/{building_id}/floors",
    response_model=BuildingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_floor(
    building_id: str,
    data: FloorCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Append a floor; responds with the whole building."""
    building = await BuildingService(db).add_floor(building_id, data)
    return _found(building).to_document()


@router.put("/{building_id}/floors/{floor_id}", response_model=BuildingResponse)
async def update_floor(
    building_id: str,
    floor_id: str,
    data: FloorUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    building = await BuildingService(db).update_floor(building_id, floor_id, data)
    return _found(building).to_document()


@router.delete("/{building_id}/floors/{floor_id}", response_model=BuildingResponse)
async def remove_floor(
    building_id: str,
    floor_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Remove a floor. Removing an unknown floor leaves the building unchanged."""
    building = await BuildingService(db).remove_floor(building_id, floor_id)
    return _found(building).to_document()


# ============================================
# UPLOADS
# ============================================

@router.post("/{building_id}/upload-frame", response_model=FrameUploadResponse)
async def upload_frame(
    building_id: str,
    frame: Optional[UploadFile] = File(None),
    frame_number: Optional[str] = Form(None, alias="frameNumber"),
    db: AsyncSession = Depends(get_db),
    uploads: UploadService = Depends(get_upload_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    Upload a single frame image as ``frame_{NNN}`` of the building.

    Uploading the same frame number again replaces the stored frame.
    Errors carry ``success: false``.
    """
    if frame is None:
        raise MissingFieldError("No frame file provided", success=False)
    if not frame_number:
        raise MissingFieldError("Frame number is required", success=False)

    content = await read_frame(frame)
    _found(await BuildingService(db).get_building(building_id), success=False)

    try:
        url = await uploads.upload_frame(building_id, frame_number, content)
    except UploadChannelError as exc:
        raise UploadChannelError(exc.message or "Failed to upload frame", success=False) from exc
    except InvalidUploadError:
        raise
    except Exception as exc:
        logger.exception("Frame upload for building %s failed", building_id)
        raise UploadChannelError("Failed to upload frame", success=False) from exc

    return FrameUploadResponse(success=True, url=url)


@router.post("/{building_id}/upload-model", response_model=ModelUploadResponse)
async def upload_model(
    building_id: str,
    model: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    uploads: UploadService = Depends(get_upload_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    Upload the building's 3D model and store its URL as ``modelPath``.

    The upload and the record update are not atomic: if saving the URL
    fails, the uploaded model stays in storage.
    """
    if model is None:
        raise MissingFieldError("No file uploaded")

    content = await read_model(model)
    service = BuildingService(db)
    _found(await service.get_building(building_id))

    try:
        url = await uploads.upload_model(building_id, content, model.content_type)
    except UploadChannelError as exc:
        logger.error("Model upload for building %s failed: %s", building_id, exc.message)
        raise UploadChannelError("Failed to upload model") from exc
    except Exception as exc:
        logger.exception("Model upload for building %s failed", building_id)
        raise UploadChannelError("Failed to upload model") from exc

    if not await service.set_model_path(building_id, url):
        logger.warning("Building %s disappeared before modelPath could be saved", building_id)

    return ModelUploadResponse(url=url)

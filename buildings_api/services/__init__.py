from buildings_api.services.building_service import BuildingService
from buildings_api.services.upload_service import UploadService

__all__ = [
    "BuildingService",
    "UploadService",
]

"""
Building Service

Handles building CRUD and the floor list embedded in each building.

Every read-modify-write loads the row with SELECT ... FOR UPDATE, so
concurrent edits of the same building (two floor updates, an upload
setting modelPath while a floor is added) are serialized by the database
instead of overwriting each other.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from buildings_api.lib.errors import NotFoundError
from buildings_api.lib.identifiers import ensure_id
from buildings_api.models.building import Building, RESERVED_KEYS, utcnow
from buildings_api.schemas.building import (
    BuildingCreate,
    BuildingUpdate,
    FloorCreate,
    FloorUpdate,
    submitted_fields,
)

logger = logging.getLogger(__name__)


def _attributes(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if k not in RESERVED_KEYS}


class BuildingService:
    """Service for managing buildings and their floors."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ============================================
    # HELPER METHODS
    # ============================================

    async def _get_for_update(self, building_id: str) -> Optional[Building]:
        result = await self.db.execute(
            select(Building)
            .where(Building.id == building_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _save(self, building: Building) -> Building:
        await self.db.commit()
        await self.db.refresh(building)
        return building

    # ============================================
    # BUILDING CRUD
    # ============================================

    async def list_buildings(self) -> List[Building]:
        """List all buildings, newest first."""
        result = await self.db.execute(
            select(Building).order_by(Building.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_building(self, building_id: str) -> Optional[Building]:
        """Get a specific building by ID."""
        result = await self.db.execute(
            select(Building).where(Building.id == building_id)
        )
        return result.scalar_one_or_none()

    async def create_building(self, data: BuildingCreate) -> Building:
        """Create a new building, generating its id (and floor ids) when absent."""
        payload = ensure_id(submitted_fields(data))
        floors = [ensure_id(submitted_fields(floor)) for floor in data.floors or []]

        building = Building(
            id=payload["id"],
            attributes=_attributes(payload),
            floors=floors,
            model_path=payload.get("modelPath"),
        )

        self.db.add(building)
        building = await self._save(building)
        logger.info("Created building %s", building.id)
        return building

    async def update_building(
        self,
        building_id: str,
        data: BuildingUpdate,
    ) -> Optional[Building]:
        """
        Shallow-merge top-level fields into an existing building.

        ``id``, ``floors`` and the timestamps are not writable here; floors
        change only through the floor operations.
        """
        building = await self._get_for_update(building_id)
        if not building:
            return None

        changes = submitted_fields(data)
        if "modelPath" in changes:
            building.model_path = changes["modelPath"]
        attributes = _attributes(changes)
        if attributes:
            building.attributes = {**(building.attributes or {}), **attributes}
        building.updated_at = utcnow()

        building = await self._save(building)
        logger.info("Updated building %s", building_id)
        return building

    async def delete_building(self, building_id: str) -> bool:
        """Delete a building together with its embedded floors."""
        building = await self.get_building(building_id)
        if not building:
            return False

        await self.db.delete(building)
        await self.db.commit()
        logger.info("Deleted building %s", building_id)

        return True

    async def set_model_path(self, building_id: str, url: str) -> Optional[Building]:
        """Point the building at its latest uploaded 3D model."""
        building = await self._get_for_update(building_id)
        if not building:
            return None

        building.model_path = url
        return await self._save(building)

    # ============================================
    # FLOORS
    # ============================================

    async def add_floor(
        self,
        building_id: str,
        data: FloorCreate,
    ) -> Optional[Building]:
        """Append a floor at the end of the building's floor list."""
        building = await self._get_for_update(building_id)
        if not building:
            return None

        floor = ensure_id(submitted_fields(data))
        building.floors = [*(building.floors or []), floor]

        building = await self._save(building)
        logger.info("Added floor %s to building %s", floor["id"], building_id)
        return building

    async def update_floor(
        self,
        building_id: str,
        floor_id: str,
        data: FloorUpdate,
    ) -> Optional[Building]:
        """
        Merge fields into the first floor whose id matches.

        Returns None if the building does not exist and raises
        NotFoundError if the building has no such floor. The floor keeps
        its id.
        """
        building = await self._get_for_update(building_id)
        if not building:
            return None

        floors = list(building.floors or [])
        index = next((i for i, f in enumerate(floors) if f.get("id") == floor_id), None)
        if index is None:
            await self.db.rollback()
            raise NotFoundError("Floor not found")

        changes = submitted_fields(data)
        floors[index] = {**floors[index], **changes, "id": floors[index]["id"]}
        building.floors = floors

        building = await self._save(building)
        logger.info("Updated floor %s of building %s", floor_id, building_id)
        return building

    async def remove_floor(self, building_id: str, floor_id: str) -> Optional[Building]:
        """Remove every floor with the given id. Unknown floor ids are a no-op."""
        building = await self._get_for_update(building_id)
        if not building:
            return None

        floors = building.floors or []
        remaining = [f for f in floors if f.get("id") != floor_id]
        if len(remaining) != len(floors):
            building.floors = remaining
            logger.info("Removed floor %s from building %s", floor_id, building_id)

        return await self._save(building)

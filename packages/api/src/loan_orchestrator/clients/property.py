# This project was developed with assistance from AI tools.
"""Property service gateway: property record, appraisal and title search."""

from uuid import UUID

from ..schemas.gateway import Appraisal, PropertyRecord, TitleSearch
from .base import ServiceClient


class PropertyClient(ServiceClient):
    service_name = "property-service"

    async def property_exists(self, property_id: UUID) -> bool:
        return await self._exists(f"/api/properties/{property_id}")

    async def get_property(self, property_id: UUID) -> PropertyRecord | None:
        return await self._get_data(f"/api/properties/{property_id}", PropertyRecord, "property")

    async def get_appraisal(self, property_id: UUID) -> Appraisal | None:
        return await self._get_data(
            f"/api/properties/{property_id}/appraisal", Appraisal, "appraisal"
        )

    async def get_title_search(self, property_id: UUID) -> TitleSearch | None:
        return await self._get_data(
            f"/api/properties/{property_id}/title", TitleSearch, "title search"
        )

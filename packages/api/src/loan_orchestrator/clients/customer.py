# This project was developed with assistance from AI tools.
"""Customer service gateway: profile, credit report and employment history."""

from uuid import UUID

from ..schemas.gateway import CreditReport, CustomerProfile, Employment
from .base import ServiceClient


class CustomerClient(ServiceClient):
    service_name = "customer-service"

    async def customer_exists(self, customer_id: UUID) -> bool:
        return await self._exists(f"/api/customers/{customer_id}")

    async def get_customer(self, customer_id: UUID) -> CustomerProfile | None:
        return await self._get_data(f"/api/customers/{customer_id}", CustomerProfile, "customer")

    async def get_credit_report(self, customer_id: UUID) -> CreditReport | None:
        return await self._get_data(
            f"/api/customers/{customer_id}/credit", CreditReport, "credit report"
        )

    async def get_employments(self, customer_id: UUID) -> list[Employment] | None:
        return await self._get_data(
            f"/api/customers/{customer_id}/employments", list[Employment], "employments"
        )

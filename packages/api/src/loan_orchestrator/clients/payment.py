# This project was developed with assistance from AI tools.
"""Payment service gateway: payment schedules."""

from ..schemas.gateway import CreateScheduleRequest, PaymentSchedule
from .base import ServiceClient


class PaymentClient(ServiceClient):
    service_name = "payment-service"

    async def create_schedule(self, request: CreateScheduleRequest) -> PaymentSchedule | None:
        return await self._post_data(
            "/api/payments/schedules", request, PaymentSchedule, "payment schedule"
        )

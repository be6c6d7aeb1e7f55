# This project was developed with assistance from AI tools.
"""Loan service gateway: loan lookup, creation and funding."""

from uuid import UUID

from ..schemas.gateway import CreateLoanRequest, FundLoanRequest, LoanRecord
from .base import ServiceClient


class LoanClient(ServiceClient):
    service_name = "loan-service"

    async def get_loan(self, loan_id: UUID) -> LoanRecord | None:
        return await self._get_data(
            f"/api/loans/{loan_id}", LoanRecord, "loan", params={"enrich": "false"}
        )

    async def create_loan(self, request: CreateLoanRequest) -> LoanRecord | None:
        return await self._post_data("/api/loans", request, LoanRecord, "created loan")

    async def fund_loan(self, loan_id: UUID, request: FundLoanRequest) -> bool:
        return await self._post_ok(f"/api/loans/{loan_id}/fund", request, "loan funding")

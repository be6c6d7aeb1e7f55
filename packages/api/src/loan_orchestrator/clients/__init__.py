# This project was developed with assistance from AI tools.
"""Dependency service gateways.

The four clients are created once at startup (``init_gateways``) and shared
for the life of the process; ``get_gateways`` is the FastAPI dependency.
"""

import logging
from dataclasses import dataclass

import httpx

from ..core.config import Settings
from .base import CircuitBreaker, ServiceClient
from .customer import CustomerClient
from .loan import LoanClient
from .payment import PaymentClient
from .property import PropertyClient

logger = logging.getLogger(__name__)

__all__ = [
    "CircuitBreaker",
    "CustomerClient",
    "Gateways",
    "LoanClient",
    "PaymentClient",
    "PropertyClient",
    "ServiceClient",
    "get_gateways",
    "init_gateways",
    "close_gateways",
]


@dataclass
class Gateways:
    customer: CustomerClient
    property: PropertyClient
    loan: LoanClient
    payment: PaymentClient

    def all(self) -> dict[str, ServiceClient]:
        return {
            "customer": self.customer,
            "property": self.property,
            "loan": self.loan,
            "payment": self.payment,
        }

    async def aclose(self) -> None:
        for client in self.all().values():
            await client.aclose()

    @classmethod
    def from_settings(
        cls,
        cfg: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "Gateways":
        return cls(
            customer=CustomerClient.from_settings(cfg, cfg.CUSTOMER_SERVICE_URL, transport),
            property=PropertyClient.from_settings(cfg, cfg.PROPERTY_SERVICE_URL, transport),
            loan=LoanClient.from_settings(cfg, cfg.LOAN_SERVICE_URL, transport),
            payment=PaymentClient.from_settings(cfg, cfg.PAYMENT_SERVICE_URL, transport),
        )


_gateways: Gateways | None = None


def init_gateways(cfg: Settings) -> Gateways:
    """Create the gateway singleton. Called once during app startup."""
    global _gateways
    _gateways = Gateways.from_settings(cfg)
    logger.info(
        "Gateways initialized (customer=%s, property=%s, loan=%s, payment=%s)",
        cfg.CUSTOMER_SERVICE_URL,
        cfg.PROPERTY_SERVICE_URL,
        cfg.LOAN_SERVICE_URL,
        cfg.PAYMENT_SERVICE_URL,
    )
    return _gateways


def get_gateways() -> Gateways:
    """Return the gateway singleton. Raises if not initialized."""
    if _gateways is None:
        raise RuntimeError("Gateways not initialized -- call init_gateways() first")
    return _gateways


async def close_gateways() -> None:
    global _gateways
    if _gateways is not None:
        await _gateways.aclose()
        _gateways = None

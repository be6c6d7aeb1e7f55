# This project was developed with assistance from AI tools.
"""Liveness and readiness probes."""

import asyncio
import logging

from fastapi import APIRouter, Depends, Response, status
from loan_db import get_db
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .. import __version__
from ..clients import Gateways, get_gateways
from ..schemas.health import HealthItem

logger = logging.getLogger(__name__)

router = APIRouter()

HEALTHY = "healthy"
UNHEALTHY = "unhealthy"


def _api_item() -> HealthItem:
    return HealthItem(name="API", status=HEALTHY, message="API is running", version=__version__)


async def _database_item(session: AsyncSession) -> HealthItem:
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.warning("Database health check failed", exc_info=True)
        return HealthItem(name="Database", status=UNHEALTHY, message="Database unreachable")
    return HealthItem(name="Database", status=HEALTHY, message="Database reachable")


@router.get("/", response_model=list[HealthItem])
async def health(session: AsyncSession = Depends(get_db)) -> list[HealthItem]:
    """API and database status."""
    return [_api_item(), await _database_item(session)]


@router.get("/live", response_model=list[HealthItem])
async def live() -> list[HealthItem]:
    """Process liveness -- no dependency checks."""
    return [_api_item()]


@router.get("/ready", response_model=list[HealthItem])
async def ready(
    response: Response,
    session: AsyncSession = Depends(get_db),
    gateways: Gateways = Depends(get_gateways),
) -> list[HealthItem]:
    """Database plus all four dependency services; 503 when any is down."""
    names = list(gateways.all())
    results = await asyncio.gather(*(client.ping() for client in gateways.all().values()))
    items = [await _database_item(session)]
    for name, ok in zip(names, results):
        items.append(
            HealthItem(
                name=f"{name}-service",
                status=HEALTHY if ok else UNHEALTHY,
                message="reachable" if ok else "unreachable",
            )
        )
    if any(item.status != HEALTHY for item in items):
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return items

# This project was developed with assistance from AI tools.
"""Health check response schema."""

from pydantic import BaseModel


class HealthItem(BaseModel):
    """Health of one component."""

    name: str
    status: str
    message: str = ""
    version: str | None = None

# This project was developed with assistance from AI tools.
"""RFC 7807 Problem Details error body."""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Problem Details document returned for every error response.

    See https://datatracker.ietf.org/doc/html/rfc7807
    """

    type: str = Field(default="about:blank", description="URI identifying the problem type.")
    title: str = Field(description="Short summary of the HTTP status.")
    status: int = Field(description="HTTP status code.")
    detail: str = Field(default="", description="Explanation specific to this occurrence.")
    request_id: str = Field(default="", description="Correlation ID echoed from X-Request-ID.")
    instance: str = Field(default="", description="Request path that produced the problem.")

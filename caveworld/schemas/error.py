"""Error response body shared by every endpoint."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """'fail' for client errors, 'error' for server errors. error/stack are dev-only."""

    status: Literal["fail", "error"]
    message: str
    error: dict[str, Any] | None = Field(default=None, description="Debug detail (dev only)")
    stack: str | None = Field(default=None, description="Traceback (dev only)")

"""Core schema definitions shared by every API module.

The public API speaks camelCase JSON; Python code works with snake_case
attributes. ``CamelModel`` bridges the two for both requests and
responses.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that (de)serializes camelCase field names.

    Example:
        ```python
        class FollowCreate(CamelModel):
            target_user_id: UUID

        FollowCreate.model_validate({"targetUserId": "..."})
        ```
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class AckResponse(BaseModel):
    """Plain acknowledgement returned by state-changing endpoints."""

    message: str


class ErrorDetail(BaseModel):
    """Error detail structure."""

    code: str = Field(..., description="Error code for programmatic handling")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = Field(None, description="Additional error context")


class ErrorResponse(BaseModel):
    """Standard error response format."""

    success: bool = False
    error: ErrorDetail


def error_responses(*status_codes: int) -> dict[int | str, dict[str, Any]]:
    """Build the ``responses=`` mapping documenting error envelopes for a route."""
    return {code: {"model": ErrorResponse} for code in status_codes}

"""
Shared response schemas - pagination, messages, health
"""

from datetime import datetime, timezone
from typing import Any, Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar('T')


class PaginationResponse(BaseModel, Generic[T]):
    """Pagination wrapper for API responses"""

    items: List[T]
    total: int
    page: int
    per_page: int
    pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def create(
        cls,
        items: List[T],
        total: int,
        page: int,
        per_page: int
    ) -> "PaginationResponse[T]":
        # calculate page info
        pages = (total + per_page - 1) // per_page

        return cls(
            items=items,
            total=total,
            page=page,
            per_page=per_page,
            pages=pages,
            has_next=page < pages,
            has_prev=page > 1
        )


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str = Field(description="Human-readable result")

    model_config = ConfigDict(
        json_schema_extra={"example": {"message": "Note moved to trash"}}
    )


class HealthCheckResponse(BaseModel):
    """Health check response schema."""

    status: str = Field(description="Overall health status")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: str = Field(description="Application version")
    checks: dict[str, dict[str, Any]] = Field(description="Individual component health checks")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "healthy",
                "timestamp": "2025-09-13T10:30:00Z",
                "version": "1.0.0",
                "checks": {
                    "database": {"status": "healthy", "response_time_ms": 15},
                    "redis": {"status": "healthy", "response_time_ms": 5},
                },
            }
        }
    )

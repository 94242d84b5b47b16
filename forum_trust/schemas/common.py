"""
Common schema types used across the API.
"""

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

# Bulk requests accept raw id strings so malformed ids become per-item failures
BulkIds = List[str]


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
    code: Optional[str] = None
    field: Optional[str] = None
    request_id: Optional[str] = None


class PaginatedResponse(BaseModel, Generic[T]):
    """Offset-paginated list response."""

    items: List[T]
    total: int
    limit: int
    offset: int = 0
    has_more: bool = False

    @classmethod
    def create(
        cls,
        items: List[T],
        total: int,
        limit: int,
        offset: int = 0,
    ) -> "PaginatedResponse[T]":
        return cls(
            items=items,
            total=total,
            limit=limit,
            offset=offset,
            has_more=(offset + len(items)) < total,
        )


class BulkFailureResponse(BaseModel):
    id: str
    error: str
    code: str


class BulkResultResponse(BaseModel):
    """Aggregate outcome of a bulk operation."""

    processed: int
    failed: List[BulkFailureResponse] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result) -> "BulkResultResponse":
        return cls(
            processed=result.processed,
            failed=[BulkFailureResponse(id=f.id, error=f.error, code=f.code) for f in result.failed],
        )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
    database: str = "connected"
    notifications_pending: int = 0

"""Common Pydantic schemas."""

import math
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Violation(BaseModel):
    """Validation error violation."""

    path: str = Field(..., description="JSON path to the invalid field")
    message: str = Field(..., description="Validation error message")


class Problem(BaseModel):
    """RFC 9457 Problem Details response."""

    type: Optional[str] = Field(None, description="Problem type URI")
    title: str = Field(..., description="Short human-readable summary")
    status: int = Field(..., description="HTTP status code")
    detail: Optional[str] = Field(None, description="Human-readable explanation")
    instance: Optional[str] = Field(None, description="URI reference for this occurrence")
    code: Optional[str] = Field(None, description="Application-specific error code")
    violations: Optional[List[Violation]] = Field(None, description="Validation errors")


class PaginationParams(BaseModel):
    """Page/limit request parameters."""

    page: int = Field(1, ge=1, description="Page number (1-based)")
    limit: int = Field(50, ge=1, le=100, description="Page size")

    @property
    def offset(self) -> int:
        """Number of rows to skip."""
        return (self.page - 1) * self.limit


class PaginationMeta(BaseModel):
    """Pagination metadata returned with every page."""

    page: int
    limit: int
    total: int
    total_pages: int


class PaginatedResponse(BaseModel, Generic[T]):
    """A page of results plus metadata."""

    data: List[T] = Field(default_factory=list)
    meta: PaginationMeta

    @classmethod
    def build(cls, data: List[T], total: int, params: PaginationParams) -> "PaginatedResponse[T]":
        """Assemble a page from the rows and the unpaginated total."""
        return cls(
            data=data,
            meta=PaginationMeta(
                page=params.page,
                limit=params.limit,
                total=total,
                total_pages=math.ceil(total / params.limit) if total else 0,
            ),
        )


class MessageResponse(BaseModel):
    """Simple acknowledgement."""

    message: str

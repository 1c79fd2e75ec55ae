"""
Pagination utilities for API endpoints.

This module provides the page/size parameters shared by the list endpoints
and the helpers that turn a page of items into a PaginatedResponse.
"""

from typing import List, Optional, TypeVar, Any
from pydantic import BaseModel, Field
from fastapi import Query
from sqlalchemy import or_
from sqlalchemy.orm import Query as SQLQuery
import math

from polly.core.constants import DatabaseConfig
from polly.schemas.common import PaginatedResponse


# Generic type for paginated responses
T = TypeVar('T')


class PaginationParams(BaseModel):
    """Parameters for pagination"""
    page: int = Field(1, ge=1, description="Page number (starts from 1)")
    size: int = Field(DatabaseConfig.DEFAULT_PAGE_SIZE, ge=1, le=DatabaseConfig.MAX_PAGE_SIZE,
                      description="Items per page")

    @property
    def offset(self) -> int:
        """Calculate offset for database query"""
        return (self.page - 1) * self.size


class PaginationMeta(BaseModel):
    """Pagination metadata for responses"""
    total: int
    page: int
    size: int
    pages: int
    has_next: bool
    has_prev: bool


def get_pagination_params(
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(DatabaseConfig.DEFAULT_PAGE_SIZE, ge=1, le=DatabaseConfig.MAX_PAGE_SIZE, description="Items per page")
) -> PaginationParams:
    """FastAPI dependency for pagination parameters"""
    return PaginationParams(page=page, size=size)


def calculate_pagination_metadata(total: int, pagination: PaginationParams) -> PaginationMeta:
    """Calculate pagination metadata from total count and pagination parameters"""
    pages = math.ceil(total / pagination.size) if total > 0 else 1

    return PaginationMeta(
        total=total,
        page=pagination.page,
        size=pagination.size,
        pages=pages,
        has_next=pagination.page < pages,
        has_prev=pagination.page > 1
    )


def apply_pagination(query: SQLQuery, pagination: PaginationParams) -> SQLQuery:
    """Apply pagination to a SQLAlchemy query"""
    return query.offset(pagination.offset).limit(pagination.size)


def apply_search(query: SQLQuery, search_term: Optional[str], search_fields: List[Any]) -> SQLQuery:
    """
    Apply case-insensitive search to specified fields.

    Blank search terms leave the query untouched.
    """
    search_term = search_term.strip() if search_term else None
    if not search_term or not search_fields:
        return query

    return query.filter(or_(*[field.ilike(f"%{search_term}%") for field in search_fields]))


def create_paginated_response(
    items: List[T],
    total: int,
    pagination: PaginationParams
) -> PaginatedResponse[T]:
    """
    Create a paginated response from items and pagination info.

    Args:
        items: List of items for current page
        total: Total number of items across all pages
        pagination: Pagination parameters

    Returns:
        PaginatedResponse with items and metadata
    """
    metadata = calculate_pagination_metadata(total, pagination)

    return PaginatedResponse(
        items=items,
        total=metadata.total,
        page=metadata.page,
        size=metadata.size,
        pages=metadata.pages,
        has_next=metadata.has_next,
        has_prev=metadata.has_prev
    )

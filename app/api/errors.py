"""Shared error responses for the editor endpoints."""

import logging
from typing import Any

from fastapi import HTTPException, status
from pydantic import BaseModel, Field

from src.scenario_store import BranchNameError, BranchNotFoundError, ValidationError

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Something went wrong"


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str = Field(description="Error type")
    message: str = Field(description="Error message")
    detail: Any = Field(default=None, description="Additional error details")


def validation_failed(exc: ValidationError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail={
            "error": "validation_error",
            "message": str(exc),
            "detail": [issue.model_dump() for issue in exc.issues],
        },
    )


def branch_not_found(exc: BranchNotFoundError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"error": "branch_not_found", "message": str(exc)},
    )


def branch_conflict(exc: BranchNameError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={"error": "branch_conflict", "message": str(exc)},
    )


def internal_error(operation: str) -> HTTPException:
    """Generic failure notice; the cause is logged, never returned."""
    logger.exception("Operation failed | operation=%s", operation)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": "internal_error", "message": GENERIC_FAILURE_MESSAGE},
    )


ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    404: {"model": ErrorResponse, "description": "Branch not found"},
    409: {"model": ErrorResponse, "description": "Branch name conflict"},
    422: {"model": ErrorResponse, "description": "Validation error"},
    500: {"model": ErrorResponse, "description": "Operation failed; reload required"},
}


def reload_required(exc: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={"error": "reload_required", "message": str(exc)},
    )

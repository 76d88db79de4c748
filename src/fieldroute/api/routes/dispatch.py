"""Dispatch optimization endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from ...schemas.dispatch import DispatchRequest, DispatchResponse, ErrorResponse
from ...services.dispatch.service import MissingProviderError, optimize_day

router = APIRouter(prefix="/dispatch", tags=["dispatch"])


@router.post(
    "/optimize-all",
    response_model=DispatchResponse,
    status_code=status.HTTP_200_OK,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
def optimize_all(payload: DispatchRequest):
    """Assign open jobs and re-sequence every worker's route for one day."""
    try:
        return optimize_day(payload)
    except MissingProviderError as exc:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})
    except Exception as exc:
        logging.exception(f"Error optimizing dispatch routes: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to optimize routes"},
        )

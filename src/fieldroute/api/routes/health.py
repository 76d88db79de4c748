"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_supabase_client():
    """Lazy import to avoid startup failures."""
    from ...db.supabase import get_supabase_client
    return get_supabase_client()


@router.get("/health/database", status_code=status.HTTP_200_OK)
def health_database() -> dict:
    """Check that Supabase is configured and answers a trivial query."""
    try:
        client = _get_supabase_client()
        if client is None:
            return {"service": "supabase", "configured": False, "healthy": False}
        client.table("providers").select("id").limit(1).execute()
        return {"service": "supabase", "configured": True, "healthy": True}
    except Exception as e:
        return {"service": "supabase", "configured": True, "healthy": False, "error": str(e)}

"""Health check endpoints."""

import asyncio
from typing import Annotated, Any

from fastapi import APIRouter, Depends, status

from galant.db.session import engine
from galant.dependencies import get_session_registry
from galant.overlay.session import SessionRegistry

router = APIRouter()


async def check_database() -> dict[str, Any]:
    """Check database connectivity."""
    try:
        from sqlalchemy import text
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        return {"status": "healthy", "message": "Database connection successful"}
    except Exception as e:
        return {"status": "unhealthy", "message": str(e)}


async def check_render_engine() -> dict[str, Any]:
    """Check that a Verovio toolkit can be created."""
    try:
        import verovio

        toolkit = await asyncio.to_thread(verovio.toolkit)
        return {"status": "healthy", "message": f"Verovio {toolkit.getVersion()}"}
    except Exception as e:
        return {"status": "unhealthy", "message": str(e)}


@router.get("", status_code=status.HTTP_200_OK)
async def health_check() -> dict[str, str]:
    """Simple health check endpoint."""
    return {"status": "healthy"}


@router.get("/detailed", status_code=status.HTTP_200_OK)
async def detailed_health_check(
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> dict[str, Any]:
    """Detailed health check with component status."""
    db_status, engine_status = await asyncio.gather(
        check_database(),
        check_render_engine(),
    )

    all_healthy = all(
        [
            db_status["status"] == "healthy",
            engine_status["status"] == "healthy",
        ]
    )

    return {
        "status": "healthy" if all_healthy else "degraded",
        "components": {
            "database": db_status,
            "render_engine": engine_status,
            "sessions": {"status": "healthy", "open": len(registry), "limit": registry.max_sessions},
        },
    }

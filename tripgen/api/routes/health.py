"""Liveness and readiness endpoints.

- /health: the process is up
- /healthz: the trip store answers a trivial query (503 otherwise)
"""

from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from tripgen.db.engine import get_async_engine

router = APIRouter()


async def check_db() -> tuple[bool, str]:
    """Run SELECT 1 against the trip store.

    Returns:
        (reachable, "ok" or the error class name)
    """
    try:
        async with get_async_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        return (False, f"error: {type(e).__name__}")
    return (True, "ok")


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz() -> dict[str, Any] | JSONResponse:
    """Readiness check with per-component status.

    Returns:
        200 with {"status": "ok", "components": {...}} when the store is reachable,
        503 with status "degraded" otherwise
    """
    db_ok, db_status = await check_db()
    body = {"status": "ok" if db_ok else "degraded", "components": {"db": db_status}}

    if not db_ok:
        return JSONResponse(status_code=503, content=body)
    return body

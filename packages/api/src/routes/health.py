# This project was developed with assistance from AI tools.
"""Liveness and database health endpoint."""

from db import DatabaseService, get_db_service
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

router = APIRouter()


@router.get("/")
async def health(db_service: DatabaseService = Depends(get_db_service)) -> JSONResponse:
    """Report service status; 503 when the database is unreachable."""
    database_ok = await db_service.health_check()
    body = {
        "status": "healthy" if database_ok else "degraded",
        "database": "ok" if database_ok else "unavailable",
    }
    return JSONResponse(status_code=200 if database_ok else 503, content=body)

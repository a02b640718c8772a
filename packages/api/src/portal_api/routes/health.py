# This project was developed with assistance from AI tools.
"""Liveness and database health."""

from fastapi import APIRouter, Depends
from portal_db import DatabaseService, get_db_service

router = APIRouter()


@router.get("/")
async def health(db_service: DatabaseService = Depends(get_db_service)) -> dict:
    database = await db_service.health_check()
    return {
        "status": "healthy" if database["status"] == "healthy" else "degraded",
        "database": database,
    }

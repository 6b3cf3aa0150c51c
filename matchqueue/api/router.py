"""
Router registration for the matchmaking API.
"""
from fastapi import FastAPI

from matchqueue.api import matchmaking


def include_routers(app: FastAPI) -> None:
    """Include all API routers with the FastAPI application."""
    app.include_router(matchmaking.router, prefix="/api/v1", tags=["matchmaking"])

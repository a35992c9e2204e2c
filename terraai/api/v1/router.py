# terraai/api/v1/router.py
from fastapi import APIRouter
from .endpoints import health, agricultural_data

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(agricultural_data.router, prefix="/agricultural-data", tags=["agricultural-data"])

# terraai/api/v1/endpoints/agricultural_data.py
from fastapi import APIRouter, HTTPException, Query
from datetime import datetime

from terraai.agents.base import agent_registry
from terraai.agents.fusion.agent import AgriculturalDataAgent
from terraai.agents.fusion.models import EnhancedDataRequest
from terraai.agents.imagery.datasets import datasets_by_priority
from terraai.core.exceptions import InvalidRequestError
from terraai.core.geo import validate_coordinates

router = APIRouter()


def _get_agent() -> AgriculturalDataAgent:
    agent = agent_registry.get("agricultural_data")
    if not agent:
        raise HTTPException(status_code=500, detail="Agricultural data agent not available")
    return agent


@router.post("/")
async def analyze_agricultural_data(request: EnhancedDataRequest):
    """
    Run one analysis for a farm location

    analysis_type selects the comprehensive fused reading, the
    high-resolution field analysis, crop-specific insights or decision support.
    """
    agent = _get_agent()
    try:
        return await agent.analyze(request)
    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to fetch agricultural data: {str(e)}")


@router.get("/")
async def get_agricultural_data(
    lat: float = Query(..., description="Latitude of the farm"),
    lon: float = Query(..., description="Longitude of the farm")
):
    """Comprehensive fused reading for a farm location"""
    agent = _get_agent()
    try:
        reading = await agent.fetch_enhanced_agricultural_data(lon, lat)
        return {
            "success": True,
            "data": reading.model_dump(mode="json"),
            "timestamp": datetime.now().isoformat()
        }
    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to fetch agricultural data: {str(e)}")


@router.get("/datasets")
async def list_datasets(
    max_priority: int = Query(3, ge=1, le=3, description="Highest dataset priority to include")
):
    """Planetary Computer datasets used for farm analysis"""
    datasets = datasets_by_priority(max_priority)
    return {
        "success": True,
        "count": len(datasets),
        "datasets": [d.model_dump() for d in datasets]
    }


@router.get("/search")
async def search_datasets(
    lat: float = Query(..., description="Latitude of the farm"),
    lon: float = Query(..., description="Longitude of the farm"),
    buffer_km: float = Query(5.0, gt=0, le=50, description="Search radius in kilometres")
):
    """Catalogue search across the priority collections around a farm"""
    agent = _get_agent()
    try:
        location = validate_coordinates(lon, lat)
        summary = await agent.imagery.search_agricultural_data(location.longitude, location.latitude, buffer_km)
        return {
            "success": True,
            "data": summary.model_dump(mode="json")
        }
    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/cache")
async def clear_cache():
    """Drop every cached provider response"""
    agent = _get_agent()
    cleared = await agent.cache.clear() if agent.cache is not None else 0
    return {
        "success": True,
        "cleared": cleared,
        "message": "Cache cleared"
    }


@router.get("/health")
async def agricultural_data_health():
    """Agent health check"""
    agent = _get_agent()
    return await agent.health_check()

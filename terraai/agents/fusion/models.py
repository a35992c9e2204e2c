# terraai/agents/fusion/models.py
"""
Pydantic models for the agricultural data fusion agent
"""
from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Literal

from terraai.agents.imagery.models import HighResReading
from terraai.agents.satellite.models import SatelliteReading
from terraai.core.geo import Location

AnalysisType = Literal["comprehensive", "high-resolution", "crop-specific", "decision-support"]


class EnhancedDataRequest(BaseModel):
    longitude: float = Field(..., description="Longitude of the farm")
    latitude: float = Field(..., description="Latitude of the farm")
    analysis_type: AnalysisType = Field("comprehensive", description="Which analysis to run")
    crop_type: Optional[str] = Field(None, description="Crop grown on the farm (crop-specific analysis)")
    current_actions: List[str] = Field(default_factory=list, description="Actions already underway (decision support)")


class SourceWeights(BaseModel):
    satellite: float = Field(..., ge=0.0, le=1.0)
    high_res: float = Field(..., ge=0.0, le=1.0)


class FusedReading(BaseModel):
    combined_ndvi: float
    confidence_level: float = Field(..., ge=0.0, le=1.0)
    weights: SourceWeights
    weight_policy: str
    recommendations: List[str] = Field(default_factory=list)


class ReadingMetadata(BaseModel):
    timestamp: str
    spatial_resolution: str
    update_frequency: str
    temporal_coverage: str
    degraded: bool = False
    sources: List[str] = Field(default_factory=list)


class AgriculturalReading(BaseModel):
    location: Location
    satellite: SatelliteReading
    high_res: HighResReading
    fusion: FusedReading
    metadata: ReadingMetadata


# ---------- Advisory analyses ----------

class CropHealthZones(BaseModel):
    healthy: Literal["High", "Moderate", "Low"]
    stressed_areas: Literal["Detected", "None"]
    recommendation: str


class HighResCropAnalysis(BaseModel):
    field_level_ndvi: float
    resolution: str
    cloud_cover: float
    crop_health_zones: CropHealthZones
    precision_recommendations: List[str]
    data_source: str
    simulated: bool = False


class OptimalConditions(BaseModel):
    ndvi: List[float]
    temperature: List[float]
    moisture: List[float]


class ConditionMatch(BaseModel):
    ndvi_match: bool
    temperature_match: bool
    moisture_match: bool
    overall_score: float = Field(..., ge=0.0, le=1.0)


class YieldPrediction(BaseModel):
    predicted: int
    unit: str = "bushels/acre"
    confidence: float


class CropInsights(BaseModel):
    crop_type: str
    optimal_conditions: OptimalConditions
    current_match: ConditionMatch
    growth_stage: Literal["seedling", "vegetative", "flowering", "maturity"]
    action_priority: List[str]
    yield_prediction: YieldPrediction


class RiskAssessment(BaseModel):
    drought: Literal["High", "Low"]
    heat_stress: Literal["High", "Low"]
    crop_health: Literal["At Risk", "Healthy"]
    overall: Literal["Low", "Moderate", "High"]


class DecisionSupport(BaseModel):
    immediate_actions: List[str]
    weekly_plan: Dict[str, str]
    risk_assessment: RiskAssessment
    optimization_tips: List[str]
    data_confidence: float
    last_updated: str

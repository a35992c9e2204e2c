# terraai/agents/fusion/__init__.py
"""
Agricultural data fusion agent package
"""

from .agent import AgriculturalDataAgent
from .models import AgriculturalReading, EnhancedDataRequest, FusedReading
from .service import FusionService

__all__ = ["AgriculturalDataAgent", "AgriculturalReading", "EnhancedDataRequest", "FusedReading", "FusionService"]

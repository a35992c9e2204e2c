# terraai/agents/satellite/__init__.py
"""
Satellite data provider package
"""

from .models import SatelliteReading, SatelliteTrends
from .service import SatelliteDataService

__all__ = ["SatelliteDataService", "SatelliteReading", "SatelliteTrends"]

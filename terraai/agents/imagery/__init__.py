# terraai/agents/imagery/__init__.py
"""
High-resolution imagery provider package
"""

from .datasets import PLANETARY_COMPUTER_DATASETS, ProviderDatasetDescriptor
from .models import HighResReading
from .service import PlanetaryComputerService

__all__ = [
    "PlanetaryComputerService",
    "HighResReading",
    "ProviderDatasetDescriptor",
    "PLANETARY_COMPUTER_DATASETS",
]

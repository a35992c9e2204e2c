# terraai/core/simulation.py
"""
Seeded random generators for simulated provider readings.

Simulated values only keep the game running when a provider is down. They
are seeded from the coordinates so the same farm gets the same numbers
between requests and in tests; the seed has no security meaning.
"""
from typing import Callable

import numpy as np

RngFactory = Callable[[float, float], np.random.Generator]


def coordinate_rng(longitude: float, latitude: float, salt: int = 0) -> np.random.Generator:
    """Generator seeded from coordinates rounded to 3 decimals (~100 m)."""
    lon_key = int(round((longitude + 180.0) * 1000))
    lat_key = int(round((latitude + 90.0) * 1000))
    return np.random.default_rng([abs(int(salt)), lon_key, lat_key])


def salted_rng_factory(salt: int) -> RngFactory:
    def factory(longitude: float, latitude: float) -> np.random.Generator:
        return coordinate_rng(longitude, latitude, salt)
    return factory


def uniform(rng: np.random.Generator, low: float, high: float) -> float:
    return float(rng.uniform(low, high))

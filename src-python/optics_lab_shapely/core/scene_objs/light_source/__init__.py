"""
Light sources

Original work Copyright 2024 The Ray Optics Simulation authors and contributors
Python translation Copyright 2026 ray-tracing-shapely authors and contributors
Licensed under the Apache License, Version 2.0
"""

from .base_light_source import BaseLightSource, POLARIZATION_TYPES
from .laser_source import LaserSource
from .beam import Beam

__all__ = ['BaseLightSource', 'POLARIZATION_TYPES', 'LaserSource', 'Beam']

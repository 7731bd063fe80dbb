"""
Other scene objects (detectors)

Original work Copyright 2024 The Ray Optics Simulation authors and contributors
Python translation Copyright 2026 ray-tracing-shapely authors and contributors
Licensed under the Apache License, Version 2.0
"""

from .screen import Screen
from .photodiode import Photodiode

__all__ = ['Screen', 'Photodiode']

"""
Special components (acousto-optic modulator, fiber coupler)

Original work Copyright 2024 The Ray Optics Simulation authors and contributors
Python translation Copyright 2026 ray-tracing-shapely authors and contributors
Licensed under the Apache License, Version 2.0
"""

from .acousto_optic_modulator import AcoustoOpticModulator
from .fiber_coupler import FiberCoupler

__all__ = ['AcoustoOpticModulator', 'FiberCoupler']

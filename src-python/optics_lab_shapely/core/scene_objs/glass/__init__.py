"""
Refracting components (lenses, blocks, prisms)

Original work Copyright 2024 The Ray Optics Simulation authors and contributors
Python translation Copyright 2026 ray-tracing-shapely authors and contributors
Licensed under the Apache License, Version 2.0
"""

from .thin_lens import ThinLens
from .dielectric_block import DielectricBlock
from .prism import Prism

__all__ = ['ThinLens', 'DielectricBlock', 'Prism']

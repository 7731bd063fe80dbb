"""
Original work Copyright 2024 The Ray Optics Simulation authors and contributors
Python translation Copyright 2026 ray-tracing-shapely authors and contributors

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.

Optics Lab Shapely
==================

A 2D optical bench: ray tracing through mirrors, lenses, prisms, gratings,
polarization optics, modulators and fiber couplers, with coherent detectors.
Shapely supplies the component footprints.

Main modules:
- core: Simulation engine (Scene, Simulator, Ray, optics math, polarization)
- core.scene_objs: Optical components, light sources and detectors
- examples: Example simulations and demonstrations

Quick start:
    from optics_lab_shapely.core.scene import Scene
    from optics_lab_shapely.core.scene_objs import LaserSource, Mirror
    from optics_lab_shapely.core.simulator import Simulator
"""

__version__ = "0.1.0"

# Convenience imports for common usage
from .core.scene import Scene
from .core.simulator import Simulator
from .core.ray import Ray
from .core.scene_objs import create_scene_obj

__all__ = [
    'Scene',
    'Simulator',
    'Ray',
    'create_scene_obj',
    '__version__',
]

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
"""

from typing import Any, Dict

from .base_scene_obj import BaseSceneObj, Intersection, DirtyState
from .line_obj_mixin import LineObjMixin
from .polygon_obj_mixin import PolygonObjMixin
from .base_glass import BaseGlass
from .mirror import Mirror, SphericalMirror, ParabolicMirror
from .glass import ThinLens, DielectricBlock, Prism
from .blocker import Aperture, DiffractionGrating
from .polarizer import (
    Polarizer, HalfWavePlate, QuarterWavePlate, BeamSplitter,
    FaradayRotator, FaradayIsolator,
)
from .special import AcoustoOpticModulator, FiberCoupler
from .other import Screen, Photodiode
from .light_source import LaserSource, Beam

SCENE_OBJ_TYPES = {
    cls.type: cls for cls in (
        Mirror, SphericalMirror, ParabolicMirror,
        ThinLens, DielectricBlock, Prism,
        Aperture, DiffractionGrating,
        Polarizer, HalfWavePlate, QuarterWavePlate, BeamSplitter,
        FaradayRotator, FaradayIsolator,
        AcoustoOpticModulator, FiberCoupler,
        Screen, Photodiode,
        LaserSource, Beam,
    )
}
"""Component classes keyed by their serialized `type` tag."""


def create_scene_obj(scene, json_obj: Dict[str, Any]) -> BaseSceneObj:
    """
    Reconstruct a component from its serialized configuration.

    Args:
        scene: The scene the object belongs to.
        json_obj: A dictionary produced by `serialize()` (must contain 'type').

    Returns:
        A new component of the tagged type.

    Raises:
        ValueError: If the type tag is missing or unknown.
    """
    type_name = json_obj.get('type')
    if type_name not in SCENE_OBJ_TYPES:
        raise ValueError(
            f"Unknown object type '{type_name}'. Valid options: {tuple(SCENE_OBJ_TYPES)}"
        )
    return SCENE_OBJ_TYPES[type_name](scene, json_obj)


__all__ = [
    'BaseSceneObj', 'Intersection', 'DirtyState', 'LineObjMixin', 'PolygonObjMixin', 'BaseGlass',
    'Mirror', 'SphericalMirror', 'ParabolicMirror',
    'ThinLens', 'DielectricBlock', 'Prism',
    'Aperture', 'DiffractionGrating',
    'Polarizer', 'HalfWavePlate', 'QuarterWavePlate', 'BeamSplitter',
    'FaradayRotator', 'FaradayIsolator',
    'AcoustoOpticModulator', 'FiberCoupler',
    'Screen', 'Photodiode',
    'LaserSource', 'Beam',
    'SCENE_OBJ_TYPES', 'create_scene_obj',
]

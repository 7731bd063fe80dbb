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

import math
from typing import Any, List, TYPE_CHECKING

if __name__ == "__main__":
    from optics_lab_shapely.core.scene_objs.base_scene_obj import BaseSceneObj, Intersection
    from optics_lab_shapely.core.scene_objs.line_obj_mixin import LineObjMixin
    from optics_lab_shapely.core.constants import DEFAULT_REFLECTIVITY
    from optics_lab_shapely.core import optics_math
else:
    from ..base_scene_obj import BaseSceneObj, Intersection
    from ..line_obj_mixin import LineObjMixin
    from ...constants import DEFAULT_REFLECTIVITY
    from ... import optics_math

if TYPE_CHECKING:
    from ...ray import Ray


class ReflectorMixin:
    """
    Shared reflection physics for every mirror shape.

    The reflected ray keeps the polarization, gains a phase of pi and carries
    `reflectivity` times the incident intensity (the full intensity when the
    ray ignores decay).
    """

    def reflect_ray(self, ray: 'Ray', hit: Intersection, verbose: int = 0) -> List['Ray']:
        if not (hit.point.is_finite() and hit.normal.is_finite()):
            ray.terminate('invalid_geom_interact_mirror')
            return []
        reflected_dir = optics_math.reflect(ray.direction, hit.normal)
        intensity = ray.intensity if ray.ignore_decay else ray.intensity * self.reflectivity
        child = ray.spawn(hit.point, reflected_dir, intensity, 'reflect', phase_shift=math.pi)

        if verbose >= 2:
            print(f"  {self.get_display_name()}: reflect at ({hit.point.x:.3f}, {hit.point.y:.3f}) "
                  f"-> dir=({reflected_dir.x:.4f}, {reflected_dir.y:.4f}), I={intensity:.5g}")

        ray.terminate('reflected')
        return self.keep_children(ray, [child])

    def _validate_property(self, name: str, value: Any) -> Any:
        value = super()._validate_property(name, value)
        if name == 'reflectivity':
            self._require_fraction(name, value)
        return value


class Mirror(ReflectorMixin, LineObjMixin, BaseSceneObj):
    """
    Flat mirror: a line segment reflecting by r = d - 2 (d.n) n.

    Attributes:
        pos (dict): Centre of the mirror {'x': float, 'y': float}
        angle (float): Orientation of the segment in degrees
        length (float): Length of the mirror
        reflectivity (float): Fraction of the intensity reflected (default 0.99)
    """

    type = 'Mirror'
    serializable_defaults = {
        'pos': {'x': 0, 'y': 0},
        'angle': 0,
        'length': 100,
        'reflectivity': DEFAULT_REFLECTIVITY,
    }
    geometry_properties = frozenset({'pos', 'angle', 'length'})

    def _validate_property(self, name: str, value: Any) -> Any:
        value = super()._validate_property(name, value)
        if name == 'length':
            self._require_non_negative(name, value)
        return value

    def interact(self, ray: 'Ray', hit: Intersection, verbose: int = 0) -> List['Ray']:
        return self.reflect_ray(ray, hit, verbose)

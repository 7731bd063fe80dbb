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
    from optics_lab_shapely.core.scene_objs.polygon_obj_mixin import PolygonObjMixin
    from optics_lab_shapely.core.constants import N_AIR, DEFAULT_MEDIUM_INDEX
else:
    from ..base_scene_obj import BaseSceneObj, Intersection
    from ..polygon_obj_mixin import PolygonObjMixin
    from ...constants import N_AIR, DEFAULT_MEDIUM_INDEX

if TYPE_CHECKING:
    from ...geometry import Point
    from ...ray import Ray


class FaradayRotator(PolygonObjMixin, BaseSceneObj):
    """
    Magneto-optic rotator.

    Rays cross the faces undeviated. On the way out the polarization is
    rotated by +rotation_angle whatever the propagation direction, so a
    double pass accumulates twice the rotation instead of cancelling
    (non-reciprocal).

    Attributes:
        pos (dict): Centre of the crystal {'x': float, 'y': float}
        angle (float): Rotation of the body in degrees
        width (float): Length along the rotated x axis
        height (float): Height along the rotated y axis
        rotation_angle (float): Faraday rotation in degrees
    """

    type = 'FaradayRotator'
    serializable_defaults = {
        'pos': {'x': 0, 'y': 0},
        'angle': 0,
        'width': 40,
        'height': 25,
        'rotation_angle': 45,
    }
    geometry_properties = frozenset({'pos', 'angle', 'width', 'height'})

    def _validate_property(self, name: str, value: Any) -> Any:
        value = super()._validate_property(name, value)
        if name in ('width', 'height'):
            self._require_positive(name, value)
        return value

    def local_vertices(self) -> List['Point']:
        return self.rectangle_vertices(self.width, self.height)

    def interact(self, ray: 'Ray', hit: Intersection, verbose: int = 0) -> List['Ray']:
        if hit.extra.get('entering'):
            child = ray.spawn(hit.point, ray.direction, ray.intensity, 'transmit',
                              medium_index=DEFAULT_MEDIUM_INDEX)
        else:
            theta = math.radians(self.rotation_angle)
            polarization = ray.polarization.rotated(theta)
            if verbose >= 2:
                print(f"  {self.get_display_name()}: {ray.polarization!r} -> {polarization!r}")
            child = ray.spawn(hit.point, ray.direction, ray.intensity, 'transmit',
                              medium_index=N_AIR, polarization=polarization)
        ray.terminate('pass_rotator_surface')
        return self.keep_children(ray, [child])

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
    from optics_lab_shapely.core.geometry import Point
    from optics_lab_shapely.core.polarization import PolarizationState
    from optics_lab_shapely.core.constants import N_AIR, DEFAULT_MEDIUM_INDEX, GEOMETRY_EPSILON
    from optics_lab_shapely.core import optics_math
else:
    from ..base_scene_obj import BaseSceneObj, Intersection
    from ..polygon_obj_mixin import PolygonObjMixin
    from ...geometry import Point
    from ...polarization import PolarizationState
    from ...constants import N_AIR, DEFAULT_MEDIUM_INDEX, GEOMETRY_EPSILON
    from ... import optics_math

if TYPE_CHECKING:
    from ...ray import Ray

# Rotation of the internal Faraday element
ISOLATOR_ROTATION = math.pi / 4


class FaradayIsolator(PolygonObjMixin, BaseSceneObj):
    """
    Optical diode: input polarizer, 45 degree Faraday rotator, output polarizer.

    The forward direction is `angle`. Forward light is polarized along the
    input axis (the body angle) on entry and rotated by +45 degrees, so it
    leaves through the output polarizer at +45 degrees unattenuated.
    Backward light is polarized at +45 degrees on entry, rotated by a further
    +45 degrees on the way out and extinguished by the input polarizer
    ('blocked_isolator').

    Attributes:
        pos (dict): Centre of the isolator {'x': float, 'y': float}
        angle (float): Forward direction in degrees
        width (float): Length along the forward direction
        height (float): Height across it
    """

    type = 'FaradayIsolator'
    serializable_defaults = {
        'pos': {'x': 0, 'y': 0},
        'angle': 0,
        'width': 80,
        'height': 30,
    }
    geometry_properties = frozenset({'pos', 'angle', 'width', 'height'})

    def _validate_property(self, name: str, value: Any) -> Any:
        value = super()._validate_property(name, value)
        if name in ('width', 'height'):
            self._require_positive(name, value)
        return value

    def local_vertices(self) -> List[Point]:
        return self.rectangle_vertices(self.width, self.height)

    @property
    def forward_direction(self) -> Point:
        return Point.from_angle(self.angle_rad)

    def _propagate(self, polarization: PolarizationState, entering: bool, forward: bool):
        """
        Jones bookkeeping for one face crossing.

        Returns:
            (outgoing polarization, transmitted power fraction)
        """
        input_axis = self.angle_rad
        output_axis = input_axis + ISOLATOR_ROTATION

        if entering:
            axis = input_axis if forward else output_axis
            if polarization.is_polarized:
                state, fraction = polarization.transformed(optics_math.linear_polarizer_matrix(axis))
            else:
                state, fraction = PolarizationState.linear(axis), 0.5
            if forward:
                state = state.rotated(ISOLATOR_ROTATION)
            return state, fraction

        if not polarization.is_polarized:
            return polarization.copy(), 1.0
        if forward:
            return polarization.transformed(optics_math.linear_polarizer_matrix(output_axis))
        return polarization.rotated(ISOLATOR_ROTATION).transformed(optics_math.linear_polarizer_matrix(input_axis))

    def interact(self, ray: 'Ray', hit: Intersection, verbose: int = 0) -> List['Ray']:
        entering = bool(hit.extra.get('entering'))
        forward = ray.direction.dot(self.forward_direction) > 0
        polarization, fraction = self._propagate(ray.polarization, entering, forward)
        intensity = ray.intensity * fraction

        if verbose >= 2:
            print(f"  {self.get_display_name()}: entering={entering}, forward={forward}, "
                  f"fraction={fraction:.5f}")

        floor = GEOMETRY_EPSILON if ray.ignore_decay else self.min_intensity()
        if fraction < GEOMETRY_EPSILON:
            ray.terminate('blocked_isolator')
            return []
        if intensity < floor:
            ray.terminate('low_intensity')
            return []

        child = ray.spawn(
            hit.point, ray.direction, intensity, 'transmit',
            medium_index=DEFAULT_MEDIUM_INDEX if entering else N_AIR,
            polarization=polarization
        )
        ray.terminate('pass_isolator_surface')
        return self.keep_children(ray, [child])

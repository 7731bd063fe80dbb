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
    from optics_lab_shapely.core.polarization import PolarizationState
    from optics_lab_shapely.core.constants import GEOMETRY_EPSILON
    from optics_lab_shapely.core import optics_math
else:
    from ..base_scene_obj import BaseSceneObj, Intersection
    from ..line_obj_mixin import LineObjMixin
    from ...polarization import PolarizationState
    from ...constants import GEOMETRY_EPSILON
    from ... import optics_math

if TYPE_CHECKING:
    from ...ray import Ray


class Polarizer(LineObjMixin, BaseSceneObj):
    """
    Ideal linear polarizer.

    Polarized light is projected onto the transmission axis (Malus's law
    follows from the Jones projector). Natural light leaves with half its
    intensity, linearly polarized along the axis.

    Attributes:
        pos (dict): Centre of the polarizer {'x': float, 'y': float}
        angle (float): Orientation of the element in degrees (90 = vertical)
        length (float): Length of the element
        transmission_axis (float): Transmission axis in degrees, in the scene frame
    """

    type = 'Polarizer'
    serializable_defaults = {
        'pos': {'x': 0, 'y': 0},
        'angle': 90,
        'length': 100,
        'transmission_axis': 0,
    }
    geometry_properties = frozenset({'pos', 'angle', 'length'})

    def _validate_property(self, name: str, value: Any) -> Any:
        value = super()._validate_property(name, value)
        if name == 'length':
            self._require_non_negative(name, value)
        return value

    @property
    def axis_rad(self) -> float:
        return math.radians(self.transmission_axis)

    def interact(self, ray: 'Ray', hit: Intersection, verbose: int = 0) -> List['Ray']:
        axis = self.axis_rad
        if ray.polarization.is_polarized:
            polarization, fraction = ray.polarization.transformed(optics_math.linear_polarizer_matrix(axis))
        else:
            polarization, fraction = PolarizationState.linear(axis), 0.5

        if verbose >= 2:
            print(f"  {self.get_display_name()}: axis={self.transmission_axis:.2f} deg, "
                  f"transmitted fraction={fraction:.5f}")

        ray.terminate('polarized')
        if fraction < GEOMETRY_EPSILON:
            return []
        child = ray.spawn(
            hit.point, ray.direction, ray.intensity * fraction, 'transmit',
            polarization=polarization
        )
        return self.keep_children(ray, [child])

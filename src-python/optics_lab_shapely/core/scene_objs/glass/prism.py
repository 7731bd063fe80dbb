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
from typing import Any, List

if __name__ == "__main__":
    from optics_lab_shapely.core.scene_objs.base_glass import BaseGlass
    from optics_lab_shapely.core.scene_objs.polygon_obj_mixin import PolygonObjMixin
    from optics_lab_shapely.core.geometry import Point
    from optics_lab_shapely.core.constants import DEFAULT_DISPERSION_B, DEFAULT_MEDIUM_INDEX
else:
    from ..base_glass import BaseGlass
    from ..polygon_obj_mixin import PolygonObjMixin
    from ...geometry import Point
    from ...constants import DEFAULT_DISPERSION_B, DEFAULT_MEDIUM_INDEX


class Prism(PolygonObjMixin, BaseGlass):
    """
    Isosceles triangular prism.

    In the component frame the apex sits at (0, -h/2) and the base runs from
    (-b/2, h/2) to (b/2, h/2), with h = (b/2) tan((180 - apex_angle) / 2).
    The surface physics is the same as the dielectric block; with dispersion
    enabled a white beam fans out into its colours.

    Attributes:
        pos (dict): Centroid of the bounding box {'x': float, 'y': float}
        angle (float): Rotation in degrees
        base_length (float): Length of the base b
        apex_angle (float): Apex angle in degrees, in (0, 180)
        base_refractive_index (float): Index at 550 nm
        dispersion_b (float): Cauchy B coefficient in nm^2
        absorption_coeff (float): Bulk absorption per pixel
    """

    type = 'Prism'
    serializable_defaults = {
        'pos': {'x': 0, 'y': 0},
        'angle': 0,
        'base_length': 100,
        'apex_angle': 60,
        'base_refractive_index': DEFAULT_MEDIUM_INDEX,
        'dispersion_b': DEFAULT_DISPERSION_B,
        'absorption_coeff': 0.0,
    }
    geometry_properties = frozenset({'pos', 'angle', 'base_length', 'apex_angle'})

    def _validate_property(self, name: str, value: Any) -> Any:
        value = super()._validate_property(name, value)
        if name == 'base_length':
            self._require_positive(name, value)
        elif name == 'apex_angle' and not 0 < value < 180:
            raise ValueError(f"Property '{name}' must be in (0, 180) degrees, got {value}")
        return value

    @property
    def height(self) -> float:
        """Distance from the apex to the base."""
        return (self.base_length / 2.0) * math.tan((math.pi - math.radians(self.apex_angle)) / 2.0)

    def local_vertices(self) -> List[Point]:
        b = self.base_length
        h = self.height
        return [Point(0, -h / 2.0), Point(-b / 2.0, h / 2.0), Point(b / 2.0, h / 2.0)]

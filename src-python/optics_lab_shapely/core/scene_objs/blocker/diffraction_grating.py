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
from typing import Any, Dict, List, TYPE_CHECKING

if __name__ == "__main__":
    from optics_lab_shapely.core.scene_objs.base_scene_obj import BaseSceneObj, Intersection
    from optics_lab_shapely.core.scene_objs.line_obj_mixin import LineObjMixin
    from optics_lab_shapely.core.constants import PIXELS_PER_MICROMETER, MIN_RAY_SEGMENT_LENGTH
    from optics_lab_shapely.core import optics_math
else:
    from ..base_scene_obj import BaseSceneObj, Intersection
    from ..line_obj_mixin import LineObjMixin
    from ...constants import PIXELS_PER_MICROMETER, MIN_RAY_SEGMENT_LENGTH
    from ... import optics_math

if TYPE_CHECKING:
    from ...ray import Ray

# Diffraction efficiency per |order|; orders not listed carry nothing
DIFFRACTION_EFFICIENCIES: Dict[int, float] = {
    0: 0.60,
    1: 0.15,
    2: 0.05,
}


class DiffractionGrating(LineObjMixin, BaseSceneObj):
    """
    Transmission grating obeying d (sin(theta_m) - sin(theta_i)) = m lambda.

    One child is emitted per propagating order |m| <= max_order, with the
    intensity from DIFFRACTION_EFFICIENCIES. Angles are measured from the
    grating normal on the transmitted side, positive towards p2.

    Attributes:
        pos (dict): Centre of the grating {'x': float, 'y': float}
        angle (float): Orientation of the grating lines' row in degrees
        length (float): Length of the ruled area
        grating_period (float): Line spacing d in micrometres
        max_order (int): Highest diffraction order considered
    """

    type = 'DiffractionGrating'
    serializable_defaults = {
        'pos': {'x': 0, 'y': 0},
        'angle': 90,
        'length': 100,
        'grating_period': 1.0,
        'max_order': 2,
    }
    geometry_properties = frozenset({'pos', 'angle', 'length', 'grating_period'})

    def _validate_property(self, name: str, value: Any) -> Any:
        value = super()._validate_property(name, value)
        if name == 'max_order':
            if int(value) != value or value < 0:
                raise ValueError(f"Property '{name}' must be a non-negative integer, got {value}")
            value = int(value)
        elif name in ('length', 'grating_period'):
            self._require_non_negative(name, value)
        return value

    @property
    def grating_period_px(self) -> float:
        return self.grating_period * PIXELS_PER_MICROMETER

    def _update_geometry(self) -> None:
        LineObjMixin._update_geometry(self)
        if self.warning is None and self.grating_period_px < MIN_RAY_SEGMENT_LENGTH:
            self.warning = "DiffractionGrating has a zero period; light passes undiffracted"

    def efficiency(self, order: int) -> float:
        return DIFFRACTION_EFFICIENCIES.get(abs(order), 0.0)

    def interact(self, ray: 'Ray', hit: Intersection, verbose: int = 0) -> List['Ray']:
        direction = ray.direction
        period_px = self.grating_period_px
        if period_px < MIN_RAY_SEGMENT_LENGTH:
            child = ray.spawn(hit.point, direction, ray.intensity, 'transmit')
            ray.terminate('pass_grating_small_d')
            return self.keep_children(ray, [child])

        # Normal on the transmitted side and the in-plane grating direction
        forward = -hit.normal
        tangent = self.line_direction
        sin_i = direction.dot(tangent)

        children = []
        for order, sin_m in optics_math.grating_orders(sin_i, self.max_order, ray.wavelength_px, period_px):
            intensity = ray.intensity * self.efficiency(order)
            if intensity <= 0:
                continue
            cos_m = math.sqrt(max(0.0, 1.0 - sin_m * sin_m))
            diffracted = (forward * cos_m + tangent * sin_m).normalized()
            if diffracted.length_squared() < 0.5:
                continue
            child = ray.spawn(hit.point, diffracted, intensity, 'diffract')
            children.append(child)
            if verbose >= 2:
                print(f"  {self.get_display_name()}: order {order:+d}, "
                      f"theta={math.degrees(math.asin(sin_m)):.3f} deg, I={intensity:.5g}")

        ray.terminate('diffracted')
        return self.keep_children(ray, children)

    def get_display_name(self) -> str:
        if self._name:
            return self._name
        return f"Diffraction grating_{self._uuid[:8]}"

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

from typing import Any, List, Optional, TYPE_CHECKING

if __name__ == "__main__":
    from optics_lab_shapely.core.scene_objs.base_scene_obj import BaseSceneObj, Intersection
    from optics_lab_shapely.core.scene_objs.polygon_obj_mixin import PolygonObjMixin
    from optics_lab_shapely.core.constants import DEFAULT_WAVELENGTH_NM, GEOMETRY_EPSILON
    from optics_lab_shapely.core import optics_math
else:
    from ..base_scene_obj import BaseSceneObj, Intersection
    from ..polygon_obj_mixin import PolygonObjMixin
    from ...constants import DEFAULT_WAVELENGTH_NM, GEOMETRY_EPSILON
    from ... import optics_math

if TYPE_CHECKING:
    from ...geometry import Point
    from ...ray import Ray


class AcoustoOpticModulator(PolygonObjMixin, BaseSceneObj):
    """
    Bragg-regime acousto-optic modulator.

    A ray entering the crystal is split into the undeflected 0th order,
    carrying (1 - rf_power) of the intensity, and the +1st order, carrying
    rf_power and rotated by the Bragg angle lambda f / v. Rays leaving the
    crystal pass unchanged.

    Attributes:
        pos (dict): Centre of the crystal {'x': float, 'y': float}
        angle (float): Rotation of the body in degrees
        width (float): Length along the rotated x axis
        height (float): Height along the rotated y axis
        rf_frequency (float): Drive frequency in MHz
        rf_power (float): Diffraction efficiency into the +1st order, in [0, 1]
        acoustic_velocity (float): Sound velocity in the crystal in m/s
    """

    type = 'AcoustoOpticModulator'
    serializable_defaults = {
        'pos': {'x': 0, 'y': 0},
        'angle': 0,
        'width': 50,
        'height': 20,
        'rf_frequency': 80,
        'rf_power': 0.5,
        'acoustic_velocity': 4200,
    }
    geometry_properties = frozenset({'pos', 'angle', 'width', 'height'})

    def _validate_property(self, name: str, value: Any) -> Any:
        value = super()._validate_property(name, value)
        if name in ('width', 'height', 'acoustic_velocity'):
            self._require_positive(name, value)
        elif name == 'rf_frequency':
            self._require_non_negative(name, value)
        elif name == 'rf_power':
            self._require_fraction(name, value)
        return value

    def local_vertices(self) -> List['Point']:
        return self.rectangle_vertices(self.width, self.height)

    def get_bragg_angle(self, wavelength: Optional[float] = None) -> float:
        """Deflection of the +1st order in radians."""
        wl = DEFAULT_WAVELENGTH_NM if wavelength is None else wavelength
        return optics_math.bragg_angle(wl, self.rf_frequency, self.acoustic_velocity)

    def interact(self, ray: 'Ray', hit: Intersection, verbose: int = 0) -> List['Ray']:
        if not hit.extra.get('entering'):
            child = ray.spawn(hit.point, ray.direction, ray.intensity, 'transmit')
            ray.terminate('pass_aom_surface')
            return self.keep_children(ray, [child])

        theta = self.get_bragg_angle(ray.effective_wavelength)
        children = []
        zeroth = ray.intensity * (1.0 - self.rf_power)
        first = ray.intensity * self.rf_power
        if zeroth > GEOMETRY_EPSILON:
            children.append(ray.spawn(hit.point, ray.direction, zeroth, 'diffract'))
        if first > GEOMETRY_EPSILON and abs(theta) > GEOMETRY_EPSILON:
            children.append(ray.spawn(hit.point, ray.direction.rotated(theta), first, 'diffract'))

        if verbose >= 2:
            print(f"  {self.get_display_name()}: bragg angle={theta:.6f} rad, "
                  f"I0={zeroth:.5g}, I1={first:.5g}")

        ray.terminate('diffracted_aom')
        return self.keep_children(ray, children)

    def get_display_name(self) -> str:
        if self._name:
            return self._name
        return f"AOM_{self._uuid[:8]}"

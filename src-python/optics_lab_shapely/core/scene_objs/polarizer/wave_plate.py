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

import numpy as np

if __name__ == "__main__":
    from optics_lab_shapely.core.scene_objs.base_scene_obj import BaseSceneObj, Intersection
    from optics_lab_shapely.core.scene_objs.line_obj_mixin import LineObjMixin
    from optics_lab_shapely.core import optics_math
else:
    from ..base_scene_obj import BaseSceneObj, Intersection
    from ..line_obj_mixin import LineObjMixin
    from ... import optics_math

if TYPE_CHECKING:
    from ...ray import Ray


class BaseWavePlate(LineObjMixin, BaseSceneObj):
    """
    The base class for lossless retarders.

    Subclasses provide `retarder_matrix()`, the Jones matrix with the fast
    axis along x; it is applied in the plate frame as R(phi) M R(-phi).
    Natural light passes unchanged.

    Attributes:
        pos (dict): Centre of the plate {'x': float, 'y': float}
        angle (float): Orientation of the element in degrees (90 = vertical)
        length (float): Length of the element
        fast_axis (float): Fast axis in degrees, in the scene frame
    """

    serializable_defaults = {
        'pos': {'x': 0, 'y': 0},
        'angle': 90,
        'length': 80,
        'fast_axis': 0,
    }
    geometry_properties = frozenset({'pos', 'angle', 'length'})

    def _validate_property(self, name: str, value: Any) -> Any:
        value = super()._validate_property(name, value)
        if name == 'length':
            self._require_non_negative(name, value)
        return value

    def retarder_matrix(self) -> np.ndarray:
        raise NotImplementedError

    def get_jones_matrix(self) -> np.ndarray:
        """The plate's Jones matrix in the scene frame."""
        phi = math.radians(self.fast_axis)
        return optics_math.rotation_matrix(phi) @ self.retarder_matrix() @ optics_math.rotation_matrix(-phi)

    def interact(self, ray: 'Ray', hit: Intersection, verbose: int = 0) -> List['Ray']:
        if not ray.polarization.is_polarized:
            child = ray.spawn(hit.point, ray.direction, ray.intensity, 'transmit')
            ray.terminate('pass_unpolarized_waveplate')
            return self.keep_children(ray, [child])

        polarization, _ = ray.polarization.transformed(self.get_jones_matrix())
        if verbose >= 2:
            print(f"  {self.get_display_name()}: {ray.polarization!r} -> {polarization!r}")
        child = ray.spawn(hit.point, ray.direction, ray.intensity, 'transmit', polarization=polarization)
        ray.terminate('pass_waveplate')
        return self.keep_children(ray, [child])


class HalfWavePlate(BaseWavePlate):
    """Half-wave plate: reflects a linear polarization angle theta to 2 phi - theta."""

    type = 'HalfWavePlate'

    def retarder_matrix(self) -> np.ndarray:
        return optics_math.half_wave_matrix()


class QuarterWavePlate(BaseWavePlate):
    """Quarter-wave plate: linear light at 45 degrees to the fast axis becomes circular."""

    type = 'QuarterWavePlate'

    def retarder_matrix(self) -> np.ndarray:
        return optics_math.quarter_wave_matrix()

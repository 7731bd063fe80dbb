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
from typing import Any, List, Optional, TYPE_CHECKING

import numpy as np

if __name__ == "__main__":
    from optics_lab_shapely.core.scene_objs.base_scene_obj import BaseSceneObj, Intersection
    from optics_lab_shapely.core.scene_objs.line_obj_mixin import LineObjMixin
    from optics_lab_shapely.core.constants import DEFAULT_DISPERSION_B, DEFAULT_WAVELENGTH_NM, GEOMETRY_EPSILON
    from optics_lab_shapely.core import optics_math
else:
    from ..base_scene_obj import BaseSceneObj, Intersection
    from ..line_obj_mixin import LineObjMixin
    from ...constants import DEFAULT_DISPERSION_B, DEFAULT_WAVELENGTH_NM, GEOMETRY_EPSILON
    from ... import optics_math

if TYPE_CHECKING:
    from ...ray import Ray


class ThinLens(LineObjMixin, BaseSceneObj):
    """
    An ideal thin lens with chromatic focal length.

    The lens is a segment of length `diameter` centred on `pos` and running
    along `angle`; the optical axis is perpendicular to it. A ray crossing the
    lens at height h (measured along the lens from its centre) leaves with

        tan(theta_out) = tan(theta_in) - h / f_lambda

    where the angles are measured from the axis oriented along the ray's
    travel. This maps every ray of a parallel bundle through the same focal
    point and every ray from an object point through its image point, for
    either travel direction.

    The focal length depends on wavelength through the Cauchy index of the
    lens material: f_lambda = f * (n_550 - 1) / (n_lambda - 1).

    Attributes:
        pos (dict): Centre of the lens {'x': float, 'y': float}
        angle (float): Orientation of the lens plane in degrees (90 = vertical lens)
        diameter (float): Clear aperture
        focal_length (float): Focal length at 550 nm (positive converging,
            negative diverging, 0 or infinity for a flat plate)
        base_refractive_index (float): Material index at 550 nm
        dispersion_b (float): Cauchy B coefficient in nm^2
        quality (float): Transmitted fraction of the intensity
    """

    type = 'ThinLens'
    serializable_defaults = {
        'pos': {'x': 0, 'y': 0},
        'angle': 90,
        'diameter': 80,
        'focal_length': 150,
        'base_refractive_index': 1.5,
        'dispersion_b': DEFAULT_DISPERSION_B,
        'quality': 0.98,
    }
    geometry_properties = frozenset({'pos', 'angle', 'diameter'})

    def _infinite_allowed(self):
        return frozenset({'focal_length'})

    def _validate_property(self, name: str, value: Any) -> Any:
        value = super()._validate_property(name, value)
        if name == 'diameter':
            self._require_non_negative(name, value)
        elif name == 'quality':
            self._require_fraction(name, value)
        elif name == 'base_refractive_index' and value < 1.0:
            raise ValueError(f"Property '{name}' must be at least 1, got {value}")
        elif name == 'dispersion_b':
            self._require_non_negative(name, value)
        return value

    def segment_length(self) -> float:
        return self.diameter

    @property
    def is_flat(self) -> bool:
        return self.focal_length == 0 or math.isinf(self.focal_length)

    @property
    def axis_direction(self) -> 'Point':
        """Unit vector along the optical axis (lens direction rotated by +90 degrees)."""
        return self.normal

    def get_focal_length(self, wavelength: Optional[float] = None) -> float:
        """
        Focal length at a wavelength.

        Args:
            wavelength: Wavelength in nm (None uses 550 nm).

        Returns:
            The chromatic focal length, or infinity for a flat lens.
        """
        if self.is_flat:
            return math.inf
        wl = DEFAULT_WAVELENGTH_NM if wavelength is None else wavelength
        n_wl = optics_math.cauchy_index(wl, self.base_refractive_index, self.dispersion_b)
        n_base_minus_1 = self.base_refractive_index - 1.0
        n_wl_minus_1 = n_wl - 1.0
        if abs(n_wl_minus_1) < GEOMETRY_EPSILON or abs(n_base_minus_1) < GEOMETRY_EPSILON:
            return math.inf
        f_actual = self.focal_length * (n_base_minus_1 / n_wl_minus_1)
        return f_actual if math.isfinite(f_actual) else math.inf

    def get_abcd_matrix(self, wavelength: Optional[float] = None) -> np.ndarray:
        """Ray-transfer matrix [[1, 0], [-1/f, 1]] (identity for a flat lens)."""
        return optics_math.thin_lens_abcd(self.get_focal_length(wavelength))

    def transform_gaussian_beam(self, q: complex, wavelength: Optional[float] = None) -> complex:
        """
        Transform a complex beam parameter through the lens.

        Args:
            q: q = z + i z_R at the lens (z measured from the incoming waist).
            wavelength: Wavelength in nm (None uses 550 nm).

        Returns:
            q' = (A q + B) / (C q + D).
        """
        return optics_math.transform_q(q, self.get_abcd_matrix(wavelength))

    def interact(self, ray: 'Ray', hit: Intersection, verbose: int = 0) -> List['Ray']:
        if not hit.point.is_finite():
            ray.terminate('invalid_geom_interact_lens')
            return []

        direction = ray.direction
        intensity = ray.intensity * self.quality
        f_actual = self.get_focal_length(ray.effective_wavelength)

        if math.isinf(f_actual):
            child = ray.spawn(hit.point, direction, intensity, 'transmit')
            ray.terminate('pass_flat_lens')
            return self.keep_children(ray, [child])

        # Axis oriented along the ray's travel
        axis = self.axis_direction
        along = direction.dot(axis)
        if along < 0:
            axis = -axis
            along = -along
        if along < GEOMETRY_EPSILON:
            ray.terminate('grazing_lens')
            return []

        tangent = self.line_direction
        h = (hit.point - self.position).dot(tangent)
        tan_in = direction.dot(tangent) / along
        tan_out = tan_in - h / f_actual
        new_dir = (axis + tangent * tan_out).normalized()

        if verbose >= 2:
            print(f"  {self.get_display_name()}: h={h:.4f}, f={f_actual:.4f}, "
                  f"tan_in={tan_in:.5f}, tan_out={tan_out:.5f}")

        child = ray.spawn(hit.point, new_dir, intensity, 'refract')
        ray.terminate('refracted_lens')
        return self.keep_children(ray, [child])

    def get_display_name(self) -> str:
        if self._name:
            return self._name
        if self.is_flat:
            kind = 'Flat plate'
        else:
            kind = 'Converging lens' if self.focal_length > 0 else 'Diverging lens'
        return f"{kind}_{self._uuid[:8]}"

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
from typing import List, Any, TYPE_CHECKING

if __name__ == "__main__":
    from optics_lab_shapely.core.scene_objs.base_scene_obj import BaseSceneObj, Intersection
    from optics_lab_shapely.core.constants import N_AIR, GEOMETRY_EPSILON
    from optics_lab_shapely.core import optics_math
else:
    from .base_scene_obj import BaseSceneObj, Intersection
    from ..constants import N_AIR, GEOMETRY_EPSILON
    from .. import optics_math

if TYPE_CHECKING:
    from ..ray import Ray


class BaseGlass(BaseSceneObj):
    """
    The base class for dielectric bodies (blocks, prisms).

    Attributes:
        base_refractive_index: The refractive index at 550 nm.
        dispersion_b: The Cauchy coefficient B in nm^2 (0 disables dispersion).
        absorption_coeff: Bulk absorption per pixel of path inside the body.

    Features:
        - Dispersion modeling: Cauchy's equation n(lambda) = A + B/lambda^2, with A
          chosen so that n(550 nm) equals `base_refractive_index`
        - Fresnel reflection: unpolarized average of the s and p reflectances,
          emitted as a secondary reflected ray at every interface
        - Total internal reflection when leaving the body beyond the critical angle
        - Beer-Lambert absorption applied when a ray leaves the body

    Subclasses supply the body shape (usually through PolygonObjMixin), whose
    intersections carry extra['entering'].
    """

    def _validate_property(self, name: str, value: Any) -> Any:
        value = super()._validate_property(name, value)
        if name == 'base_refractive_index' and value < 1.0:
            raise ValueError(f"Property '{name}' must be at least 1, got {value}")
        if name in ('dispersion_b', 'absorption_coeff'):
            self._require_non_negative(name, value)
        return value

    def get_ref_index(self, ray: 'Ray') -> float:
        """
        Get the refractive index of the body for the ray's wavelength.

        Broadband rays use the 550 nm value.

        Args:
            ray: The ray being refracted.

        Returns:
            The refractive index (never below 1).
        """
        return optics_math.cauchy_index(
            ray.effective_wavelength,
            self.base_refractive_index,
            self.dispersion_b
        )

    def get_absorption_coeff(self) -> float:
        """Bulk absorption coefficient (per pixel)."""
        return getattr(self, 'absorption_coeff', 0.0)

    def interact(self, ray: 'Ray', hit: Intersection, verbose: int = 0) -> List['Ray']:
        """
        Fresnel split (or total internal reflection) at a body surface.

        Entering: n1 = N_AIR, n2 = n(lambda). Leaving: the reverse, and the
        intensity is first attenuated by exp(-alpha * L) over the path L
        travelled inside the body.

        Reason codes: 'split_block', 'tir_block', 'pass_boundary_block',
        'invalid_geom_interact_block'.
        """
        normal = hit.normal
        direction = ray.direction
        if not (hit.point.is_finite() and normal.is_finite()) or normal.length_squared() < 0.5:
            ray.terminate('invalid_geom_interact_block')
            return []

        entering = hit.extra.get('entering')
        if entering is None:
            entering = ray.medium_index < self.get_ref_index(ray) - GEOMETRY_EPSILON

        n_glass = self.get_ref_index(ray)
        n1 = N_AIR if entering else n_glass
        n2 = n_glass if entering else N_AIR

        intensity = ray.intensity
        if not entering:
            path = (hit.point - ray.origin).length()
            intensity *= optics_math.absorption_factor(self.get_absorption_coeff(), path)

        if verbose >= 2:
            print(f"  {self.get_display_name()}: entering={entering}, n1={n1:.5f}, n2={n2:.5f}, "
                  f"I={intensity:.5g}")

        if abs(n1 - n2) < GEOMETRY_EPSILON:
            child = ray.spawn(hit.point, direction, intensity, 'refract', medium_index=n2)
            ray.terminate('pass_boundary_block')
            return self.keep_children(ray, [child])

        reflectance, cos_t, is_tir = optics_math.fresnel_reflectance(n1, n2, -direction.dot(normal))
        children = []

        reflected_dir = optics_math.reflect(direction, normal)
        children.append(ray.spawn(
            hit.point, reflected_dir, intensity * reflectance,
            'tir' if is_tir else 'reflect',
            phase_shift=math.pi, medium_index=n1
        ))

        if not is_tir:
            refracted_dir, _, _ = optics_math.refract(direction, normal, n1, n2)
            if refracted_dir is not None:
                children.append(ray.spawn(
                    hit.point, refracted_dir, intensity * (1.0 - reflectance),
                    'refract', medium_index=n2
                ))

        if verbose >= 2:
            print(f"    R={reflectance:.5f}, TIR={is_tir}, children={len(children)}")

        ray.terminate('tir_block' if is_tir else 'split_block')
        return self.keep_children(ray, children)

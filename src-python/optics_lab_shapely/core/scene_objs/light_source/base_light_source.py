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
    from optics_lab_shapely.core.scene_objs.base_scene_obj import BaseSceneObj
    from optics_lab_shapely.core.geometry import Point
    from optics_lab_shapely.core.polarization import PolarizationState
    from optics_lab_shapely.core.ray import Ray
    from optics_lab_shapely.core.constants import UV_WAVELENGTH, INFRARED_WAVELENGTH, N_AIR
    from optics_lab_shapely.core import optics_math
else:
    from ..base_scene_obj import BaseSceneObj
    from ...geometry import Point
    from ...polarization import PolarizationState
    from ...ray import Ray
    from ...constants import UV_WAVELENGTH, INFRARED_WAVELENGTH, N_AIR
    from ... import optics_math

POLARIZATION_TYPES = ('unpolarized', 'linear', 'circular')


class BaseLightSource(BaseSceneObj):
    """
    The base class for sources that emit rays at the start of a trace pass.

    Subclasses extend `serializable_defaults` with their own keys and
    implement `generate_rays(max_rays)`. Every source has these keys:

    Attributes:
        wavelength (float or None): Wavelength in nm; None emits broadband light
        intensity (float): Total emitted intensity, shared between the rays
        enabled (bool): Whether the source emits
        polarization (str): One of 'unpolarized', 'linear', 'circular'
        polarization_angle (float): Linear polarization angle in degrees
        ignore_decay (bool): Emit rays that ignore the intensity floor and mirror losses
    """

    is_light_source = True

    source_defaults = {
        'wavelength': 550,
        'intensity': 1.0,
        'enabled': True,
        'polarization': 'unpolarized',
        'polarization_angle': 0,
        'ignore_decay': False,
    }

    def _validate_property(self, name: str, value: Any) -> Any:
        if name == 'wavelength' and value is None:
            self.warning = None
            return None
        value = super()._validate_property(name, value)
        if name == 'wavelength':
            self._require_positive(name, value)
            self.warning = None
            if not UV_WAVELENGTH <= value <= INFRARED_WAVELENGTH:
                self.warning = (
                    f"Wavelength {value} nm is outside the visible range "
                    f"{UV_WAVELENGTH}-{INFRARED_WAVELENGTH} nm"
                )
        elif name == 'intensity':
            self._require_non_negative(name, value)
        elif name == 'polarization' and value not in POLARIZATION_TYPES:
            raise ValueError(f"Invalid polarization '{value}'. Valid options: {POLARIZATION_TYPES}")
        return value

    def make_polarization(self) -> PolarizationState:
        """The polarization state given to every emitted ray."""
        if self.polarization == 'linear':
            return PolarizationState.linear(math.radians(self.polarization_angle))
        if self.polarization == 'circular':
            return PolarizationState.circular(True)
        return PolarizationState.unpolarized()

    def new_ray(self, origin: Point, direction: Point, intensity: float, **kwargs) -> Ray:
        """
        Create a source ray tagged with this source.

        Args:
            origin: Start point.
            direction: Propagation direction.
            intensity: Intensity of this ray.
            **kwargs: Extra Ray constructor arguments (beam parameters).

        Returns:
            A Ray with bounce count 0.
        """
        ray = Ray(
            origin, direction,
            wavelength=self.wavelength,
            intensity=intensity,
            medium_index=N_AIR,
            source_uuid=self.uuid,
            polarization=self.make_polarization(),
            ignore_decay=self.ignore_decay,
            **kwargs
        )
        ray.source_label = self.get_display_name()
        return ray

    def gaussian_parameters(self, waist: float) -> dict:
        """Beam waist and Rayleigh range keyword arguments (empty when disabled)."""
        if waist <= 0:
            return {}
        wavelength = self.wavelength if self.wavelength is not None else 550
        return {
            'beam_waist': waist,
            'rayleigh_range': optics_math.rayleigh_range(waist, wavelength),
        }

    def generate_rays(self, max_rays: int) -> List[Ray]:
        """
        Emit the initial rays of a trace pass.

        Args:
            max_rays: Upper bound on the number of rays.
        """
        raise NotImplementedError

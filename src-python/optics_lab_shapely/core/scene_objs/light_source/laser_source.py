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
    from optics_lab_shapely.core.scene_objs.light_source.base_light_source import BaseLightSource
    from optics_lab_shapely.core.geometry import Point
    from optics_lab_shapely.core.ray import Ray
    from optics_lab_shapely.core.constants import GEOMETRY_EPSILON
else:
    from .base_light_source import BaseLightSource
    from ...geometry import Point
    from ...ray import Ray
    from ...constants import GEOMETRY_EPSILON


class LaserSource(BaseLightSource):
    """
    A point laser emitting one ray or a fan of rays.

    With num_rays > 1 and a non-zero spread the rays are evenly spaced over
    [angle - spread/2, angle + spread/2]; the intensity is shared equally.
    A positive beam_waist gives every ray Gaussian beam parameters.

    Attributes:
        pos (dict): Emission point {'x': float, 'y': float}
        angle (float): Emission direction in degrees
        num_rays (int): Number of rays
        spread (float): Full fan angle in degrees
        beam_diameter (float): Geometric beam diameter
        beam_waist (float): Gaussian waist radius (0 disables Gaussian parameters)
    """

    type = 'LaserSource'
    serializable_defaults = {
        'pos': {'x': 0, 'y': 0},
        'angle': 0,
        **BaseLightSource.source_defaults,
        'num_rays': 1,
        'spread': 0,
        'beam_diameter': 10.0,
        'beam_waist': 5.0,
    }

    def _validate_property(self, name: str, value: Any) -> Any:
        value = super()._validate_property(name, value)
        if name == 'num_rays':
            if int(value) != value or value < 1:
                raise ValueError(f"Property '{name}' must be an integer >= 1, got {value}")
            value = int(value)
        elif name in ('spread', 'beam_diameter', 'beam_waist'):
            self._require_non_negative(name, value)
        return value

    def generate_rays(self, max_rays: int) -> List[Ray]:
        if not self.enabled:
            return []
        count = max(1, min(self.num_rays, max_rays))
        per_ray = self.intensity / count
        spread = math.radians(self.spread)
        step = spread / (count - 1) if count > 1 and spread > GEOMETRY_EPSILON else 0.0
        start = self.angle_rad - spread / 2.0 if step else self.angle_rad

        rays = []
        for i in range(count):
            direction = Point.from_angle(start + i * step)
            rays.append(self.new_ray(
                self.position, direction, per_ray,
                beam_diameter=self.beam_diameter,
                **self.gaussian_parameters(self.beam_waist)
            ))
        return rays

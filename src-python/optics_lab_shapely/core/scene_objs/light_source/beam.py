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

from typing import Any, List

from shapely.geometry import LineString

if __name__ == "__main__":
    from optics_lab_shapely.core.scene_objs.light_source.base_light_source import BaseLightSource
    from optics_lab_shapely.core.geometry import Point
    from optics_lab_shapely.core.ray import Ray
else:
    from .base_light_source import BaseLightSource
    from ...geometry import Point
    from ...ray import Ray


class Beam(BaseLightSource):
    """
    A collimated beam: parallel rays with a common phase front.

    Rays start evenly spaced across a segment of length `width` centred on
    `pos` and perpendicular to the propagation direction `angle`. All rays
    start in phase, so the beam behaves as a coherent plane wave at detectors.

    Attributes:
        pos (dict): Centre of the emitting segment {'x': float, 'y': float}
        angle (float): Propagation direction in degrees
        width (float): Width of the beam
        num_rays (int): Number of parallel rays
    """

    type = 'Beam'
    serializable_defaults = {
        'pos': {'x': 0, 'y': 0},
        'angle': 0,
        **BaseLightSource.source_defaults,
        'width': 50,
        'num_rays': 11,
    }
    geometry_properties = frozenset({'pos', 'angle', 'width'})

    def _validate_property(self, name: str, value: Any) -> Any:
        value = super()._validate_property(name, value)
        if name == 'num_rays':
            if int(value) != value or value < 1:
                raise ValueError(f"Property '{name}' must be an integer >= 1, got {value}")
            value = int(value)
        elif name == 'width':
            self._require_non_negative(name, value)
        return value

    def _update_geometry(self) -> None:
        self.direction: Point = Point.from_angle(self.angle_rad)
        half = self.direction.perpendicular() * (self.width / 2.0)
        self.p1: Point = self.position - half
        self.p2: Point = self.position + half

    def generate_rays(self, max_rays: int) -> List[Ray]:
        if not self.enabled:
            return []
        count = max(1, min(self.num_rays, max_rays))
        per_ray = self.intensity / count
        spacing = self.width / count
        rays = []
        for i in range(count):
            # Ray i sits at the centre of its 1/count share of the width
            origin = self.p1 + (self.p2 - self.p1) * ((i + 0.5) / count)
            rays.append(self.new_ray(origin, self.direction, per_ray, beam_diameter=spacing))
        return rays

    def get_shape(self):
        return LineString([(self.p1.x, self.p1.y), (self.p2.x, self.p2.y)])

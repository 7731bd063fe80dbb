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
from shapely.geometry import MultiLineString

if __name__ == "__main__":
    from optics_lab_shapely.core.scene_objs.base_scene_obj import BaseSceneObj, Intersection
    from optics_lab_shapely.core.geometry import Point
    from optics_lab_shapely.core.constants import N_AIR, GEOMETRY_EPSILON, MIN_RAY_SEGMENT_LENGTH
    from optics_lab_shapely.core import optics_math
else:
    from ..base_scene_obj import BaseSceneObj, Intersection
    from ...geometry import Point
    from ...constants import N_AIR, GEOMETRY_EPSILON, MIN_RAY_SEGMENT_LENGTH
    from ... import optics_math

if TYPE_CHECKING:
    from ...ray import Ray


class FiberCoupler(BaseSceneObj):
    """
    Single fiber with an input and an output facet.

    The input facet sits at `pos` facing along `angle`; only rays travelling
    against that direction, landing inside the core and within the
    acceptance cone asin(NA / n_air) couple in. The coupled power is

        I * intrinsic_efficiency * angle_factor * position_factor * loss

    where angle_factor falls linearly from 1 on axis to 0 at the cone edge,
    position_factor falls linearly from 1 at the core centre to 0 at its rim,
    and loss is the dB/km attenuation over the straight-line fiber length.
    The coupled light leaves the output facet at `output_pos` along
    `output_angle` as a child of the incident ray, keeping its phase and
    polarization.

    Attributes:
        pos (dict): Centre of the input facet {'x': float, 'y': float}
        angle (float): Direction the input facet faces, in degrees
        output_pos (dict): Centre of the output facet
        output_angle (float): Emission direction in degrees
        numerical_aperture (float): Fiber NA, in (0, 1]
        core_diameter (float): Core diameter
        intrinsic_efficiency (float): Best-case coupling efficiency
        loss_db_per_km (float): Propagation loss
        facet_length (float): Drawn size of the facets
    """

    type = 'FiberCoupler'
    serializable_defaults = {
        'pos': {'x': 0, 'y': 0},
        'angle': 0,
        'output_pos': {'x': 100, 'y': 0},
        'output_angle': 0,
        'numerical_aperture': 0.22,
        'core_diameter': 9,
        'intrinsic_efficiency': 1.0,
        'loss_db_per_km': 0.0,
        'facet_length': 15,
    }
    geometry_properties = frozenset({
        'pos', 'angle', 'output_pos', 'output_angle', 'core_diameter', 'facet_length'
    })

    def __init__(self, scene, json_obj=None):
        self.hit_count: int = 0
        self.last_coupling_factor: float = 0.0
        super().__init__(scene, json_obj)

    def _validate_property(self, name: str, value: Any) -> Any:
        value = super()._validate_property(name, value)
        if name == 'numerical_aperture' and not 0 < value <= 1:
            raise ValueError(f"Property '{name}' must be in (0, 1], got {value}")
        if name in ('core_diameter', 'facet_length'):
            self._require_positive(name, value)
        elif name == 'intrinsic_efficiency':
            self._require_fraction(name, value)
        elif name == 'loss_db_per_km':
            self._require_non_negative(name, value)
        return value

    def _update_geometry(self) -> None:
        self.input_normal: Point = Point.from_angle(self.angle_rad)
        self.output_direction: Point = Point.from_angle(math.radians(self.output_angle))
        half_in = self.input_normal.perpendicular() * (self.facet_length / 2.0)
        half_out = self.output_direction.perpendicular() * (self.facet_length / 2.0)
        position = self.position
        output = Point.from_dict(self.output_pos)
        self.input_p1: Point = position - half_in
        self.input_p2: Point = position + half_in
        self.output_p1: Point = output - half_out
        self.output_p2: Point = output + half_out
        self.fiber_length: float = (output - position).length()
        self.warning = None
        if self.core_diameter > self.facet_length:
            self.warning = "FiberCoupler core is wider than its facet"

    def on_geometry_changed(self) -> None:
        self.reset()

    def on_trace_start(self) -> None:
        self.reset()

    def reset(self) -> None:
        """Clear the coupling statistics."""
        self.hit_count = 0
        self.last_coupling_factor = 0.0

    @property
    def acceptance_angle(self) -> float:
        """Half-angle of the acceptance cone in radians."""
        return optics_math.fiber_acceptance_angle(self.numerical_aperture, N_AIR)

    def transmission_factor(self) -> float:
        """Propagation loss over the fiber length."""
        return optics_math.db_loss_factor(self.loss_db_per_km, self.fiber_length)

    def coupling_factor(self, point: Point, direction: Point) -> float:
        """
        Geometric coupling for a ray hitting the input facet plane.

        Returns:
            angle_factor * position_factor, 0 outside the core or the cone.
        """
        core_radius = self.core_diameter / 2.0
        offset = (point - self.position).length()
        if offset > core_radius + MIN_RAY_SEGMENT_LENGTH:
            return 0.0
        cos_theta = -direction.dot(self.input_normal)
        min_cos = math.cos(self.acceptance_angle)
        if cos_theta < min_cos - MIN_RAY_SEGMENT_LENGTH:
            return 0.0
        if min_cos < 1.0 - GEOMETRY_EPSILON:
            angle_factor = min(1.0, max(0.0, (cos_theta - min_cos) / (1.0 - min_cos)))
        else:
            angle_factor = 1.0
        position_factor = max(0.0, 1.0 - offset / core_radius)
        return min(1.0, angle_factor * position_factor)

    def intersect(self, origin: Point, direction: Point) -> Optional[Intersection]:
        normal = self.input_normal
        along = direction.dot(normal)
        if along >= -GEOMETRY_EPSILON:
            return None
        t = (self.position - origin).dot(normal) / along
        if t <= MIN_RAY_SEGMENT_LENGTH:
            return None
        point = origin + direction * t
        if (point - self.position).length() > self.core_diameter / 2.0 + MIN_RAY_SEGMENT_LENGTH:
            return None
        if -along < math.cos(self.acceptance_angle) - MIN_RAY_SEGMENT_LENGTH:
            return None
        factor = self.coupling_factor(point, direction)
        return Intersection(
            distance=t,
            point=point,
            normal=-normal,
            surface_id='input_facet',
            extra={'coupling_factor': factor},
        )

    def interact(self, ray: 'Ray', hit: Intersection, verbose: int = 0) -> List['Ray']:
        factor = hit.extra.get('coupling_factor')
        if factor is None:
            ray.terminate('invalid_coupling')
            return []
        self.last_coupling_factor = factor
        self.hit_count += 1

        coupled = ray.intensity * self.intrinsic_efficiency * factor
        if coupled < self.min_intensity() and not ray.ignore_decay:
            ray.terminate('too_dim_fiber')
            return []

        output_intensity = coupled * self.transmission_factor()
        if verbose >= 2:
            print(f"  {self.get_display_name()}: coupling={factor:.5f}, "
                  f"loss factor={self.transmission_factor():.5f}, I_out={output_intensity:.5g}")

        child = ray.spawn(
            Point.from_dict(self.output_pos), self.output_direction, output_intensity, 'couple',
            medium_index=N_AIR
        )
        ray.terminate('coupled_fiber')
        return self.keep_children(ray, [child])

    def get_shape(self):
        output = Point.from_dict(self.output_pos)
        position = self.position
        return MultiLineString([
            [(self.input_p1.x, self.input_p1.y), (self.input_p2.x, self.input_p2.y)],
            [(self.output_p1.x, self.output_p1.y), (self.output_p2.x, self.output_p2.y)],
            [(position.x, position.y), (output.x, output.y)],
        ])

    def get_display_name(self) -> str:
        if self._name:
            return self._name
        return f"Fiber_{self._uuid[:8]}"

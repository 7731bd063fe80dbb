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
from shapely.geometry import LineString

if __name__ == "__main__":
    from optics_lab_shapely.core.scene_objs.base_scene_obj import BaseSceneObj, Intersection
    from optics_lab_shapely.core.scene_objs.mirror.mirror import ReflectorMixin
    from optics_lab_shapely.core.geometry import Point, geometry
    from optics_lab_shapely.core.constants import DEFAULT_REFLECTIVITY
else:
    from ..base_scene_obj import BaseSceneObj, Intersection
    from .mirror import ReflectorMixin
    from ...geometry import Point, geometry
    from ...constants import DEFAULT_REFLECTIVITY

if TYPE_CHECKING:
    from ...ray import Ray

# Width of the flat segment used when the radius is infinite
PLANE_EFFECTIVE_DIAMETER = 100.0

# Angular slack (radians) at the ends of the arc
ARC_ANGLE_TOLERANCE = 1e-4


class SphericalMirror(ReflectorMixin, BaseSceneObj):
    """
    Spherical (circular-arc) mirror.

    The vertex of the arc sits at `pos`; the optical axis points along
    `angle + 90` degrees. The centre of curvature is pos + axis * radius, so a
    positive radius gives a mirror that is concave towards the axis direction
    (focal length radius / 2) and a negative radius a convex one. A radius of
    0 or infinity degrades to a flat mirror of width 100.

    Attributes:
        pos (dict): Vertex of the arc {'x': float, 'y': float}
        angle (float): Orientation in degrees (the arc chord runs along this angle)
        radius (float): Signed radius of curvature
        central_angle (float): Angular extent of the arc in degrees (0, 360]
        reflectivity (float): Fraction of the intensity reflected
    """

    type = 'SphericalMirror'
    serializable_defaults = {
        'pos': {'x': 0, 'y': 0},
        'angle': 0,
        'radius': 200,
        'central_angle': 90,
        'reflectivity': DEFAULT_REFLECTIVITY,
    }
    geometry_properties = frozenset({'pos', 'angle', 'radius', 'central_angle'})

    def _infinite_allowed(self):
        return frozenset({'radius'})

    def _validate_property(self, name: str, value: Any) -> Any:
        value = super()._validate_property(name, value)
        if name == 'central_angle' and not 0 < value <= 360:
            raise ValueError(f"Property '{name}' must be in (0, 360] degrees, got {value}")
        return value

    @property
    def is_plane(self) -> bool:
        return self.radius == 0 or math.isinf(self.radius)

    @property
    def focal_length(self) -> float:
        """Paraxial focal length R / 2 (infinite for a flat mirror)."""
        if self.is_plane:
            return math.inf
        return self.radius / 2.0

    def _update_geometry(self) -> None:
        axis = Point.from_angle(self.angle_rad + math.pi / 2)
        self.axis_direction: Point = axis
        vertex = self.position
        if self.is_plane:
            half = Point.from_angle(self.angle_rad) * (PLANE_EFFECTIVE_DIAMETER / 2.0)
            self.center_of_curvature: Optional[Point] = None
            self.arc_p1: Point = vertex - half
            self.arc_p2: Point = vertex + half
        else:
            center = vertex + axis * self.radius
            half_angle = math.radians(self.central_angle) / 2.0
            to_vertex = vertex - center
            self.center_of_curvature = center
            self.arc_p1 = center + to_vertex.rotated(-half_angle)
            self.arc_p2 = center + to_vertex.rotated(half_angle)
        self.warning = None

    def intersect(self, origin: Point, direction: Point) -> Optional[Intersection]:
        if self.is_plane:
            result = geometry.ray_segment_intersection(origin, direction, self.arc_p1, self.arc_p2)
            if result is None:
                return None
            t, _ = result
            normal = (self.arc_p2 - self.arc_p1).perpendicular().normalized()
            return Intersection(
                distance=t,
                point=origin + direction * t,
                normal=geometry.face_normal_against(normal, direction),
                surface_id='plane',
            )

        center = self.center_of_curvature
        r = abs(self.radius)
        to_vertex = (self.position - center).normalized()
        half_angle = math.radians(self.central_angle) / 2.0
        for t in geometry.ray_circle_intersections(origin, direction, center, r):
            point = origin + direction * t
            radial = (point - center) / r
            # Angle between the hit and the vertex, seen from the centre
            offset = math.acos(max(-1.0, min(1.0, radial.dot(to_vertex))))
            if offset <= half_angle + ARC_ANGLE_TOLERANCE:
                return Intersection(
                    distance=t,
                    point=point,
                    normal=geometry.face_normal_against(radial, direction),
                    surface_id='arc',
                )
        return None

    def interact(self, ray: 'Ray', hit: Intersection, verbose: int = 0) -> List['Ray']:
        return self.reflect_ray(ray, hit, verbose)

    def get_display_name(self) -> str:
        if self._name:
            return self._name
        if self.is_plane:
            kind = 'Flat mirror'
        else:
            kind = 'Concave mirror' if self.radius > 0 else 'Convex mirror'
        return f"{kind}_{self._uuid[:8]}"

    def get_shape(self):
        if self.is_plane:
            return LineString([(self.arc_p1.x, self.arc_p1.y), (self.arc_p2.x, self.arc_p2.y)])
        center = self.center_of_curvature
        start = self.arc_p1 - center
        steps = 32
        sweep = math.radians(self.central_angle)
        points = [center + start.rotated(sweep * i / steps) for i in range(steps + 1)]
        return LineString([(p.x, p.y) for p in points])

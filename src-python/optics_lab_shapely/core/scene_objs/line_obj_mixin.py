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

from typing import Optional, Union
from shapely.geometry import LineString

if __name__ == "__main__":
    from optics_lab_shapely.core.geometry import Point, geometry
    from optics_lab_shapely.core.constants import GEOMETRY_EPSILON, MIN_RAY_SEGMENT_LENGTH
    from optics_lab_shapely.core.scene_objs.base_scene_obj import Intersection
else:
    from ..geometry import Point, geometry
    from ..constants import GEOMETRY_EPSILON, MIN_RAY_SEGMENT_LENGTH
    from .base_scene_obj import Intersection


class LineObjMixin:
    """
    Mixin class for components whose optical surface is a single line segment.

    The segment is centred on `pos`, runs along `angle` (degrees) and has the
    length returned by `segment_length()` (the `length` property by default).
    `_update_geometry()` caches the endpoints p1/p2 and the unit normal, which
    is the segment direction rotated by +90 degrees.

    Usage:
        class MyLineObject(LineObjMixin, BaseSceneObj):
            serializable_defaults = {
                'pos': {'x': 0, 'y': 0},
                'angle': 0,
                'length': 100
            }
            geometry_properties = frozenset({'pos', 'angle', 'length'})

    Note: This class should be used as a mixin with BaseSceneObj or its subclasses.
          In Python's MRO (Method Resolution Order), mixins should come before the base class.
    """

    def segment_length(self) -> float:
        """Length of the optical segment."""
        return self.length

    def _update_geometry(self) -> None:
        """Recompute the cached endpoints and normal."""
        half = Point.from_angle(self.angle_rad) * (self.segment_length() / 2.0)
        center = self.position
        self.p1: Point = center - half
        self.p2: Point = center + half
        edge = self.p2 - self.p1
        self.normal: Point = edge.perpendicular().normalized()
        if edge.length() < GEOMETRY_EPSILON:
            self.warning = f"{self.__class__.type} has zero length and cannot be hit"
        else:
            self.warning = None

    @property
    def line_direction(self) -> Point:
        """Unit vector from p1 to p2."""
        return (self.p2 - self.p1).normalized()

    def intersect_segment(
        self,
        origin: Point,
        direction: Point,
        a: Point,
        b: Point,
        surface_id: Union[int, str, None] = 'front',
        edge_tolerance: float = MIN_RAY_SEGMENT_LENGTH
    ) -> Optional[Intersection]:
        """
        Intersect a ray with the segment [a, b] and orient the normal against the ray.

        Args:
            origin: Ray origin.
            direction: Unit ray direction.
            a: First endpoint.
            b: Second endpoint.
            surface_id: Tag stored on the Intersection.
            edge_tolerance: Slack on the segment fraction at both ends.

        Returns:
            The Intersection, with the segment fraction in extra['fraction'], or None.
        """
        if (b - a).length() < GEOMETRY_EPSILON:
            return None
        result = geometry.ray_segment_intersection(origin, direction, a, b, edge_tolerance)
        if result is None:
            return None
        t, s = result
        normal = geometry.face_normal_against((b - a).perpendicular().normalized(), direction)
        return Intersection(
            distance=t,
            point=origin + direction * t,
            normal=normal,
            surface_id=surface_id,
            extra={'fraction': s},
        )

    def intersect(self, origin: Point, direction: Point) -> Optional[Intersection]:
        """Intersect a ray with the component's segment."""
        return self.intersect_segment(origin, direction, self.p1, self.p2)

    def get_shape(self):
        """The segment as a shapely LineString."""
        return LineString([(self.p1.x, self.p1.y), (self.p2.x, self.p2.y)])

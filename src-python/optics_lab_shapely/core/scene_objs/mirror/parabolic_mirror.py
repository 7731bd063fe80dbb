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

from typing import Any, Dict, List, Optional, TYPE_CHECKING
from shapely.geometry import LineString

if __name__ == "__main__":
    from optics_lab_shapely.core.scene_objs.base_scene_obj import BaseSceneObj, Intersection
    from optics_lab_shapely.core.scene_objs.mirror.mirror import ReflectorMixin
    from optics_lab_shapely.core.geometry import Point, geometry
    from optics_lab_shapely.core.constants import DEFAULT_REFLECTIVITY, MIN_RAY_SEGMENT_LENGTH
else:
    from ..base_scene_obj import BaseSceneObj, Intersection
    from .mirror import ReflectorMixin
    from ...geometry import Point, geometry
    from ...constants import DEFAULT_REFLECTIVITY, MIN_RAY_SEGMENT_LENGTH

if TYPE_CHECKING:
    from ...ray import Ray

DEFAULT_FOCAL_LENGTH = 100


class ParabolicMirror(ReflectorMixin, BaseSceneObj):
    """
    Concave parabolic mirror focusing axis-parallel light to a single point.

    In the local frame (x along `angle`, y perpendicular) the surface is
    y^2 = 4 f x with the vertex at `pos`; it opens towards +x and the focus is
    at vertex + x_axis * f. Only |y| <= diameter / 2 is reflective.

    Attributes:
        pos (dict): Vertex {'x': float, 'y': float}
        angle (float): Direction of the optical axis in degrees
        focal_length (float): Focal length (must be positive)
        diameter (float): Aperture diameter
        reflectivity (float): Fraction of the intensity reflected
    """

    type = 'ParabolicMirror'
    serializable_defaults = {
        'pos': {'x': 0, 'y': 0},
        'angle': 0,
        'focal_length': DEFAULT_FOCAL_LENGTH,
        'diameter': 100,
        'reflectivity': DEFAULT_REFLECTIVITY,
    }
    geometry_properties = frozenset({'pos', 'angle', 'focal_length', 'diameter'})

    def __init__(self, scene, json_obj: Optional[Dict[str, Any]] = None):
        json_obj = dict(json_obj or {})
        focal = json_obj.get('focal_length', DEFAULT_FOCAL_LENGTH)
        bad_focal = isinstance(focal, (int, float)) and focal <= 0
        if bad_focal:
            # Only concave (positive focal length) parabolas are modelled
            json_obj['focal_length'] = DEFAULT_FOCAL_LENGTH
        super().__init__(scene, json_obj)
        if bad_focal:
            self.warning = (
                f"ParabolicMirror supports only positive focal lengths; "
                f"using {DEFAULT_FOCAL_LENGTH} instead of {focal}"
            )

    def _validate_property(self, name: str, value: Any) -> Any:
        value = super()._validate_property(name, value)
        if name in ('focal_length', 'diameter'):
            self._require_positive(name, value)
        return value

    @property
    def focus(self) -> Point:
        """The focal point."""
        return self.position + self.x_axis * self.focal_length

    def _update_geometry(self) -> None:
        self.x_axis: Point = Point.from_angle(self.angle_rad)
        self.y_axis: Point = self.x_axis.perpendicular()
        self.warning = None

    def _to_world(self, lx: float, ly: float) -> Point:
        return self.position + self.x_axis * lx + self.y_axis * ly

    def intersect(self, origin: Point, direction: Point) -> Optional[Intersection]:
        f = self.focal_length
        rel = origin - self.position
        ox = rel.dot(self.x_axis)
        oy = rel.dot(self.y_axis)
        dx = direction.dot(self.x_axis)
        dy = direction.dot(self.y_axis)

        a = dy * dy
        b = 2.0 * oy * dy - 4.0 * f * dx
        c = oy * oy - 4.0 * f * ox
        half = self.diameter / 2.0

        for t in geometry.solve_quadratic(a, b, c):
            if t <= MIN_RAY_SEGMENT_LENGTH:
                continue
            hy = oy + t * dy
            if abs(hy) > half + MIN_RAY_SEGMENT_LENGTH:
                continue
            # Gradient of y^2 - 4 f x
            grad = (self.x_axis * (-4.0 * f) + self.y_axis * (2.0 * hy)).normalized()
            return Intersection(
                distance=t,
                point=origin + direction * t,
                normal=geometry.face_normal_against(grad, direction),
                surface_id='parabola',
            )
        return None

    def interact(self, ray: 'Ray', hit: Intersection, verbose: int = 0) -> List['Ray']:
        return self.reflect_ray(ray, hit, verbose)

    def get_shape(self):
        half = self.diameter / 2.0
        steps = 32
        points = []
        for i in range(steps + 1):
            ly = -half + 2 * half * i / steps
            p = self._to_world(ly * ly / (4.0 * self.focal_length), ly)
            points.append((p.x, p.y))
        return LineString(points)

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

from typing import List, Optional
from shapely.geometry import Polygon

if __name__ == "__main__":
    from optics_lab_shapely.core.geometry import Point, geometry
    from optics_lab_shapely.core.constants import GEOMETRY_EPSILON
    from optics_lab_shapely.core.scene_objs.base_scene_obj import Intersection
else:
    from ..geometry import Point, geometry
    from ..constants import GEOMETRY_EPSILON
    from .base_scene_obj import Intersection

# d . outward below this counts as entering the body
ENTERING_THRESHOLD = -1e-9


class PolygonObjMixin:
    """
    Mixin class for components with a closed polygonal body (blocks, prisms, crystals).

    Subclasses implement `local_vertices()` (vertices around the origin in the
    component frame). `_update_geometry()` rotates them by `angle`, translates
    them to `pos`, orders them counter-clockwise and caches the outward edge
    normals, so that for edge e = v[i+1] - v[i] the outward normal is (e.y, -e.x).

    `intersect()` reports the nearest edge hit with:
    - surface_id: the edge index
    - normal: the edge normal oriented against the ray
    - extra['outward']: the outward normal of the edge
    - extra['entering']: whether the ray is entering the body

    Note: This class should be used as a mixin with BaseSceneObj or its subclasses.
    """

    def local_vertices(self) -> List[Point]:
        """Body vertices in the component frame (before rotation and translation)."""
        raise NotImplementedError

    @staticmethod
    def rectangle_vertices(width: float, height: float) -> List[Point]:
        """Counter-clockwise vertices of a width x height rectangle centred on the origin."""
        hw = width / 2.0
        hh = height / 2.0
        return [Point(-hw, -hh), Point(hw, -hh), Point(hw, hh), Point(-hw, hh)]

    def _update_geometry(self) -> None:
        """Recompute the world-frame vertices and outward normals."""
        center = self.position
        angle = self.angle_rad
        vertices = [center + v.rotated(angle) for v in self.local_vertices()]

        # Shoelace signed area; reorder to counter-clockwise
        area = 0.0
        for i, v in enumerate(vertices):
            w = vertices[(i + 1) % len(vertices)]
            area += v.cross(w)
        if area < 0:
            vertices.reverse()

        self.vertices: List[Point] = vertices
        self.edge_normals: List[Point] = []
        for i, v in enumerate(vertices):
            edge = vertices[(i + 1) % len(vertices)] - v
            self.edge_normals.append(Point(edge.y, -edge.x).normalized())

        if abs(area) < GEOMETRY_EPSILON:
            self.warning = f"{self.__class__.type} has a degenerate (zero-area) body"
        else:
            self.warning = None

    def intersect(self, origin: Point, direction: Point) -> Optional[Intersection]:
        """Nearest hit on any edge of the body."""
        best: Optional[Intersection] = None
        count = len(self.vertices)
        for i in range(count):
            a = self.vertices[i]
            b = self.vertices[(i + 1) % count]
            result = geometry.ray_segment_intersection(origin, direction, a, b)
            if result is None:
                continue
            t, s = result
            if best is not None and t >= best.distance:
                continue
            outward = self.edge_normals[i]
            best = Intersection(
                distance=t,
                point=origin + direction * t,
                normal=geometry.face_normal_against(outward, direction),
                surface_id=i,
                extra={
                    'outward': outward,
                    'entering': direction.dot(outward) < ENTERING_THRESHOLD,
                    'fraction': s,
                },
            )
        return best

    def get_shape(self):
        """The body as a shapely Polygon."""
        return Polygon([(v.x, v.y) for v in self.vertices])

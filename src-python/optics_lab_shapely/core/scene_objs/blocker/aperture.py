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

from typing import Any, List, Optional, Tuple, TYPE_CHECKING
from shapely.geometry import MultiLineString

if __name__ == "__main__":
    from optics_lab_shapely.core.scene_objs.base_scene_obj import BaseSceneObj, Intersection
    from optics_lab_shapely.core.scene_objs.line_obj_mixin import LineObjMixin
    from optics_lab_shapely.core.geometry import Point
    from optics_lab_shapely.core.constants import GEOMETRY_EPSILON, MIN_RAY_SEGMENT_LENGTH
else:
    from ..base_scene_obj import BaseSceneObj, Intersection
    from ..line_obj_mixin import LineObjMixin
    from ...geometry import Point
    from ...constants import GEOMETRY_EPSILON, MIN_RAY_SEGMENT_LENGTH

if TYPE_CHECKING:
    from ...ray import Ray

Segment = Tuple[Point, Point]


class Aperture(LineObjMixin, BaseSceneObj):
    """
    An opaque screen with one or more rectangular slits.

    The aperture spans `length` along `angle`, centred on `pos`. Slit i is
    centred at offset (i - (N - 1) / 2) * slit_separation along the aperture
    and is `slit_width` wide; everything else is blocker. Rays hitting a
    blocker are absorbed. Rays through an opening continue undeviated with
    their beam diameter clipped to the slit width. Interference between slits
    emerges downstream, where the coherent rays meet on a Screen.

    Attributes:
        pos (dict): Centre of the aperture {'x': float, 'y': float}
        angle (float): Orientation of the aperture in degrees (90 = vertical)
        length (float): Total width of the aperture
        number_of_slits (int): Number of openings (>= 1)
        slit_width (float): Width a of each opening
        slit_separation (float): Centre-to-centre distance d (at least a)
    """

    type = 'Aperture'
    serializable_defaults = {
        'pos': {'x': 0, 'y': 0},
        'angle': 90,
        'length': 150,
        'number_of_slits': 1,
        'slit_width': 10,
        'slit_separation': 20,
    }
    geometry_properties = frozenset({
        'pos', 'angle', 'length', 'number_of_slits', 'slit_width', 'slit_separation'
    })

    def _validate_property(self, name: str, value: Any) -> Any:
        value = super()._validate_property(name, value)
        if name == 'number_of_slits':
            if int(value) != value or value < 1:
                raise ValueError(f"Property '{name}' must be an integer >= 1, got {value}")
            value = int(value)
        elif name in ('length', 'slit_width', 'slit_separation'):
            self._require_positive(name, value)
        return value

    @property
    def effective_separation(self) -> float:
        """Slit separation, never smaller than the slit width."""
        return max(self.slit_width, self.slit_separation)

    def _update_geometry(self) -> None:
        LineObjMixin._update_geometry(self)
        direction = self.line_direction
        center = self.position
        separation = self.effective_separation
        first_offset = -(self.number_of_slits - 1) * separation / 2.0

        self.blocker_segments: List[Segment] = []
        self.opening_segments: List[Segment] = []
        last = self.p1
        for i in range(self.number_of_slits):
            slit_center = first_offset + i * separation
            left = center + direction * (slit_center - self.slit_width / 2.0)
            right = center + direction * (slit_center + self.slit_width / 2.0)
            if (left - last).dot(direction) > MIN_RAY_SEGMENT_LENGTH:
                self.blocker_segments.append((last, left))
            self.opening_segments.append((left, right))
            last = right
        if (self.p2 - last).dot(direction) > MIN_RAY_SEGMENT_LENGTH:
            self.blocker_segments.append((last, self.p2))

        span = (self.number_of_slits - 1) * separation + self.slit_width
        if span > self.length + GEOMETRY_EPSILON:
            self.warning = (
                f"Aperture slits span {span:g} but the aperture is only {self.length:g} long"
            )

    def intersect(self, origin: Point, direction: Point) -> Optional[Intersection]:
        best: Optional[Intersection] = None
        candidates = [('blocker', None, seg) for seg in self.blocker_segments]
        candidates += [('opening', i, seg) for i, seg in enumerate(self.opening_segments)]
        for surface_id, opening_id, (a, b) in candidates:
            hit = self.intersect_segment(origin, direction, a, b, surface_id=surface_id)
            if hit is not None and (best is None or hit.distance < best.distance):
                hit.extra['opening_id'] = opening_id
                best = hit
        return best

    def interact(self, ray: 'Ray', hit: Intersection, verbose: int = 0) -> List['Ray']:
        if hit.surface_id == 'blocker':
            if verbose >= 2:
                print(f"  {self.get_display_name()}: blocked at ({hit.point.x:.3f}, {hit.point.y:.3f})")
            ray.terminate('hit_aperture_blocker')
            return []

        beam_diameter = min(ray.beam_diameter, self.slit_width)
        child = ray.spawn(
            hit.point, ray.direction, ray.intensity, 'transmit',
            beam_diameter=beam_diameter
        )
        if verbose >= 2:
            print(f"  {self.get_display_name()}: through opening {hit.extra.get('opening_id')}, "
                  f"beam diameter {beam_diameter:.3f}")
        ray.terminate('pass_aperture_opening')
        return self.keep_children(ray, [child])

    def get_display_name(self) -> str:
        if self._name:
            return self._name
        n = len(self.opening_segments)
        if n == 1:
            kind = 'Single slit'
        elif n == 2:
            kind = 'Double slit'
        else:
            kind = f'{n}-slit grating'
        return f"{kind}_{self._uuid[:8]}"

    def get_shape(self):
        return MultiLineString([[(a.x, a.y), (b.x, b.y)] for a, b in self.blocker_segments])

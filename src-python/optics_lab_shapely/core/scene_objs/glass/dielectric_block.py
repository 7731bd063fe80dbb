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

from typing import Any, List, TYPE_CHECKING

if __name__ == "__main__":
    from optics_lab_shapely.core.scene_objs.base_glass import BaseGlass
    from optics_lab_shapely.core.scene_objs.polygon_obj_mixin import PolygonObjMixin
    from optics_lab_shapely.core.constants import DEFAULT_DISPERSION_B, DEFAULT_MEDIUM_INDEX
else:
    from ..base_glass import BaseGlass
    from ..polygon_obj_mixin import PolygonObjMixin
    from ...constants import DEFAULT_DISPERSION_B, DEFAULT_MEDIUM_INDEX

if TYPE_CHECKING:
    from ...geometry import Point


class DielectricBlock(PolygonObjMixin, BaseGlass):
    """
    Rectangular block of dispersive, absorbing glass.

    Every face splits an incident ray into a Fresnel-reflected and a refracted
    child (or totally reflects it from inside). Light travelling inside the
    block is attenuated by exp(-absorption_coeff * path) when it leaves.

    Attributes:
        pos (dict): Centre of the block {'x': float, 'y': float}
        angle (float): Rotation in degrees
        width (float): Extent along the rotated x axis
        height (float): Extent along the rotated y axis
        base_refractive_index (float): Index at 550 nm
        dispersion_b (float): Cauchy B coefficient in nm^2
        absorption_coeff (float): Bulk absorption per pixel
    """

    type = 'DielectricBlock'
    serializable_defaults = {
        'pos': {'x': 0, 'y': 0},
        'angle': 0,
        'width': 100,
        'height': 60,
        'base_refractive_index': DEFAULT_MEDIUM_INDEX,
        'dispersion_b': DEFAULT_DISPERSION_B,
        'absorption_coeff': 0.001,
    }
    geometry_properties = frozenset({'pos', 'angle', 'width', 'height'})

    def _validate_property(self, name: str, value: Any) -> Any:
        value = super()._validate_property(name, value)
        if name in ('width', 'height'):
            self._require_positive(name, value)
        return value

    def local_vertices(self) -> List['Point']:
        return self.rectangle_vertices(self.width, self.height)


if __name__ == "__main__":
    import math
    from optics_lab_shapely.core.geometry import Point
    from optics_lab_shapely.core.ray import Ray

    class MockScene:
        def __init__(self):
            self.error = None

    block = DielectricBlock(MockScene(), {'pos': {'x': 100, 'y': 0}})
    ray = Ray(Point(0, 0), Point(1, 0))
    hit = block.intersect(ray.origin, ray.direction)
    ray.advance_to(hit.point)
    for child in block.interact(ray, hit, verbose=2):
        print(f"  child {child.interaction_type}: I={child.intensity:.4f}, "
              f"dir=({child.direction.x:.3f}, {child.direction.y:.3f})")
    print(f"Parent end reason: {ray.end_reason}")

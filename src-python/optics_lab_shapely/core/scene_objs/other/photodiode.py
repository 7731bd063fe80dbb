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

if __name__ == "__main__":
    from optics_lab_shapely.core.scene_objs.base_scene_obj import BaseSceneObj, Intersection
    from optics_lab_shapely.core.scene_objs.line_obj_mixin import LineObjMixin
    from optics_lab_shapely.core.constants import GEOMETRY_EPSILON
else:
    from ..base_scene_obj import BaseSceneObj, Intersection
    from ..line_obj_mixin import LineObjMixin
    from ...constants import GEOMETRY_EPSILON

if TYPE_CHECKING:
    from ...geometry import Point
    from ...ray import Ray


class Photodiode(LineObjMixin, BaseSceneObj):
    """
    Power detector with a circular active area.

    Seen edge-on in 2D the active area is a segment of length `diameter`
    centred on `pos`. Only its front side is sensitive: rays must travel
    against the normal (the orientation rotated by +90 degrees). Absorbed
    intensities are summed into the reading.

    Attributes:
        pos (dict): Centre of the active area {'x': float, 'y': float}
        angle (float): Orientation in degrees
        diameter (float): Active diameter
        incident_power (float): Summed intensity of the absorbed rays
        hit_count (int): Number of absorbed rays
    """

    type = 'Photodiode'
    is_detector = True
    serializable_defaults = {
        'pos': {'x': 0, 'y': 0},
        'angle': 0,
        'diameter': 20,
    }
    geometry_properties = frozenset({'pos', 'angle', 'diameter'})

    def __init__(self, scene, json_obj: Optional[Dict[str, Any]] = None):
        self.incident_power: float = 0.0
        self.hit_count: int = 0
        super().__init__(scene, json_obj)

    def _validate_property(self, name: str, value: Any) -> Any:
        value = super()._validate_property(name, value)
        if name == 'diameter':
            self._require_positive(name, value)
        return value

    def segment_length(self) -> float:
        return self.diameter

    def reset(self) -> None:
        """Zero the reading."""
        self.incident_power = 0.0
        self.hit_count = 0

    def on_trace_start(self) -> None:
        self.reset()

    def on_geometry_changed(self) -> None:
        self.reset()

    def intersect(self, origin: 'Point', direction: 'Point') -> Optional[Intersection]:
        if direction.dot(self.normal) >= -GEOMETRY_EPSILON:
            return None
        return self.intersect_segment(origin, direction, self.p1, self.p2, surface_id='detector_surface')

    def interact(self, ray: 'Ray', hit: Intersection, verbose: int = 0) -> List['Ray']:
        self.incident_power += ray.intensity
        self.hit_count += 1
        if verbose >= 2:
            print(f"  {self.get_display_name()}: +{ray.intensity:.5g} -> {self.format_reading()}")
        ray.terminate('absorbed_photodiode')
        return []

    def get_reading(self) -> float:
        """Summed absorbed intensity."""
        return self.incident_power

    def format_reading(self) -> str:
        """Reading formatted for display: exponent notation when very small or large."""
        power = self.incident_power
        if 0 < power < 0.001:
            return f"{power:.2e}"
        if power < 1000:
            return f"{power:.3f}"
        return f"{power:.3e}"

    def get_readout(self) -> Dict[str, Any]:
        return {
            'power': self.incident_power,
            'hit_count': self.hit_count,
            'display': self.format_reading(),
        }

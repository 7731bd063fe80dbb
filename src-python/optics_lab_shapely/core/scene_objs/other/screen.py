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
from typing import Any, Dict, List, TYPE_CHECKING

import numpy as np

if __name__ == "__main__":
    from optics_lab_shapely.core.scene_objs.base_scene_obj import BaseSceneObj, Intersection
    from optics_lab_shapely.core.scene_objs.line_obj_mixin import LineObjMixin
    from optics_lab_shapely.core.constants import GEOMETRY_EPSILON
else:
    from ..base_scene_obj import BaseSceneObj, Intersection
    from ..line_obj_mixin import LineObjMixin
    from ...constants import GEOMETRY_EPSILON

if TYPE_CHECKING:
    from ...ray import Ray


class Screen(LineObjMixin, BaseSceneObj):
    """
    Observation screen recording an interference pattern.

    The screen is divided into `num_bins` equal bins from p1 to p2. Every
    absorbed ray adds its complex field sqrt(I) exp(i phase) to the bin it
    lands in, so coherent rays interfere; the incoherent power sum and the
    hit count are kept alongside. The readings are cleared at the start of
    every trace pass and whenever the screen moves.

    Attributes:
        pos (dict): Centre of the screen {'x': float, 'y': float}
        angle (float): Orientation of the screen in degrees
        length (float): Length of the screen
        num_bins (int): Number of bins
        real (numpy.ndarray): Summed real field per bin
        imag (numpy.ndarray): Summed imaginary field per bin
        intensity_sum (numpy.ndarray): Incoherent power per bin
        hit_count (numpy.ndarray): Rays per bin
        max_intensity (float): Largest coherent bin intensity so far
    """

    type = 'Screen'
    is_detector = True
    serializable_defaults = {
        'pos': {'x': 0, 'y': 0},
        'angle': 0,
        'length': 150,
        'num_bins': 200,
    }
    geometry_properties = frozenset({'pos', 'angle', 'length', 'num_bins'})

    def _validate_property(self, name: str, value: Any) -> Any:
        value = super()._validate_property(name, value)
        if name == 'num_bins':
            if int(value) != value or value < 1:
                raise ValueError(f"Property '{name}' must be an integer >= 1, got {value}")
            value = int(value)
        elif name == 'length':
            self._require_non_negative(name, value)
        return value

    def _update_geometry(self) -> None:
        LineObjMixin._update_geometry(self)
        self.reset()

    def reset(self) -> None:
        """Clear all bins."""
        self.real = np.zeros(self.num_bins)
        self.imag = np.zeros(self.num_bins)
        self.intensity_sum = np.zeros(self.num_bins)
        self.hit_count = np.zeros(self.num_bins, dtype=int)
        self.max_intensity = 0.0

    def on_trace_start(self) -> None:
        self.reset()

    @property
    def bin_width(self) -> float:
        return self.length / self.num_bins

    def bin_index(self, point) -> int:
        """Index of the bin containing a point on the screen (clamped to the ends)."""
        t = (point - self.p1).dot(self.line_direction) / self.length
        return max(0, min(self.num_bins - 1, int(math.floor(t * self.num_bins))))

    def interact(self, ray: 'Ray', hit: Intersection, verbose: int = 0) -> List['Ray']:
        if self.length <= GEOMETRY_EPSILON:
            ray.terminate('screen_geom_invalid')
            return []

        index = self.bin_index(hit.point)
        field = ray.complex_field
        if math.isfinite(field.real) and math.isfinite(field.imag):
            self.real[index] += field.real
            self.imag[index] += field.imag
        self.intensity_sum[index] += ray.intensity
        self.hit_count[index] += 1
        coherent = self.real[index] ** 2 + self.imag[index] ** 2
        if coherent > self.max_intensity:
            self.max_intensity = float(coherent)

        if verbose >= 2:
            print(f"  {self.get_display_name()}: bin {index}, phase={ray.phase:.4f}, "
                  f"bin intensity={coherent:.5g}")

        ray.terminate('absorbed_screen')
        return []

    # ==================== Readout ====================

    def get_coherent_intensity(self) -> np.ndarray:
        """|sum of fields|^2 per bin."""
        return self.real ** 2 + self.imag ** 2

    def get_intensity_pattern(self, normalized: bool = True, coherent: bool = True) -> np.ndarray:
        """
        The recorded pattern.

        Args:
            normalized: Scale the coherent pattern by the running maximum
                `max_intensity`, clamped to 1. The incoherent sum only grows,
                so it is scaled by its current peak.
            coherent: Use the coherent sum; otherwise the incoherent power sum.

        Returns:
            Array of num_bins values ordered from p1 to p2.
        """
        if coherent:
            pattern = self.get_coherent_intensity()
            if normalized and self.max_intensity > GEOMETRY_EPSILON:
                pattern = np.minimum(1.0, pattern / self.max_intensity)
            return pattern
        pattern = self.intensity_sum.copy()
        if normalized:
            peak = pattern.max() if pattern.size else 0.0
            if peak > GEOMETRY_EPSILON:
                pattern = pattern / peak
        return pattern

    def bin_centers(self) -> np.ndarray:
        """Distance of every bin centre from p1."""
        return (np.arange(self.num_bins) + 0.5) * self.bin_width

    def total_hits(self) -> int:
        return int(self.hit_count.sum())

    def get_readout(self) -> Dict[str, Any]:
        """Summary of the recorded pattern."""
        return {
            'total_hits': self.total_hits(),
            'max_intensity': self.max_intensity,
            'incoherent_power': float(self.intensity_sum.sum()),
            'pattern': self.get_intensity_pattern(normalized=True).tolist(),
        }

    def export_csv(self) -> str:
        """
        Export the pattern in CSV format.

        Returns:
            CSV string with Position, Coherent, Incoherent and Hits columns.
        """
        lines = ["Position,Coherent,Incoherent,Hits"]
        coherent = self.get_coherent_intensity()
        for position, c, inc, hits in zip(self.bin_centers(), coherent, self.intensity_sum, self.hit_count):
            lines.append(f"{position},{c},{inc},{hits}")
        return "\n".join(lines)

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
from typing import Any, List, TYPE_CHECKING

if __name__ == "__main__":
    from optics_lab_shapely.core.scene_objs.base_scene_obj import BaseSceneObj, Intersection
    from optics_lab_shapely.core.scene_objs.line_obj_mixin import LineObjMixin
    from optics_lab_shapely.core.polarization import PolarizationState
    from optics_lab_shapely.core.constants import GEOMETRY_EPSILON
    from optics_lab_shapely.core import optics_math
else:
    from ..base_scene_obj import BaseSceneObj, Intersection
    from ..line_obj_mixin import LineObjMixin
    from ...polarization import PolarizationState
    from ...constants import GEOMETRY_EPSILON
    from ... import optics_math

if TYPE_CHECKING:
    from ...ray import Ray


class BeamSplitter(LineObjMixin, BaseSceneObj):
    """
    Plate beam splitter, optionally polarizing.

    Plain splitter: `split_ratio` of the intensity is reflected (phase + pi),
    the rest transmitted; both children keep the incident polarization.

    Polarizing splitter: the p axis runs along the splitting surface (p1 to
    p2) and the s axis is perpendicular to it. The p component is
    transmitted and the s component reflected, each with its squared
    amplitude as intensity. Natural light is split by
    `pbs_unpolarized_reflectivity` into pure s and p outputs.

    Attributes:
        pos (dict): Centre of the splitter {'x': float, 'y': float}
        angle (float): Orientation of the splitting surface in degrees
        length (float): Length of the splitting surface
        split_ratio (float): Reflected fraction of a plain splitter
        polarizing (bool): Whether the splitter separates s and p
        pbs_unpolarized_reflectivity (float): Reflected fraction of natural light
            at a polarizing splitter
    """

    type = 'BeamSplitter'
    serializable_defaults = {
        'pos': {'x': 0, 'y': 0},
        'angle': 45,
        'length': 80,
        'split_ratio': 0.5,
        'polarizing': False,
        'pbs_unpolarized_reflectivity': 0.5,
    }
    geometry_properties = frozenset({'pos', 'angle', 'length'})

    def _validate_property(self, name: str, value: Any) -> Any:
        value = super()._validate_property(name, value)
        if name == 'length':
            self._require_non_negative(name, value)
        elif name in ('split_ratio', 'pbs_unpolarized_reflectivity'):
            self._require_fraction(name, value)
        return value

    def interact(self, ray: 'Ray', hit: Intersection, verbose: int = 0) -> List['Ray']:
        if self.polarizing:
            return self._split_polarizing(ray, hit, verbose)
        return self._split_plain(ray, hit, verbose)

    def _spawn_pair(self, ray, hit, transmitted, reflected):
        """Build the transmitted and reflected children from (intensity, polarization) pairs."""
        children = []
        t_intensity, t_polarization = transmitted
        r_intensity, r_polarization = reflected
        if t_intensity > GEOMETRY_EPSILON:
            children.append(ray.spawn(
                hit.point, ray.direction, t_intensity, 'transmit', polarization=t_polarization
            ))
        if r_intensity > GEOMETRY_EPSILON:
            reflected_dir = optics_math.reflect(ray.direction, hit.normal)
            children.append(ray.spawn(
                hit.point, reflected_dir, r_intensity, 'reflect',
                phase_shift=math.pi, polarization=r_polarization
            ))
        return children

    def _split_plain(self, ray: 'Ray', hit: Intersection, verbose: int) -> List['Ray']:
        r_intensity = ray.intensity * self.split_ratio
        t_intensity = ray.intensity - r_intensity
        if verbose >= 2:
            print(f"  {self.get_display_name()}: T={t_intensity:.5g}, R={r_intensity:.5g}")
        children = self._spawn_pair(
            ray, hit,
            (t_intensity, ray.polarization.copy()),
            (r_intensity, ray.polarization.copy())
        )
        ray.terminate('split_bs')
        return self.keep_children(ray, children)

    def _split_polarizing(self, ray: 'Ray', hit: Intersection, verbose: int) -> List['Ray']:
        p_axis = self.line_direction.angle()
        s_axis = p_axis + math.pi / 2

        if ray.polarization.is_polarized:
            p_state, p_fraction = ray.polarization.transformed(optics_math.linear_polarizer_matrix(p_axis))
            s_state, s_fraction = ray.polarization.transformed(optics_math.linear_polarizer_matrix(s_axis))
        else:
            s_fraction = self.pbs_unpolarized_reflectivity
            p_fraction = 1.0 - s_fraction
            p_state = PolarizationState.linear(p_axis)
            s_state = PolarizationState.linear(s_axis)

        if verbose >= 2:
            print(f"  {self.get_display_name()}: p fraction={p_fraction:.5f}, s fraction={s_fraction:.5f}")

        children = self._spawn_pair(
            ray, hit,
            (ray.intensity * p_fraction, p_state),
            (ray.intensity * s_fraction, s_state)
        )
        ray.terminate('split_pbs')
        return self.keep_children(ray, children)

    def get_display_name(self) -> str:
        if self._name:
            return self._name
        kind = 'PBS' if self.polarizing else 'BS'
        return f"{kind}_{self._uuid[:8]}"

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
import uuid as uuid_module
from typing import Any, Dict, List, Optional, Tuple

from shapely.ops import unary_union

if __name__ == "__main__":
    from optics_lab_shapely.core.constants import (
        MAX_RAY_BOUNCES, MAX_TOTAL_RAYS, MAX_RAYS_PER_SOURCE,
        DEFAULT_VIEW_WIDTH, DEFAULT_VIEW_HEIGHT,
    )
else:
    from .constants import (
        MAX_RAY_BOUNCES, MAX_TOTAL_RAYS, MAX_RAYS_PER_SOURCE,
        DEFAULT_VIEW_WIDTH, DEFAULT_VIEW_HEIGHT,
    )

DEFAULT_MIN_INTENSITY_EXP = 4


class Scene:
    """
    Container for scene objects and trace settings.

    This class manages all components of the optical bench and the limits
    that bound a trace pass.

    Attributes:
        objs (list): All objects in the scene
        optical_objs (list): Only optical objects (those with is_optical=True)
        max_bounces (int): Interaction ceiling per ray lineage
        max_total_rays (int): Ray budget of one trace pass
        max_rays_per_source (int): Cap on the rays a single source may emit
        min_intensity_exp (float): Exponent of the intensity floor; the
            threshold is 10^(-min_intensity_exp). For example:
            - 2 means threshold = 0.01 = 1%
            - 4 (default) means threshold = 1e-4
        view_width (float): Width of the viewing area (escape boundary)
        view_height (float): Height of the viewing area (escape boundary)
        error (str or None): Error message if loading or tracing hit an error
        warning (str or None): Warning message if tracing produced warnings
        name (str or None): Optional name for the scene (used in exports)
    """

    def __init__(self):
        """Initialize an empty scene with default settings."""
        self.objs = []
        self.optical_objs = []
        self._max_bounces = MAX_RAY_BOUNCES
        self._max_total_rays = MAX_TOTAL_RAYS
        self._max_rays_per_source = MAX_RAYS_PER_SOURCE
        self._min_intensity_exp = DEFAULT_MIN_INTENSITY_EXP
        self._view_width = DEFAULT_VIEW_WIDTH
        self._view_height = DEFAULT_VIEW_HEIGHT
        self.error = None
        self.warning = None
        self.name = None               # Optional scene name for exports
        # =====================================================================
        # PYTHON-SPECIFIC FEATURE: Scene Identification
        # =====================================================================
        self._uuid: str = str(uuid_module.uuid4())

    # ==================== Validated settings ====================

    @staticmethod
    def _positive_int(name: str, value) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValueError(f"{name} must be a positive integer, got {value!r}")
        return value

    @staticmethod
    def _positive_number(name: str, value) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not value > 0:
            raise ValueError(f"{name} must be a positive number, got {value!r}")
        if value == float('inf'):
            raise ValueError(f"{name} must be finite, got {value!r}")
        return value

    @property
    def max_bounces(self) -> int:
        """Maximum number of interactions along one ray lineage."""
        return self._max_bounces

    @max_bounces.setter
    def max_bounces(self, value: int) -> None:
        self._max_bounces = self._positive_int('max_bounces', value)

    @property
    def max_total_rays(self) -> int:
        """Maximum number of rays processed in one trace pass."""
        return self._max_total_rays

    @max_total_rays.setter
    def max_total_rays(self, value: int) -> None:
        self._max_total_rays = self._positive_int('max_total_rays', value)

    @property
    def max_rays_per_source(self) -> int:
        """Maximum number of initial rays emitted by one source."""
        return self._max_rays_per_source

    @max_rays_per_source.setter
    def max_rays_per_source(self, value: int) -> None:
        self._max_rays_per_source = self._positive_int('max_rays_per_source', value)

    @property
    def view_width(self) -> float:
        return self._view_width

    @view_width.setter
    def view_width(self, value: float) -> None:
        self._view_width = self._positive_number('view_width', value)

    @property
    def view_height(self) -> float:
        return self._view_height

    @view_height.setter
    def view_height(self, value: float) -> None:
        self._view_height = self._positive_number('view_height', value)

    # =========================================================================
    # PYTHON-SPECIFIC FEATURE: Explicit intensity threshold control
    # =========================================================================

    @property
    def min_intensity_exp(self) -> float:
        """
        Get the minimum intensity exponent.

        Returns:
            The exponent; the threshold is 10^(-exponent).
        """
        return self._min_intensity_exp

    @min_intensity_exp.setter
    def min_intensity_exp(self, value: float) -> None:
        """
        Set the minimum intensity exponent.

        Args:
            value: A positive number.

        Raises:
            ValueError: If value is not a positive number.
        """
        self._min_intensity_exp = self._positive_number('min_intensity_exp', value)

    def get_min_intensity_threshold(self) -> float:
        """
        Get the intensity below which rays are dropped.

        Returns:
            float: 10^(-min_intensity_exp) (1e-4 by default)
        """
        return 10 ** (-self._min_intensity_exp)

    # =========================================================================
    # PYTHON-SPECIFIC FEATURE: Scene Identification
    # =========================================================================

    @property
    def uuid(self) -> str:
        """
        Get the unique identifier for this scene.

        Returns:
            The UUID string (e.g., "550e8400-e29b-41d4-a716-446655440000").
        """
        return self._uuid

    def get_display_name(self) -> str:
        """
        Get a display name for the scene.

        Returns:
            The user-defined name if set, otherwise "Scene_" plus a short UUID.
        """
        if self.name:
            return self.name
        return f"Scene_{self._uuid[:8]}"

    # ==================== Objects ====================

    def add_object(self, obj):
        """
        Add an object to the scene.

        Automatically adds optical objects (those with is_optical=True)
        to the optical_objs list used by the simulator.

        Args:
            obj: The scene object to add

        Returns:
            The object, for chaining.
        """
        self.objs.append(obj)
        if getattr(obj, 'is_optical', False):
            self.optical_objs.append(obj)
        return obj

    def remove_object(self, obj):
        """
        Remove an object from the scene (unknown objects are ignored).

        Args:
            obj: The scene object to remove
        """
        if obj in self.objs:
            self.objs.remove(obj)
        if obj in self.optical_objs:
            self.optical_objs.remove(obj)

    def clear(self):
        """Remove all objects from the scene."""
        self.objs.clear()
        self.optical_objs.clear()
        self.error = None
        self.warning = None

    def get_object(self, uuid_or_name: str):
        """Find an object by uuid or name (None if absent)."""
        for obj in self.objs:
            if obj.uuid == uuid_or_name or obj.name == uuid_or_name:
                return obj
        return None

    @property
    def light_sources(self) -> List[Any]:
        return [obj for obj in self.optical_objs if getattr(obj, 'is_light_source', False)]

    @property
    def detectors(self) -> List[Any]:
        return [obj for obj in self.optical_objs if getattr(obj, 'is_detector', False)]

    def get_bounds(self) -> Optional[Tuple[float, float, float, float]]:
        """
        Bounding box of all component footprints.

        Returns:
            (min_x, min_y, max_x, max_y), or None if no object has a shape.
        """
        shapes = []
        for obj in self.objs:
            shape = obj.get_shape() if hasattr(obj, 'get_shape') else None
            if shape is not None and not shape.is_empty:
                shapes.append(shape)
        if not shapes:
            return None
        return unary_union(shapes).bounds

    # ==================== Serialization ====================

    def serialize(self) -> List[Dict[str, Any]]:
        """
        Snapshot of every object's configuration.

        Returns:
            A list of dictionaries accepted by `scene_objs.create_scene_obj`.
        """
        return [obj.serialize() for obj in self.objs if hasattr(obj, 'serialize')]

    def load(self, json_objs: List[Dict[str, Any]]) -> List[Any]:
        """
        Add objects reconstructed from a `serialize()` snapshot.

        Raises:
            ValueError: If a snapshot carries an unknown type tag.
        """
        if __name__ == "__main__":
            from optics_lab_shapely.core.scene_objs import create_scene_obj
        else:
            from .scene_objs import create_scene_obj
        return [self.add_object(create_scene_obj(self, json_obj)) for json_obj in json_objs]


if __name__ == "__main__":
    scene = Scene()
    print(f"Scene: {scene.get_display_name()}")
    print(f"  max_bounces={scene.max_bounces}, max_total_rays={scene.max_total_rays}")
    print(f"  intensity threshold={scene.get_min_intensity_threshold()}")
    try:
        scene.max_bounces = 0
    except ValueError as e:
        print(f"  max_bounces=0: Correctly raised ValueError ({e})")

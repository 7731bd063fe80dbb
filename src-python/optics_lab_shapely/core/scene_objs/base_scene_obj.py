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

import enum
import json
import copy
import math
import uuid as uuid_module
from typing import Optional, Dict, Any, List, Union, FrozenSet, TYPE_CHECKING
from dataclasses import dataclass, field

if __name__ == "__main__":
    from optics_lab_shapely.core.geometry import Point
    from optics_lab_shapely.core.constants import MIN_RAY_INTENSITY
else:
    from ..geometry import Point
    from ..constants import MIN_RAY_INTENSITY

if TYPE_CHECKING:
    from ..ray import Ray


@dataclass
class Intersection:
    """
    Result of a successful ray/component intersection test.

    Attributes:
        distance: Ray parameter of the hit (distance from the ray origin).
        point: The hit point.
        normal: Unit surface normal, oriented against the incoming ray.
        surface_id: Which surface was hit (edge index or a tag such as 'front').
        extra: Component-specific data computed during the test.
    """
    distance: float
    point: Point
    normal: Point
    surface_id: Union[int, str, None] = None
    extra: Dict[str, Any] = field(default_factory=dict)


class DirtyState(enum.Flag):
    """
    What a configuration change invalidated.

    OPTICS means only interaction parameters changed; GEOMETRY means the
    component's surfaces moved (and detectors were reset).
    """
    NONE = 0
    OPTICS = enum.auto()
    GEOMETRY = enum.auto()


class BaseSceneObj:
    """
    Base class for optical components in the scene.

    This class provides the fundamental interface for all components:
    - Serialization/deserialization of the configuration
    - Validated mutation returning a DirtyState
    - The tracing contract (intersect / interact / on_trace_start)
    - A shapely footprint for bounds and rendering

    Subclasses declare their configuration in `serializable_defaults` and the
    subset of keys that change the surfaces in `geometry_properties`. Cached
    geometry is recomputed synchronously in `_update_geometry()` whenever one
    of those keys changes, so intersection tests never see stale surfaces.
    """

    type: str = ''
    """The type of the object."""

    serializable_defaults: Dict[str, Any] = {}
    """
    The default values of the properties of the object which are to be serialized.
    If some property is default, it will not be serialized and will be deserialized
    to the default values.

    IMPORTANT: Points are stored as dictionaries {'x': ..., 'y': ...}, not as Point
    instances, and angles are stored in degrees.
    """

    geometry_properties: FrozenSet[str] = frozenset({'pos', 'angle'})
    """Property names whose change moves or reshapes the component's surfaces."""

    is_optical: bool = True
    """Whether the object takes part in tracing."""

    is_light_source: bool = False
    """Whether the object emits rays at the start of a trace pass."""

    is_detector: bool = False
    """Whether the object accumulates readings during a trace pass."""

    # =========================================================================
    # PYTHON-SPECIFIC FEATURE: Object Identification
    # =========================================================================
    # - uuid: Auto-generated unique identifier for each object instance
    # - name: Optional human-readable name for easy identification
    # =========================================================================

    def __init__(self, scene, json_obj: Optional[Dict[str, Any]] = None):
        """
        Initialize the component from an optional configuration dictionary.

        Unknown keys are reported through `scene.error`. Invalid values are
        reported through `self.error` and replaced by the default.

        Args:
            scene: The scene the object belongs to.
            json_obj: The JSON object to be deserialized, if any.
        """
        self.scene = scene
        self.error: Optional[str] = None
        """The error message of the object."""

        self.warning: Optional[str] = None
        """The warning message of the object."""

        self._uuid: str = str(uuid_module.uuid4())
        self._name: Optional[str] = None

        serializable_defaults = self.__class__.serializable_defaults
        json_obj = json_obj or {}

        known_keys = ['type'] + list(serializable_defaults.keys())
        for key in json_obj:
            if key not in known_keys:
                # Stored on the scene: an unknown key likely indicates an
                # incompatible scene version
                if scene is not None and hasattr(scene, 'error'):
                    scene.error = (
                        f"Unknown object key '{key}' for type '{self.__class__.type}'"
                    )

        for prop_name, default_value in serializable_defaults.items():
            value = json_obj.get(prop_name, default_value)
            if prop_name in json_obj:
                try:
                    value = self._validate_property(prop_name, value)
                except ValueError as e:
                    self.error = str(e)
                    value = default_value
            setattr(self, prop_name, copy.deepcopy(value))

        self._update_geometry()

    # ==================== Serialization ====================

    def serialize(self) -> Dict[str, Any]:
        """
        Serializes the object to a JSON-compatible dictionary.

        Returns:
            The serialized dictionary object (non-default properties plus 'type').
        """
        json_obj = {'type': self.__class__.type}
        for prop_name, default_value in self.__class__.serializable_defaults.items():
            current_value = getattr(self, prop_name)
            if json.dumps(current_value, sort_keys=True) != json.dumps(default_value, sort_keys=True):
                json_obj[prop_name] = copy.deepcopy(current_value)
        return json_obj

    def are_properties_default(self, property_names: List[str]) -> bool:
        """
        Check whether the given properties of the object are all the default values.

        Args:
            property_names: The property names to be checked.

        Returns:
            Whether the properties are all the default values.
        """
        serializable_defaults = self.__class__.serializable_defaults
        for prop_name in property_names:
            current_value = getattr(self, prop_name)
            default_value = serializable_defaults.get(prop_name)
            if json.dumps(current_value, sort_keys=True) != json.dumps(default_value, sort_keys=True):
                return False
        return True

    # ==================== Mutation ====================

    def _validate_property(self, name: str, value: Any) -> Any:
        """
        Validate (and normalize) a property value.

        The base implementation checks the value against the type of the
        default: numbers must be finite numbers, points must be {'x', 'y'}
        dictionaries with finite coordinates, booleans must be booleans.
        Subclasses extend this with domain checks.

        Returns:
            The value to store.

        Raises:
            ValueError: If the value is not acceptable.
        """
        default = self.__class__.serializable_defaults.get(name)
        if isinstance(default, bool):
            if not isinstance(value, bool):
                raise ValueError(f"Property '{name}' must be a boolean, got {value!r}")
            return value
        if isinstance(default, (int, float)):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"Property '{name}' must be a number, got {value!r}")
            if math.isnan(value) or (math.isinf(value) and name not in self._infinite_allowed()):
                raise ValueError(f"Property '{name}' must be finite, got {value!r}")
            return value
        if isinstance(default, dict) and set(default.keys()) == {'x', 'y'}:
            if isinstance(value, Point):
                value = value.to_dict()
            if not isinstance(value, dict) or 'x' not in value or 'y' not in value:
                raise ValueError(f"Property '{name}' must be a point {{'x', 'y'}}, got {value!r}")
            coords = (value['x'], value['y'])
            if any(isinstance(c, bool) or not isinstance(c, (int, float)) for c in coords):
                raise ValueError(f"Property '{name}' must have numeric coordinates, got {value!r}")
            if not (math.isfinite(value['x']) and math.isfinite(value['y'])):
                raise ValueError(f"Property '{name}' must have finite coordinates, got {value!r}")
            return {'x': value['x'], 'y': value['y']}
        return value

    def _infinite_allowed(self) -> FrozenSet[str]:
        """Property names that may legitimately be infinite (e.g. a flat lens's focal length)."""
        return frozenset()

    @staticmethod
    def _require_positive(name: str, value: float) -> float:
        if value <= 0:
            raise ValueError(f"Property '{name}' must be positive, got {value}")
        return value

    @staticmethod
    def _require_non_negative(name: str, value: float) -> float:
        if value < 0:
            raise ValueError(f"Property '{name}' must be non-negative, got {value}")
        return value

    @staticmethod
    def _require_fraction(name: str, value: float) -> float:
        if not 0 <= value <= 1:
            raise ValueError(f"Property '{name}' must be between 0 and 1, got {value}")
        return value

    def set_property(self, name: str, value: Any) -> DirtyState:
        """
        Change one configuration property.

        Args:
            name: Property name (a key of `serializable_defaults`).
            value: The new value.

        Returns:
            DirtyState.GEOMETRY if the surfaces changed (caches are already
            recomputed), DirtyState.OPTICS for other changes and
            DirtyState.NONE if the value is unchanged.

        Raises:
            ValueError: If the property is unknown or the value is invalid.
        """
        if name not in self.__class__.serializable_defaults:
            raise ValueError(
                f"Unknown property '{name}' for type '{self.__class__.type}'. "
                f"Valid options: {tuple(self.__class__.serializable_defaults)}"
            )
        value = self._validate_property(name, value)
        if json.dumps(getattr(self, name), sort_keys=True) == json.dumps(value, sort_keys=True):
            return DirtyState.NONE
        setattr(self, name, copy.deepcopy(value))
        if name in self.__class__.geometry_properties:
            self._update_geometry()
            self.on_geometry_changed()
            return DirtyState.GEOMETRY
        return DirtyState.OPTICS

    def set_position(self, x: float, y: float) -> DirtyState:
        """Place the component at (x, y)."""
        return self.set_property('pos', {'x': x, 'y': y})

    def set_angle(self, angle_deg: float) -> DirtyState:
        """Set the component orientation in degrees."""
        return self.set_property('angle', angle_deg)

    def move(self, diff_x: float, diff_y: float) -> DirtyState:
        """
        Move the component by the given displacement.

        Args:
            diff_x: The x-coordinate displacement.
            diff_y: The y-coordinate displacement.
        """
        return self.set_position(self.pos['x'] + diff_x, self.pos['y'] + diff_y)

    def rotate(self, angle_deg: float) -> DirtyState:
        """
        Rotate the component about its position.

        Args:
            angle_deg: The angle in degrees. Positive for counter-clockwise.
        """
        return self.set_angle(self.angle + angle_deg)

    def _update_geometry(self) -> None:
        """Recompute cached surfaces from the configuration. Called by the setters."""
        pass

    def on_geometry_changed(self) -> None:
        """Hook called after a GEOMETRY change (detectors reset their readings here)."""
        pass

    # ==================== Tracing contract ====================

    def on_trace_start(self) -> None:
        """The event when a trace pass starts. Detectors reset their readings here."""
        pass

    def intersect(self, origin: Point, direction: Point) -> Optional[Intersection]:
        """
        Find the nearest intersection of a ray with the component.

        Args:
            origin: Ray origin.
            direction: Unit ray direction.

        Returns:
            The Intersection with the smallest positive distance, or None.
        """
        return None

    def interact(self, ray: 'Ray', hit: Intersection, verbose: int = 0) -> List['Ray']:
        """
        Apply the component's physics to a ray that hit it.

        Implementations terminate `ray` with a reason code and return the
        outgoing child rays. The default has no physics: the ray is
        terminated with 'no_interaction_logic'.

        Args:
            ray: The incident ray (already advanced to the hit point).
            hit: The intersection found by `intersect`.
            verbose: Verbosity level (default: 0)
                    0 = silent (no debug output)
                    1 = verbose (show ray processing info)
                    2 = very verbose/debug (show detailed interaction calculations)

        Returns:
            The child rays to trace next.
        """
        ray.terminate('no_interaction_logic')
        return []

    def get_shape(self):
        """
        Footprint of the component as a shapely geometry (None if it has none).

        Used for scene bounds and SVG rendering.
        """
        return None

    # ==================== Helpers for subclasses ====================

    @property
    def position(self) -> Point:
        """The component position as a Point."""
        return Point.from_dict(self.pos)

    @property
    def angle_rad(self) -> float:
        """The component orientation in radians."""
        return math.radians(self.angle)

    def min_intensity(self) -> float:
        """The intensity floor below which child rays are not emitted."""
        if self.scene is not None and hasattr(self.scene, 'get_min_intensity_threshold'):
            return self.scene.get_min_intensity_threshold()
        return MIN_RAY_INTENSITY

    def keep_children(self, ray: 'Ray', children: List['Ray']) -> List['Ray']:
        """Drop children below the intensity floor (unless the ray ignores decay)."""
        if ray.ignore_decay:
            return [c for c in children if not c.terminated]
        floor = self.min_intensity()
        return [c for c in children if not c.terminated and c.intensity >= floor]

    # ==================== Error/Warning Methods ====================

    def get_error(self) -> Optional[str]:
        """Get the error message of the object."""
        return self.error

    def get_warning(self) -> Optional[str]:
        """Get the warning message of the object."""
        return self.warning

    # ==================== Python-Specific: Object Identification ====================

    @property
    def uuid(self) -> str:
        """
        Get the unique identifier for this object.

        Returns:
            The UUID string (e.g., "550e8400-e29b-41d4-a716-446655440000").
        """
        return self._uuid

    @property
    def name(self) -> Optional[str]:
        """Get the human-readable name of the object."""
        return self._name

    @name.setter
    def name(self, value: Optional[str]) -> None:
        self._name = value

    def get_display_name(self) -> str:
        """
        Get a display name for the object.

        Returns the user-defined name if set, otherwise returns a combination
        of the object type and a short UUID suffix for identification.

        Returns:
            A string suitable for display (e.g., "Beam dump" or "Mirror_a1b2c3d4").
        """
        if self._name:
            return self._name
        type_name = self.__class__.type or self.__class__.__name__
        return f"{type_name}_{self._uuid[:8]}"

    def __repr__(self) -> str:
        display = self.get_display_name()
        type_name = self.__class__.type or self.__class__.__name__
        return f"<{type_name} '{display}'>"


if __name__ == "__main__":
    class MockScene:
        def __init__(self):
            self.error = None

    class ExampleComponent(BaseSceneObj):
        type = 'Example'
        serializable_defaults = {
            'pos': {'x': 0, 'y': 0},
            'angle': 0,
            'reflectivity': 0.9,
        }

    scene = MockScene()
    obj = ExampleComponent(scene, {'pos': {'x': 10, 'y': 5}, 'bogus': 1})
    print(f"Serialized: {obj.serialize()}")
    print(f"Scene error: {scene.error}")
    print(f"move -> {obj.move(1, 0)}, reflectivity -> {obj.set_property('reflectivity', 0.5)}")

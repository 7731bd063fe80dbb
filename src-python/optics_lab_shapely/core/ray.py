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
import uuid as _uuid_mod
from typing import Optional, List, Tuple, Union

if __name__ == "__main__":
    from geometry import Point
    from polarization import PolarizationState
    from constants import (
        N_AIR, DEFAULT_WAVELENGTH_NM, PIXELS_PER_NANOMETER,
        MAX_RAY_BOUNCES, MIN_RAY_INTENSITY, MIN_RAY_SEGMENT_LENGTH, GEOMETRY_EPSILON,
    )
    import optics_math
else:
    from .geometry import Point
    from .polarization import PolarizationState
    from .constants import (
        N_AIR, DEFAULT_WAVELENGTH_NM, PIXELS_PER_NANOMETER,
        MAX_RAY_BOUNCES, MIN_RAY_INTENSITY, MIN_RAY_SEGMENT_LENGTH, GEOMETRY_EPSILON,
    )
    from . import optics_math

# Waypoints closer than this to the previous one are not recorded
MIN_HISTORY_STEP = 1e-9


class Ray:
    """
    A single traced ray: an origin, a unit direction and the optical state it carries.

    The ray records every point it has visited in `history` (starting with its
    origin) and accumulates optical phase as the path grows. Once terminated
    it is never traced again; the first termination reason is kept.

    Attributes:
        origin (Point): Start point of the ray.
        direction (Point): Unit propagation direction.
        wavelength (float or None): Wavelength in nm, or None for broadband light.
        intensity (float): Carried power (>= 0), in units of the source power.
        phase (float): Accumulated optical phase in radians (unbounded).
        bounces (int): Number of interactions in this ray's ancestry.
        medium_index (float): Refractive index of the medium the ray travels in.
        polarization (PolarizationState): Polarization carried by the ray.
        ignore_decay (bool): If True, the intensity floor is skipped and plane mirrors
            reflect without their reflectivity loss; other losses still apply.
        history (list of Point): Waypoints, starting with the origin.
        beam_diameter (float): Geometric beam diameter in pixels.
        beam_waist (float or None): Gaussian waist radius w0 in pixels.
        rayleigh_range (float or None): Gaussian Rayleigh range z_R in pixels.
        terminated (bool): Whether the ray has ended.
        end_reason (str or None): Why the ray ended.

    Source Tracking Attributes (PYTHON-SPECIFIC FEATURE):
        source_uuid (str or None): UUID of the light source that emitted this ray
        source_label (str or None): Human-readable label for ray identification

    Lineage Tracking Attributes (PYTHON-SPECIFIC FEATURE):
        uuid (str): Unique identifier for this ray (auto-generated)
        parent_uuid (str or None): UUID of the parent ray that spawned this one
        interaction_type (str): How this ray was created, e.g. 'source',
            'reflect', 'refract', 'tir', 'diffract', 'transmit', 'couple'
    """

    def __init__(
        self,
        origin: Point,
        direction: Point,
        wavelength: Optional[float] = DEFAULT_WAVELENGTH_NM,
        intensity: float = 1.0,
        phase: float = 0.0,
        bounces: int = 0,
        medium_index: float = N_AIR,
        source_uuid: Optional[str] = None,
        polarization: Union[None, float, str, PolarizationState] = None,
        ignore_decay: bool = False,
        history: Optional[List[Point]] = None,
        beam_diameter: float = 1.0,
        beam_waist: Optional[float] = None,
        rayleigh_range: Optional[float] = None
    ) -> None:
        """
        Initialize a ray.

        Invalid input does not raise: a non-finite value terminates the ray
        with 'nan_on_creation' and a zero direction with
        'zero_direction_on_creation'.

        Args:
            origin: Start point.
            direction: Propagation direction (normalized here).
            wavelength: Wavelength in nm, or None for broadband light.
            intensity: Carried power, clamped to >= 0.
            phase: Initial optical phase in radians.
            bounces: Interaction count inherited from the parent.
            medium_index: Refractive index of the current medium.
            source_uuid: UUID of the emitting source.
            polarization: PolarizationState, a legacy scalar (angle in radians
                or 'circular') or None for unpolarized light.
            ignore_decay: Skip the intensity floor and plane-mirror reflectivity loss.
            history: Initial waypoints (defaults to [origin]).
            beam_diameter: Geometric beam diameter in pixels.
            beam_waist: Gaussian waist radius in pixels.
            rayleigh_range: Gaussian Rayleigh range in pixels.
        """
        self.origin: Point = Point.from_dict(origin)
        self.direction: Point = Point(direction.x, direction.y).normalized()
        self.wavelength: Optional[float] = wavelength
        self.intensity: float = max(0.0, intensity) if not math.isnan(intensity) else intensity
        self.phase: float = phase
        self.bounces: int = bounces
        self.medium_index: float = medium_index
        self.polarization: PolarizationState = PolarizationState.from_legacy(polarization)
        self.ignore_decay: bool = ignore_decay
        self.beam_diameter: float = max(0.0, beam_diameter)
        self.beam_waist: Optional[float] = beam_waist
        self.rayleigh_range: Optional[float] = rayleigh_range
        self.history: List[Point] = [p.copy() for p in history] if history else [self.origin.copy()]
        self.terminated: bool = False
        self.end_reason: Optional[str] = None

        # =====================================================================
        # PYTHON-SPECIFIC FEATURE: Source Tracking
        # =====================================================================
        self.source_uuid: Optional[str] = source_uuid
        self.source_label: Optional[str] = None

        # =====================================================================
        # PYTHON-SPECIFIC FEATURE: Ray Lineage Tracking
        # =====================================================================
        self.uuid: str = str(_uuid_mod.uuid4())
        self.parent_uuid: Optional[str] = None
        self.interaction_type: str = 'source'

        if not self._state_is_finite(direction):
            self.terminate('nan_on_creation')
        elif self.direction.length_squared() < GEOMETRY_EPSILON:
            self.terminate('zero_direction_on_creation')

    def _state_is_finite(self, raw_direction: Optional[Point] = None) -> bool:
        direction = raw_direction if raw_direction is not None else self.direction
        return (
            self.origin.is_finite()
            and math.isfinite(direction.x) and math.isfinite(direction.y)
            and math.isfinite(self.intensity)
            and math.isfinite(self.phase)
        )

    # ==================== Derived quantities ====================

    @property
    def effective_wavelength(self) -> float:
        """Wavelength used in optics formulas (broadband light uses the default)."""
        if self.wavelength is None:
            return DEFAULT_WAVELENGTH_NM
        return self.wavelength

    @property
    def wavelength_px(self) -> float:
        """Effective wavelength converted to scene pixels."""
        return self.effective_wavelength * PIXELS_PER_NANOMETER

    @property
    def end_point(self) -> Point:
        """The last recorded waypoint."""
        return self.history[-1]

    @property
    def complex_amplitude(self) -> Tuple[float, float]:
        """(amplitude, phase) with amplitude = sqrt(intensity)."""
        return math.sqrt(max(0.0, self.intensity)), self.phase

    @property
    def complex_field(self) -> complex:
        """The scalar field sqrt(I) exp(i phase)."""
        amplitude, phase = self.complex_amplitude
        return complex(amplitude * math.cos(phase), amplitude * math.sin(phase))

    def width_at(self, distance_from_waist: float) -> float:
        """
        Beam radius at a distance from the waist.

        Returns:
            w0 sqrt(1 + (z/z_R)^2) for Gaussian beams, otherwise half the
            geometric beam diameter (1.0 if that is zero).
        """
        if self.beam_waist is None or self.rayleigh_range is None or self.rayleigh_range <= GEOMETRY_EPSILON:
            return self.beam_diameter / 2.0 if self.beam_diameter > 0 else 1.0
        return optics_math.gaussian_beam_width(self.beam_waist, abs(distance_from_waist), self.rayleigh_range)

    # ==================== Termination ====================

    def terminate(self, reason: str = 'unknown') -> None:
        """Terminate the ray; only the first reason is kept."""
        if not self.terminated:
            self.terminated = True
            self.end_reason = reason

    def should_terminate(
        self,
        max_bounces: int = MAX_RAY_BOUNCES,
        min_intensity: float = MIN_RAY_INTENSITY
    ) -> bool:
        """
        Check the runtime termination conditions, terminating the ray if one holds.

        Checked in order: non-finite state ('nan_value'), zero direction
        ('zero_direction_runtime'), bounce ceiling ('max_bounces') and the
        intensity floor ('low_intensity', skipped when ignore_decay is set).

        Returns:
            True if the ray is (now) terminated.
        """
        if self.terminated:
            return True
        if not self._state_is_finite():
            self.terminate('nan_value')
            return True
        if self.direction.length_squared() < GEOMETRY_EPSILON:
            self.terminate('zero_direction_runtime')
            return True
        if self.bounces >= max_bounces:
            self.terminate('max_bounces')
            return True
        if not self.ignore_decay and self.intensity < min_intensity:
            self.terminate('low_intensity')
            return True
        return False

    # ==================== Propagation ====================

    def advance_to(self, point: Point) -> None:
        """
        Record a new waypoint and accumulate the optical path phase.

        phase += (2 pi / lambda_px) * distance * medium_index. The phase is not
        wrapped so that path differences stay exact.
        """
        if self.terminated or not point.is_finite():
            return
        last = self.history[-1]
        distance = (point - last).length()
        if not math.isfinite(distance) or distance < MIN_HISTORY_STEP:
            return
        wavelength_px = self.wavelength_px
        if wavelength_px > GEOMETRY_EPSILON and math.isfinite(self.medium_index):
            self.phase += (2 * math.pi / wavelength_px) * distance * self.medium_index
        self.history.append(point.copy())

    def spawn(
        self,
        origin: Point,
        direction: Point,
        intensity: float,
        interaction_type: str,
        phase_shift: float = 0.0,
        medium_index: Optional[float] = None,
        polarization: Optional[PolarizationState] = None,
        nudge: bool = True,
        **overrides
    ) -> 'Ray':
        """
        Create a child ray continuing from an interaction.

        The child inherits wavelength, accumulated phase, polarization, beam
        parameters and source, with one more bounce. Its origin is pushed
        MIN_RAY_SEGMENT_LENGTH along its direction so that it does not
        immediately re-hit the surface it leaves.

        Args:
            origin: Interaction point.
            direction: Outgoing direction.
            intensity: Outgoing intensity.
            interaction_type: Lineage tag, e.g. 'reflect' or 'refract'.
            phase_shift: Added to the inherited phase (pi for reflections).
            medium_index: Index of the outgoing medium (defaults to the parent's).
            polarization: Outgoing polarization (defaults to a copy of the parent's).
            nudge: Whether to push the origin along the direction.
            **overrides: Any other constructor argument (e.g. beam_diameter).

        Returns:
            The child Ray.
        """
        unit = direction.normalized()
        start = origin + unit * MIN_RAY_SEGMENT_LENGTH if nudge else origin.copy()
        kwargs = dict(
            wavelength=self.wavelength,
            intensity=intensity,
            phase=self.phase + phase_shift,
            bounces=self.bounces + 1,
            medium_index=self.medium_index if medium_index is None else medium_index,
            source_uuid=self.source_uuid,
            polarization=self.polarization.copy() if polarization is None else polarization,
            ignore_decay=self.ignore_decay,
            beam_diameter=self.beam_diameter,
            beam_waist=self.beam_waist,
            rayleigh_range=self.rayleigh_range,
        )
        kwargs.update(overrides)
        child = Ray(start, direction, **kwargs)
        child.source_label = self.source_label
        child.parent_uuid = self.uuid
        child.interaction_type = interaction_type
        return child

    def copy(self) -> 'Ray':
        """
        Create a copy of this ray.

        The copy gets a new uuid but keeps the lineage links and the termination state.
        """
        new_ray = Ray(
            self.origin,
            self.direction,
            wavelength=self.wavelength,
            intensity=self.intensity,
            phase=self.phase,
            bounces=self.bounces,
            medium_index=self.medium_index,
            source_uuid=self.source_uuid,
            polarization=self.polarization.copy(),
            ignore_decay=self.ignore_decay,
            history=self.history,
            beam_diameter=self.beam_diameter,
            beam_waist=self.beam_waist,
            rayleigh_range=self.rayleigh_range,
        )
        new_ray.terminated = self.terminated
        new_ray.end_reason = self.end_reason
        new_ray.source_label = self.source_label
        new_ray.parent_uuid = self.parent_uuid
        new_ray.interaction_type = self.interaction_type
        return new_ray

    def to_dict(self) -> dict:
        """Plain-data snapshot of the ray (for export and inspection)."""
        pol = self.polarization.scalar
        return {
            'uuid': self.uuid,
            'parent_uuid': self.parent_uuid,
            'source_uuid': self.source_uuid,
            'interaction_type': self.interaction_type,
            'wavelength': self.wavelength,
            'intensity': self.intensity,
            'phase': self.phase,
            'bounces': self.bounces,
            'polarization': pol,
            'end_reason': self.end_reason,
            'history': [p.to_dict() for p in self.history],
        }

    def __repr__(self) -> str:
        wl = 'white' if self.wavelength is None else f"{self.wavelength}nm"
        state = self.end_reason if self.terminated else 'active'
        return (
            f"Ray(origin=({self.origin.x:.3f}, {self.origin.y:.3f}), "
            f"dir=({self.direction.x:.4f}, {self.direction.y:.4f}), "
            f"I={self.intensity:.4g}, {wl}, bounces={self.bounces}, {state})"
        )


if __name__ == "__main__":
    ray = Ray(Point(0, 0), Point(3, 4), wavelength=500, polarization=0.0)
    print(ray)
    ray.advance_to(Point(30, 40))
    print(f"After 50 px: phase={ray.phase:.4f}, history={ray.history}")
    child = ray.spawn(ray.end_point, Point(-1, 0), ray.intensity * 0.5, 'reflect', phase_shift=math.pi)
    print(child, child.parent_uuid == ray.uuid)
    bad = Ray(Point(0, 0), Point(0, 0))
    print(bad.end_reason)

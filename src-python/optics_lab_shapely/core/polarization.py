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

import cmath
import math
from typing import Optional, Tuple, Union

import numpy as np

if __name__ == "__main__":
    import optics_math
else:
    from . import optics_math

# Jones vectors with a squared norm below this are treated as unpolarized
MIN_JONES_NORM_SQUARED = 1e-9

# Phase tolerance (radians) when classifying linear/circular states
PHASE_TOLERANCE = 1e-6


class PolarizationState:
    """
    Polarization carried by a ray.

    A single representation replaces the old split between a scalar angle and
    a Jones vector: the state is either unpolarized (``jones is None``) or a
    unit-norm complex Jones vector. The scalar view (an angle, ``'circular'``,
    ``'elliptical'`` or ``None``) is derived on demand for display and for
    callers that only understand linear polarization.

    Attributes:
        jones (numpy.ndarray or None): Unit-norm complex 2-vector, or None for
            unpolarized light.
    """

    __slots__ = ('jones',)

    def __init__(self, jones: Optional[np.ndarray] = None):
        if jones is not None:
            jones = optics_math.jones_normalize(np.asarray(jones, dtype=complex))
        self.jones: Optional[np.ndarray] = jones

    # ==================== Constructors ====================

    @classmethod
    def unpolarized(cls) -> 'PolarizationState':
        """Natural (unpolarized) light."""
        return cls(None)

    @classmethod
    def linear(cls, angle: float) -> 'PolarizationState':
        """Linear polarization at `angle` radians."""
        return cls(optics_math.jones_linear(angle))

    @classmethod
    def circular(cls, right_handed: bool = True) -> 'PolarizationState':
        """Circular polarization."""
        return cls(optics_math.jones_circular(right_handed))

    @classmethod
    def from_jones(cls, vec: Optional[np.ndarray]) -> 'PolarizationState':
        """Wrap an arbitrary Jones vector (normalized; negligible vectors become unpolarized)."""
        return cls(vec)

    @classmethod
    def from_legacy(cls, value: Union[None, float, str, 'PolarizationState']) -> 'PolarizationState':
        """
        Promote a scalar polarization description to a state.

        Args:
            value: None (unpolarized), a linear angle in radians, the string
                'circular' (right-handed), or an existing state (copied).

        Raises:
            ValueError: If the value cannot be interpreted.
        """
        if value is None:
            return cls.unpolarized()
        if isinstance(value, PolarizationState):
            return value.copy()
        if isinstance(value, str):
            if value == 'circular':
                return cls.circular(True)
            raise ValueError(
                f"Invalid polarization '{value}'. Valid options: None, an angle in radians, 'circular'"
            )
        if isinstance(value, (int, float)) and math.isfinite(value):
            return cls.linear(float(value))
        raise ValueError(f"Invalid polarization value: {value!r}")

    # ==================== Queries ====================

    @property
    def is_polarized(self) -> bool:
        return self.jones is not None

    @property
    def scalar(self) -> Union[None, float, str]:
        """
        Legacy scalar view of the state.

        Returns:
            None for unpolarized light, a linear angle in (-pi, pi] when the
            two field components are in phase (or opposite), 'circular' for
            equal magnitudes in quadrature and 'elliptical' otherwise.
        """
        if self.jones is None:
            return None
        ex, ey = self.jones[0], self.jones[1]
        if optics_math.jones_intensity(self.jones) < MIN_JONES_NORM_SQUARED:
            return None
        mag_x = abs(ex)
        mag_y = abs(ey)
        if mag_x < PHASE_TOLERANCE or mag_y < PHASE_TOLERANCE:
            # Pure x or y component: strip the global phase and read the angle
            ref = ex if mag_x >= mag_y else ey
            g = cmath.exp(-1j * cmath.phase(ref))
            return optics_math.wrap_angle(math.atan2((ey * g).real, (ex * g).real))
        delta = optics_math.wrap_angle(cmath.phase(ey) - cmath.phase(ex))
        if abs(delta) < PHASE_TOLERANCE or abs(abs(delta) - math.pi) < PHASE_TOLERANCE:
            g = cmath.exp(-1j * cmath.phase(ex))
            return optics_math.wrap_angle(math.atan2((ey * g).real, (ex * g).real))
        if abs(mag_x - mag_y) < PHASE_TOLERANCE and abs(abs(delta) - math.pi / 2) < PHASE_TOLERANCE:
            return 'circular'
        return 'elliptical'

    def intensity_fraction(self, axis_angle: float) -> float:
        """
        Fraction of the power along a linear axis (what an ideal polarizer passes).

        Unpolarized light gives one half.
        """
        if self.jones is None:
            return 0.5
        projected = optics_math.jones_apply(optics_math.linear_polarizer_matrix(axis_angle), self.jones)
        return optics_math.jones_intensity(projected)

    def transformed(self, matrix: np.ndarray) -> Tuple['PolarizationState', float]:
        """
        Pass the state through a Jones matrix.

        Returns:
            (new state, transmitted power fraction |M v|^2). Unpolarized light
            is returned unchanged with a fraction of 1; callers that treat
            natural light differently check `is_polarized` first.
        """
        if self.jones is None:
            return self.copy(), 1.0
        out = optics_math.jones_apply(matrix, self.jones)
        fraction = optics_math.jones_intensity(out)
        return PolarizationState(out), fraction

    def rotated(self, theta: float) -> 'PolarizationState':
        """The state with its polarization rotated by `theta` radians (unpolarized stays unpolarized)."""
        if self.jones is None:
            return self.copy()
        return PolarizationState(optics_math.jones_rotate(self.jones, theta))

    def linear_angle(self) -> Optional[float]:
        """The polarization angle when the state is linear, otherwise None."""
        value = self.scalar
        if isinstance(value, float):
            return value
        return None

    def copy(self) -> 'PolarizationState':
        return PolarizationState(None if self.jones is None else self.jones.copy())

    def __repr__(self) -> str:
        value = self.scalar
        if value is None:
            return "PolarizationState(unpolarized)"
        if isinstance(value, float):
            return f"PolarizationState(linear {math.degrees(value):.2f} deg)"
        return f"PolarizationState({value})"


if __name__ == "__main__":
    for state in (
        PolarizationState.unpolarized(),
        PolarizationState.linear(math.radians(30)),
        PolarizationState.circular(),
        PolarizationState.from_jones(np.array([1.0, 0.5j])),
    ):
        print(f"{state!r}: scalar={state.scalar}")

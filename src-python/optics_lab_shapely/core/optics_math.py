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

"""
Pure optical formulas shared by the components.

Nothing in this module touches scene state. Vectors are geometry.Point
instances, Jones vectors are numpy complex arrays of shape (2,) and Jones
matrices are numpy complex arrays of shape (2, 2).
"""

import cmath
import math
from typing import Dict, Optional, Tuple, List, Sequence

import numpy as np

if __name__ == "__main__":
    from geometry import Point
    from constants import (
        N_AIR, GEOMETRY_EPSILON, PIXELS_PER_NANOMETER,
        CAUCHY_REFERENCE_WAVELENGTH_NM,
    )
else:
    from .geometry import Point
    from .constants import (
        N_AIR, GEOMETRY_EPSILON, PIXELS_PER_NANOMETER,
        CAUCHY_REFERENCE_WAVELENGTH_NM,
    )

# Critical-angle slack: sin^2(theta_t) within this of 1 counts as TIR
TIR_TOLERANCE = 1e-9

# Bragg angles beyond this are treated as unphysical for an AOM
MAX_BRAGG_ANGLE = math.pi / 6

# Fiber runs are scaled so that 1e6 scene pixels count as one kilometre
PIXELS_PER_KILOMETER = 1e6


def wrap_angle(angle: float) -> float:
    """Wrap an angle in radians into (-pi, pi]."""
    wrapped = math.atan2(math.sin(angle), math.cos(angle))
    if wrapped <= -math.pi:
        wrapped += 2 * math.pi
    return wrapped


# =============================================================================
# Reflection and refraction
# =============================================================================

def reflect(direction: Point, normal: Point) -> Point:
    """
    Mirror reflection r = d - 2 (d.n) n.

    If the result degenerates to (almost) zero length, the normal itself is
    returned so the outgoing ray still has a valid direction.
    """
    r = direction - normal * (2.0 * direction.dot(normal))
    if r.length() < GEOMETRY_EPSILON:
        return normal.normalized()
    return r.normalized()


def fresnel_rs_rp(n1: float, n2: float, cos_i: float, cos_t: float) -> Tuple[float, float]:
    """
    Fresnel amplitude reflection coefficients.

    Returns:
        (rs, rp) for s- and p-polarized light.
    """
    rs_den = n1 * cos_i + n2 * cos_t
    rp_den = n1 * cos_t + n2 * cos_i
    rs = (n1 * cos_i - n2 * cos_t) / rs_den if abs(rs_den) > GEOMETRY_EPSILON else 1.0
    rp = (n1 * cos_t - n2 * cos_i) / rp_den if abs(rp_den) > GEOMETRY_EPSILON else 1.0
    return rs, rp


def fresnel_reflectance(n1: float, n2: float, cos_i: float) -> Tuple[float, float, bool]:
    """
    Unpolarized Fresnel power reflectance at an interface.

    Args:
        n1: Index on the incident side.
        n2: Index on the transmitted side.
        cos_i: Cosine of the incidence angle (clamped into [0, 1]).

    Returns:
        (R, cos_t, is_tir). On total internal reflection R is 1 and cos_t is 0.
    """
    cos_i = min(1.0, max(0.0, cos_i))
    sin_t_sq = (n1 / n2) ** 2 * (1.0 - cos_i * cos_i)
    if n1 > n2 and sin_t_sq >= 1.0 - TIR_TOLERANCE:
        return 1.0, 0.0, True
    cos_t = math.sqrt(max(0.0, 1.0 - sin_t_sq))
    rs, rp = fresnel_rs_rp(n1, n2, cos_i, cos_t)
    reflectance = 0.5 * (rs * rs + rp * rp)
    return min(1.0, max(0.0, reflectance)), cos_t, False


def refract(direction: Point, normal: Point, n1: float, n2: float) -> Tuple[Optional[Point], float, float]:
    """
    Snell refraction in vector form.

    Args:
        direction: Unit incident direction.
        normal: Unit surface normal facing the incident ray (d.n < 0).
        n1: Index on the incident side.
        n2: Index on the transmitted side.

    Returns:
        (refracted_direction, cos_i, cos_t); the direction is None on TIR.
    """
    cos_i = min(1.0, max(0.0, -direction.dot(normal)))
    eta = n1 / n2
    sin_t_sq = eta * eta * (1.0 - cos_i * cos_i)
    if n1 > n2 and sin_t_sq >= 1.0 - TIR_TOLERANCE:
        return None, cos_i, 0.0
    cos_t = math.sqrt(max(0.0, 1.0 - sin_t_sq))
    t = direction * eta + normal * (eta * cos_i - cos_t)
    return t.normalized(), cos_i, cos_t


def critical_angle(n1: float, n2: float) -> Optional[float]:
    """Critical angle in radians going from n1 into n2, or None when n1 <= n2."""
    if n1 <= n2:
        return None
    return math.asin(n2 / n1)


def brewster_angle(n1: float, n2: float) -> float:
    """Brewster angle in radians going from n1 into n2."""
    return math.atan2(n2, n1)


# =============================================================================
# Dispersion and absorption
# =============================================================================

def cauchy_a(n_ref: float, b: float, reference_nm: float = CAUCHY_REFERENCE_WAVELENGTH_NM) -> float:
    """Cauchy A coefficient so that n(reference) equals `n_ref`."""
    return n_ref - b / (reference_nm * reference_nm)


def cauchy_index(wavelength_nm: Optional[float], n_ref: float, b: float) -> float:
    """
    Wavelength-dependent index n(lambda) = A + B / lambda^2.

    The reference index is returned unchanged when there is no dispersion or
    no usable wavelength. The result is never below 1.
    """
    if b <= GEOMETRY_EPSILON or wavelength_nm is None or wavelength_nm <= 0:
        return max(1.0, n_ref)
    n = cauchy_a(n_ref, b) + b / (wavelength_nm * wavelength_nm)
    return max(1.0, n)


def absorption_factor(alpha: float, path_length: float) -> float:
    """Beer-Lambert transmission exp(-alpha * L)."""
    if alpha <= 0 or path_length <= 0:
        return 1.0
    return math.exp(-alpha * path_length)


# =============================================================================
# Diffraction gratings
# =============================================================================

def grating_order_sine(sin_i: float, order: int, wavelength_px: float, period_px: float) -> float:
    """Grating equation: sin(theta_m) = sin(theta_i) + m * lambda / d."""
    return sin_i + order * wavelength_px / period_px


def grating_orders(sin_i: float, max_order: int, wavelength_px: float, period_px: float) -> List[Tuple[int, float]]:
    """
    Propagating diffraction orders.

    Returns:
        List of (m, sin_theta_m) for every |m| <= max_order with |sin_theta_m| <= 1.
    """
    orders = []
    if period_px <= 0:
        return orders
    for m in range(-max_order, max_order + 1):
        sin_m = grating_order_sine(sin_i, m, wavelength_px, period_px)
        if abs(sin_m) <= 1.0 + TIR_TOLERANCE:
            orders.append((m, max(-1.0, min(1.0, sin_m))))
    return orders


# =============================================================================
# Jones calculus
# =============================================================================

def jones_linear(angle: float) -> np.ndarray:
    """Jones vector of linear polarization at `angle` radians."""
    return np.array([math.cos(angle), math.sin(angle)], dtype=complex)


def jones_circular(right_handed: bool = True) -> np.ndarray:
    """Jones vector of circular polarization, (1, -i)/sqrt(2) for right-handed."""
    s = 1.0 / math.sqrt(2.0)
    return np.array([s, (-1j if right_handed else 1j) * s], dtype=complex)


def rotation_matrix(theta: float) -> np.ndarray:
    """Rotation matrix [[c, -s], [s, c]]."""
    c = math.cos(theta)
    s = math.sin(theta)
    return np.array([[c, -s], [s, c]], dtype=complex)


def jones_apply(matrix: np.ndarray, vec: np.ndarray) -> np.ndarray:
    """Apply a Jones matrix to a Jones vector."""
    return matrix @ vec


def jones_rotate(vec: np.ndarray, theta: float) -> np.ndarray:
    """Rotate the polarization of a Jones vector by `theta` radians."""
    return rotation_matrix(theta) @ vec


def linear_polarizer_matrix(axis: float) -> np.ndarray:
    """Projector onto the linear polarization at `axis` radians."""
    c = math.cos(axis)
    s = math.sin(axis)
    return np.array([[c * c, s * c], [s * c, s * s]], dtype=complex)


def retarder_matrix(retardance: float) -> np.ndarray:
    """Retarder with fast axis along x: diag(1, exp(i * retardance))."""
    return np.array([[1, 0], [0, cmath.exp(1j * retardance)]], dtype=complex)


def half_wave_matrix() -> np.ndarray:
    """Half-wave plate with fast axis along x: diag(1, -1)."""
    return np.array([[1, 0], [0, -1]], dtype=complex)


def quarter_wave_matrix() -> np.ndarray:
    """Quarter-wave plate with fast axis along x: diag(1, i)."""
    return np.array([[1, 0], [0, 1j]], dtype=complex)


def jones_in_frame(matrix: np.ndarray, vec: np.ndarray, axis_angle: float) -> np.ndarray:
    """Apply an element matrix whose axis is rotated by `axis_angle`: R(a) M R(-a) v."""
    return rotation_matrix(axis_angle) @ matrix @ rotation_matrix(-axis_angle) @ vec


def jones_intensity(vec: np.ndarray) -> float:
    """Squared norm |Ex|^2 + |Ey|^2."""
    return float(np.real(np.vdot(vec, vec)))


def jones_normalize(vec: np.ndarray) -> Optional[np.ndarray]:
    """Unit-norm copy of a Jones vector, or None when its norm is negligible."""
    norm_sq = jones_intensity(vec)
    if norm_sq < GEOMETRY_EPSILON:
        return None
    return vec / math.sqrt(norm_sq)


# =============================================================================
# Gaussian beams and ABCD matrices
# =============================================================================

def rayleigh_range(w0: float, wavelength_nm: float) -> float:
    """Rayleigh range z_R = pi w0^2 / lambda, all lengths in pixels."""
    wavelength_px = wavelength_nm * PIXELS_PER_NANOMETER
    if wavelength_px <= 0:
        return float('inf')
    return math.pi * w0 * w0 / wavelength_px


def gaussian_beam_width(w0: float, z: float, z_r: float) -> float:
    """Beam radius w(z) = w0 sqrt(1 + (z / z_R)^2)."""
    if z_r <= 0 or not math.isfinite(z_r):
        return w0
    return w0 * math.sqrt(1.0 + (z / z_r) ** 2)


def thin_lens_abcd(focal_length: float) -> np.ndarray:
    """ABCD matrix [[1, 0], [-1/f, 1]] of a thin lens (identity for infinite f)."""
    if not math.isfinite(focal_length) or focal_length == 0:
        return np.array([[1.0, 0.0], [0.0, 1.0]])
    return np.array([[1.0, 0.0], [-1.0 / focal_length, 1.0]])


def transform_q(q: complex, abcd: Sequence[Sequence[float]]) -> complex:
    """Complex beam parameter transform q' = (A q + B) / (C q + D)."""
    (a, b), (c, d) = abcd
    return (a * q + b) / (c * q + d)


def q_from_waist(z: float, z_r: float) -> complex:
    """Complex beam parameter q = z + i z_R at distance z past the waist."""
    return complex(z, z_r)


def waist_from_q(q: complex, wavelength_nm: float) -> Tuple[float, float]:
    """
    Recover (w0, z) from a complex beam parameter.

    Returns:
        (waist radius, distance past the waist) in pixels.
    """
    wavelength_px = wavelength_nm * PIXELS_PER_NANOMETER
    z_r = q.imag
    if z_r <= 0:
        return 0.0, q.real
    return math.sqrt(z_r * wavelength_px / math.pi), q.real


def transform_gaussian_beam(w0: float, z_before: float, focal_length: float, wavelength_nm: float) -> Dict[str, float]:
    """
    Propagate a Gaussian beam through a thin lens.

    Args:
        w0: Incoming waist radius in pixels.
        z_before: Distance from the incoming waist to the lens in pixels.
        focal_length: Lens focal length (infinite for no focusing).
        wavelength_nm: Wavelength in nm.

    Returns:
        {'waist': new waist radius, 'waist_distance': distance from the lens
        to the new waist (positive after the lens), 'rayleigh_range': new z_R}
    """
    z_r = rayleigh_range(w0, wavelength_nm)
    q_out = transform_q(q_from_waist(z_before, z_r), thin_lens_abcd(focal_length))
    new_w0, z_after = waist_from_q(q_out, wavelength_nm)
    return {
        'waist': new_w0,
        'waist_distance': -z_after,
        'rayleigh_range': q_out.imag,
    }


# =============================================================================
# Modulation and coupling
# =============================================================================

def bragg_angle(wavelength_nm: float, rf_frequency_mhz: float, acoustic_velocity: float) -> float:
    """
    Deflection angle of the first AOM order, theta = lambda f / v.

    Args:
        wavelength_nm: Optical wavelength in nm.
        rf_frequency_mhz: Drive frequency in MHz.
        acoustic_velocity: Sound velocity in m/s.

    Returns:
        Angle in radians, clamped to +-pi/6.
    """
    if acoustic_velocity <= 0:
        return 0.0
    theta = (wavelength_nm * 1e-9) * (rf_frequency_mhz * 1e6) / acoustic_velocity
    return max(-MAX_BRAGG_ANGLE, min(MAX_BRAGG_ANGLE, theta))


def db_loss_factor(db_per_km: float, length_px: float) -> float:
    """Power transmission 10^(-dB / 10) for a loss of `db_per_km` over `length_px`."""
    if db_per_km <= 0 or length_px <= 0:
        return 1.0
    total_db = db_per_km * (length_px / PIXELS_PER_KILOMETER)
    return 10 ** (-total_db / 10.0)


def fiber_acceptance_angle(numerical_aperture: float, n_outside: float = N_AIR) -> float:
    """Half-angle of the fiber acceptance cone, asin(NA / n)."""
    return math.asin(max(0.0, min(1.0, numerical_aperture / n_outside)))


if __name__ == "__main__":
    print("Optics math sanity checks\n")
    r, cos_t, tir = fresnel_reflectance(1.0, 1.5, 1.0)
    print(f"Normal incidence air->glass: R={r:.4f} (expect 0.04)")
    print(f"Critical angle glass->air: {math.degrees(critical_angle(1.5, 1.0)):.2f} deg")
    print(f"Brewster angle air->glass: {math.degrees(brewster_angle(1.0, 1.5)):.2f} deg")
    v = jones_in_frame(half_wave_matrix(), jones_linear(math.radians(10)), math.radians(30))
    print(f"HWP at 30 deg maps 10 deg to {math.degrees(math.atan2(v[1].real, v[0].real)):.1f} deg")

"""
===============================================================================
COMPONENT PHYSICS - Feature Verification Test
===============================================================================

Each test fires hand-made rays at a single component and checks the
intersect() / interact() contract:

1. MIRRORS: flat reflection identity and reflectivity, spherical and
   parabolic focusing
2. GLASS: matched-index pass-through, Fresnel split with R + T = 1,
   total internal reflection, Beer-Lambert absorption, thin lens focusing
3. BLOCKERS: aperture blocking and beam clipping, grating orders
4. POLARIZATION: Malus's law, wave plates, (polarizing) beam splitters,
   Faraday rotator non-reciprocity, isolator blocking
5. SPECIAL: AOM order split, fiber coupling and propagation loss
6. DETECTORS: coherent screen sums, photodiode integration

Run with:
    python developer_tests/test_components.py

Or with pytest:
    pytest developer_tests/test_components.py -v
===============================================================================
"""

import sys
import math
from pathlib import Path

# Add the src-python directory to the path
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from optics_lab_shapely.core.geometry import Point
from optics_lab_shapely.core.ray import Ray
from optics_lab_shapely.core.scene import Scene
from optics_lab_shapely.core.constants import N_AIR
from optics_lab_shapely.core.polarization import PolarizationState
from optics_lab_shapely.core.scene_objs import (
    Mirror, SphericalMirror, ParabolicMirror,
    ThinLens, DielectricBlock, Prism,
    Aperture, DiffractionGrating,
    Polarizer, HalfWavePlate, QuarterWavePlate, BeamSplitter,
    FaradayRotator, FaradayIsolator,
    AcoustoOpticModulator, FiberCoupler,
    Screen, Photodiode, DirtyState,
)


# =============================================================================
# HELPERS
# =============================================================================

def assert_close(actual, expected, tol=1e-9, msg=""):
    """Assert that two values are close within tolerance."""
    if abs(actual - expected) > tol:
        raise AssertionError(
            f"{msg}: expected {expected}, got {actual} (diff: {abs(actual - expected)})"
        )


def assert_direction(actual, expected, tol=1e-9, msg=""):
    expected = expected.normalized()
    assert_close(actual.x, expected.x, tol, f"{msg} (x)")
    assert_close(actual.y, expected.y, tol, f"{msg} (y)")


def angle_mod_pi_diff(a, b):
    d = (a - b) % math.pi
    return min(d, math.pi - d)


def fire(component, origin, direction, **ray_kwargs):
    """
    Shoot one ray at a component.

    Returns:
        (incident ray, intersection, child rays)
    """
    ray = Ray(Point(*origin), Point(*direction), **ray_kwargs)
    hit = component.intersect(ray.origin, ray.direction)
    assert hit is not None, f"ray from {origin} missed {component.get_display_name()}"
    ray.advance_to(hit.point)
    children = component.interact(ray, hit)
    return ray, hit, children


def continue_ray(component, ray):
    """Follow a child ray to its next hit on the same component."""
    hit = component.intersect(ray.origin, ray.direction)
    assert hit is not None, "child ray did not reach the exit face"
    ray.advance_to(hit.point)
    return component.interact(ray, hit)


# =============================================================================
# MIRRORS
# =============================================================================

def test_flat_mirror_reflection():
    """Reflection identity, reflectivity and the pi phase shift."""
    print("\n" + "=" * 60)
    print("TEST: Flat mirror")
    print("=" * 60)

    scene = Scene()
    mirror = Mirror(scene, {'pos': {'x': 100, 'y': 0}, 'angle': 135})
    ray, hit, children = fire(mirror, (0, 0), (1, 0))

    assert ray.end_reason == 'reflected'
    assert len(children) == 1
    child = children[0]
    assert_direction(child.direction, Point(0, -1), 1e-9, "reflected direction")
    assert_close(child.direction.dot(hit.normal), -ray.direction.dot(hit.normal), 1e-12, "identity")
    assert_close(child.intensity, 0.99, msg="reflectivity")
    assert_close(child.phase, ray.phase + math.pi, 1e-9, "phase shift")
    assert child.bounces == 1
    assert child.parent_uuid == ray.uuid
    assert child.interaction_type == 'reflect'
    print(f"  +x ray -> {child.direction}, I={child.intensity} - PASS")


def test_mirror_ignore_decay_keeps_intensity():
    scene = Scene()
    mirror = Mirror(scene, {'pos': {'x': 100, 'y': 0}, 'angle': 90, 'reflectivity': 0.5})
    _, _, children = fire(mirror, (0, 0), (1, 0), ignore_decay=True)
    assert_close(children[0].intensity, 1.0, msg="ignore_decay")


def test_spherical_mirror_focus():
    """A paraxial ray parallel to the axis crosses it near R/2."""
    scene = Scene()
    mirror = SphericalMirror(scene, {'pos': {'x': 0, 'y': 0}, 'angle': 0, 'radius': 200})
    assert mirror.focal_length == 100

    _, hit, children = fire(mirror, (5, 300), (0, -1))
    assert hit.point.y < 1.0, "hit near the vertex"
    child = children[0]
    # Where the reflected ray crosses the axis x = 0
    t = -child.origin.x / child.direction.x
    crossing = child.origin.y + t * child.direction.y
    assert_close(crossing, 100.0, 0.1, "axis crossing")
    print(f"  Axis crossing at y={crossing:.4f} (f = 100) - PASS")


def test_flat_spherical_mirror():
    scene = Scene()
    mirror = SphericalMirror(scene, {'radius': math.inf})
    assert mirror.is_plane
    assert math.isinf(mirror.focal_length)
    _, _, children = fire(mirror, (10, 50), (0, -1))
    assert_direction(children[0].direction, Point(0, 1), 1e-9, "flat reflection")


def test_parabolic_mirror_focus():
    """Rays parallel to the axis all reflect through the focus."""
    print("\n" + "=" * 60)
    print("TEST: Parabolic mirror")
    print("=" * 60)

    scene = Scene()
    mirror = ParabolicMirror(scene, {'pos': {'x': 0, 'y': 0}, 'angle': 0, 'focal_length': 100})
    assert_close(mirror.focus.x, 100.0, msg="focus x")

    for height in (-40, -20, 5, 20, 45):
        _, hit, children = fire(mirror, (300, height), (-1, 0))
        assert_close(hit.point.x, height * height / 400.0, 1e-9, "hit on parabola")
        child = children[0]
        to_focus = (mirror.focus - hit.point).normalized()
        assert_close(child.direction.cross(to_focus), 0.0, 1e-9, f"through focus at h={height}")
        assert child.direction.dot(to_focus) > 0
    print("  5 parallel rays pass through the focus - PASS")


def test_parabolic_mirror_rejects_non_positive_focal_length():
    scene = Scene()
    mirror = ParabolicMirror(scene, {'focal_length': -50})
    assert mirror.focal_length > 0
    assert mirror.warning is not None


# =============================================================================
# GLASS
# =============================================================================

def test_matched_index_block_passes_collinear():
    """A block with the index of air transmits the full ray without deviation."""
    scene = Scene()
    block = DielectricBlock(scene, {
        'pos': {'x': 100, 'y': 0},
        'base_refractive_index': N_AIR,
        'dispersion_b': 0,
        'absorption_coeff': 0,
    })
    direction = Point.from_angle(math.radians(20))
    ray, _, children = fire(block, (0, -20), (direction.x, direction.y))
    assert ray.end_reason == 'pass_boundary_block'
    assert len(children) == 1
    assert_direction(children[0].direction, direction, 1e-12, "collinear")
    assert_close(children[0].intensity, 1.0, msg="no loss")


def test_block_normal_incidence_split():
    """Air to n=1.5 at normal incidence reflects about 4%."""
    scene = Scene()
    block = DielectricBlock(scene, {'pos': {'x': 100, 'y': 0}})
    ray, _, children = fire(block, (0, 0), (1, 0))
    assert ray.end_reason == 'split_block'
    reflected = [c for c in children if c.interaction_type == 'reflect']
    refracted = [c for c in children if c.interaction_type == 'refract']
    assert len(reflected) == 1 and len(refracted) == 1
    assert_close(reflected[0].intensity, 0.04, 1e-3, "R")
    assert_direction(reflected[0].direction, Point(-1, 0), 1e-12, "reflected back")
    assert_close(refracted[0].medium_index, 1.5, 1e-9, "inside medium")
    assert_close(reflected[0].phase, ray.phase + math.pi, 1e-9, "reflection phase")


def test_block_energy_conservation_oblique():
    """On entry the two children carry the whole incident intensity."""
    scene = Scene()
    block = DielectricBlock(scene, {'pos': {'x': 100, 'y': 0}})
    for deg in (10, 30, 50):
        direction = Point.from_angle(math.radians(deg))
        origin_y = -math.tan(math.radians(deg)) * 50
        _, _, children = fire(block, (0, origin_y), (direction.x, direction.y))
        total = sum(c.intensity for c in children)
        assert_close(total, 1.0, 1e-12, f"R + T at {deg} deg")


def test_block_total_internal_reflection():
    """Inside glass at 45 degrees (critical angle ~41.8) the ray is totally reflected."""
    print("\n" + "=" * 60)
    print("TEST: Total internal reflection")
    print("=" * 60)

    scene = Scene()
    block = DielectricBlock(scene, {'pos': {'x': 100, 'y': 0}, 'absorption_coeff': 0})
    direction = Point.from_angle(math.radians(45))
    ray, hit, children = fire(block, (100, 0), (direction.x, direction.y), medium_index=1.5)
    assert hit.extra['entering'] is False
    assert ray.end_reason == 'tir_block'
    assert len(children) == 1
    assert children[0].interaction_type == 'tir'
    assert_close(children[0].intensity, 1.0, 1e-12, "TIR keeps all power")
    assert_direction(children[0].direction, Point(direction.x, -direction.y), 1e-9, "mirror image")
    print("  Single reflected child with R = 1 - PASS")


def test_block_absorption_on_exit():
    scene = Scene()
    block = DielectricBlock(scene, {'pos': {'x': 100, 'y': 0}, 'absorption_coeff': 0.01})
    _, _, children = fire(block, (100, 0), (0, 1), medium_index=1.5)
    total = sum(c.intensity for c in children)
    # 30 px from the centre to the top face
    assert_close(total, math.exp(-0.3), 1e-9, "Beer-Lambert over 30 px")

    # Bulk absorption is not a decay the ray may ignore
    _, _, children = fire(block, (100, 0), (0, 1), medium_index=1.5, ignore_decay=True)
    total = sum(c.intensity for c in children)
    assert_close(total, math.exp(-0.3), 1e-9, "absorption with ignore_decay")


def test_prism_entry_refraction():
    scene = Scene()
    prism = Prism(scene, {'pos': {'x': 100, 'y': 0}, 'angle': 180})
    _, hit, children = fire(prism, (0, 0), (1, 0))
    refracted = [c for c in children if c.interaction_type == 'refract']
    assert hit.extra['entering'] is True
    assert len(refracted) == 1
    assert refracted[0].medium_index > 1.4


def test_thin_lens_on_axis_and_focusing():
    """On-axis rays are undeviated; parallel rays meet at the focal point."""
    print("\n" + "=" * 60)
    print("TEST: Thin lens")
    print("=" * 60)

    scene = Scene()
    lens = ThinLens(scene, {'pos': {'x': 100, 'y': 0}, 'focal_length': 100})
    ray, _, children = fire(lens, (0, 0), (1, 0))
    assert ray.end_reason == 'refracted_lens'
    assert_direction(children[0].direction, Point(1, 0), 1e-9, "on axis")
    assert_close(children[0].intensity, 0.98, msg="quality")

    for height in (-30, -10, 20):
        _, _, children = fire(lens, (0, height), (1, 0))
        child = children[0]
        t = (200 - child.origin.x) / child.direction.x
        y_at_focus = child.origin.y + t * child.direction.y
        assert_close(y_at_focus, 0.0, 1e-6, f"focus crossing from h={height}")

    assert lens.get_focal_length(450) < 100 < lens.get_focal_length(650)
    print("  Parallel rays cross the axis at x = 200 - PASS")


def test_flat_lens_passes_through():
    scene = Scene()
    lens = ThinLens(scene, {'pos': {'x': 100, 'y': 0}, 'focal_length': 0})
    ray, _, children = fire(lens, (0, 10), (1, 0))
    assert ray.end_reason == 'pass_flat_lens'
    assert_direction(children[0].direction, Point(1, 0), 1e-12, "flat")


# =============================================================================
# BLOCKERS
# =============================================================================

def test_aperture_blocks_and_clips():
    """Opaque parts absorb; openings transmit and clip the beam diameter."""
    print("\n" + "=" * 60)
    print("TEST: Aperture")
    print("=" * 60)

    scene = Scene()
    aperture = Aperture(scene, {
        'pos': {'x': 100, 'y': 0}, 'length': 60,
        'number_of_slits': 2, 'slit_width': 2, 'slit_separation': 20,
    })
    assert aperture.get_display_name().startswith('Double slit')

    ray, hit, children = fire(aperture, (0, 0), (1, 0))
    assert hit.surface_id == 'blocker'
    assert ray.end_reason == 'hit_aperture_blocker'
    assert children == []

    ray, hit, children = fire(aperture, (0, 10), (1, 0), beam_diameter=8.0)
    assert hit.surface_id == 'opening'
    assert ray.end_reason == 'pass_aperture_opening'
    assert_direction(children[0].direction, Point(1, 0), 1e-12, "undeviated")
    assert_close(children[0].beam_diameter, 2.0, msg="clipped diameter")
    assert_close(children[0].intensity, 1.0, msg="no loss")
    print("  Blocker absorbs, slit transmits with diameter 2 - PASS")


def test_aperture_separation_clamped_to_width():
    scene = Scene()
    aperture = Aperture(scene, {'number_of_slits': 3, 'slit_width': 10, 'slit_separation': 4})
    assert aperture.effective_separation == 10
    assert len(aperture.opening_segments) == 3


def test_grating_orders_and_efficiencies():
    """d = 1 um at 550 nm: orders -1, 0 and +1 with 15/60/15 percent."""
    print("\n" + "=" * 60)
    print("TEST: Diffraction grating")
    print("=" * 60)

    scene = Scene()
    grating = DiffractionGrating(scene, {'pos': {'x': 100, 'y': 0}, 'grating_period': 1.0})
    ray, _, children = fire(grating, (0, 0), (1, 0))
    assert ray.end_reason == 'diffracted'
    assert len(children) == 3

    by_sine = sorted(children, key=lambda c: c.direction.y)
    assert_close(by_sine[0].direction.y, -0.55, 1e-9, "order -1")
    assert_close(by_sine[1].direction.y, 0.0, 1e-9, "order 0")
    assert_close(by_sine[2].direction.y, 0.55, 1e-9, "order +1")
    assert_close(by_sine[0].intensity, 0.15, msg="I(-1)")
    assert_close(by_sine[1].intensity, 0.6, msg="I(0)")
    assert_close(by_sine[2].intensity, 0.15, msg="I(+1)")
    assert all(c.direction.x > 0 for c in children), "orders are transmitted"

    assert grating.set_property('grating_period', 1.11) == DirtyState.GEOMETRY
    _, _, children = fire(grating, (0, 0), (1, 0))
    assert len(children) == 5
    print("  3 orders at d=1.00 um, 5 at d=1.11 um - PASS")


def test_grating_zero_period_passes():
    scene = Scene()
    grating = DiffractionGrating(scene, {'grating_period': 0})
    assert grating.warning is not None
    ray, _, children = fire(grating, (-50, 0), (1, 0))
    assert ray.end_reason == 'pass_grating_small_d'
    assert len(children) == 1


# =============================================================================
# POLARIZATION
# =============================================================================

def test_polarizer_malus_and_crossed():
    scene = Scene()
    polarizer = Polarizer(scene, {'pos': {'x': 100, 'y': 0}, 'transmission_axis': 60})
    _, _, children = fire(polarizer, (0, 0), (1, 0), polarization=0.0)
    assert_close(children[0].intensity, 0.25, 1e-12, "cos^2(60)")
    assert angle_mod_pi_diff(children[0].polarization.linear_angle(), math.radians(60)) < 1e-9

    _, _, children = fire(polarizer, (0, 0), (1, 0))
    assert_close(children[0].intensity, 0.5, msg="unpolarized halves")

    polarizer.set_property('transmission_axis', 90)
    ray, _, children = fire(polarizer, (0, 0), (1, 0), polarization=0.0)
    assert children == []
    assert ray.end_reason == 'polarized'


def test_half_wave_plate():
    scene = Scene()
    plate = HalfWavePlate(scene, {'pos': {'x': 100, 'y': 0}, 'fast_axis': 30})
    _, _, children = fire(plate, (0, 0), (1, 0), polarization=math.radians(10))
    angle = children[0].polarization.linear_angle()
    assert angle_mod_pi_diff(angle, math.radians(50)) < 1e-9
    assert_close(children[0].intensity, 1.0, msg="lossless")

    ray, _, children = fire(plate, (0, 0), (1, 0))
    assert ray.end_reason == 'pass_unpolarized_waveplate'
    assert not children[0].polarization.is_polarized


def test_quarter_wave_plate():
    scene = Scene()
    plate = QuarterWavePlate(scene, {'pos': {'x': 100, 'y': 0}, 'fast_axis': 0})
    _, _, children = fire(plate, (0, 0), (1, 0), polarization=math.radians(45))
    assert children[0].polarization.scalar == 'circular'


def test_plain_beam_splitter():
    scene = Scene()
    splitter = BeamSplitter(scene, {'pos': {'x': 100, 'y': 0}, 'angle': 45})
    ray, _, children = fire(splitter, (0, 0), (1, 0))
    assert ray.end_reason == 'split_bs'
    transmitted = [c for c in children if c.interaction_type == 'transmit'][0]
    reflected = [c for c in children if c.interaction_type == 'reflect'][0]
    assert_close(transmitted.intensity, 0.5, msg="T")
    assert_close(reflected.intensity, 0.5, msg="R")
    assert_direction(transmitted.direction, Point(1, 0), 1e-12, "transmitted")
    assert_direction(reflected.direction, Point(0, 1), 1e-9, "reflected")
    assert_close(reflected.phase - transmitted.phase, math.pi, 1e-9, "reflection phase")


def test_polarizing_beam_splitter():
    """p light (along the splitter) is transmitted, s light is reflected."""
    scene = Scene()
    pbs = BeamSplitter(scene, {'pos': {'x': 100, 'y': 0}, 'angle': 45, 'polarizing': True})

    _, _, children = fire(pbs, (0, 0), (1, 0), polarization=math.radians(45))
    assert len(children) == 1 and children[0].interaction_type == 'transmit'
    assert_close(children[0].intensity, 1.0, 1e-12, "p transmitted")

    _, _, children = fire(pbs, (0, 0), (1, 0), polarization=math.radians(135))
    assert len(children) == 1 and children[0].interaction_type == 'reflect'
    assert_close(children[0].intensity, 1.0, 1e-12, "s reflected")

    _, _, children = fire(pbs, (0, 0), (1, 0))
    assert sorted(round(c.intensity, 12) for c in children) == [0.5, 0.5]
    for child in children:
        assert child.polarization.linear_angle() is not None


def test_faraday_rotator_non_reciprocal():
    """Two passes in opposite directions rotate by 2 theta instead of cancelling."""
    print("\n" + "=" * 60)
    print("TEST: Faraday rotator non-reciprocity")
    print("=" * 60)

    scene = Scene()
    rotator = FaradayRotator(scene, {'pos': {'x': 100, 'y': 0}, 'rotation_angle': 45})

    _, _, inside = fire(rotator, (0, 0), (1, 0), polarization=0.0)
    assert_close(inside[0].medium_index, 1.5, msg="inside the crystal")
    out = continue_ray(rotator, inside[0])
    forward_angle = out[0].polarization.linear_angle()
    assert angle_mod_pi_diff(forward_angle, math.radians(45)) < 1e-9

    _, _, inside = fire(rotator, (200, 0), (-1, 0), polarization=out[0].polarization.copy())
    back = continue_ray(rotator, inside[0])
    back_angle = back[0].polarization.linear_angle()
    assert angle_mod_pi_diff(back_angle, math.radians(90)) < 1e-9, \
        f"expected 90 deg after the round trip, got {math.degrees(back_angle):.3f}"
    print("  0 -> 45 -> 90 degrees - PASS")


def test_faraday_isolator_blocks_backward_light():
    print("\n" + "=" * 60)
    print("TEST: Faraday isolator")
    print("=" * 60)

    scene = Scene()
    isolator = FaradayIsolator(scene, {'pos': {'x': 100, 'y': 0}})

    _, _, inside = fire(isolator, (0, 0), (1, 0), polarization=0.0)
    out = continue_ray(isolator, inside[0])
    assert len(out) == 1
    assert_close(out[0].intensity, 1.0, 1e-12, "forward transmission")
    assert angle_mod_pi_diff(out[0].polarization.linear_angle(), math.radians(45)) < 1e-9

    _, _, inside = fire(isolator, (0, 0), (1, 0))
    out = continue_ray(isolator, inside[0])
    assert_close(out[0].intensity, 0.5, 1e-12, "unpolarized forward")

    _, _, inside = fire(isolator, (200, 0), (-1, 0), polarization=math.radians(45))
    assert_close(inside[0].intensity, 1.0, 1e-12, "backward entry")
    exit_ray = inside[0]
    out = continue_ray(isolator, exit_ray)
    assert out == []
    assert exit_ray.end_reason == 'blocked_isolator'

    # Forward light nearly crossed with the input polarizer is merely too dim
    ray, _, inside = fire(isolator, (0, 0), (1, 0), polarization=math.radians(89.5))
    assert inside == []
    assert ray.end_reason == 'low_intensity'
    print("  Forward passes, backward blocked - PASS")


# =============================================================================
# SPECIAL
# =============================================================================

def test_aom_orders():
    scene = Scene()
    aom = AcoustoOpticModulator(scene, {'pos': {'x': 100, 'y': 0}, 'rf_power': 0.3})
    ray, _, children = fire(aom, (0, 0), (1, 0))
    assert ray.end_reason == 'diffracted_aom'
    assert len(children) == 2
    zeroth = min(children, key=lambda c: abs(c.direction.y))
    first = max(children, key=lambda c: abs(c.direction.y))
    assert_close(zeroth.intensity, 0.7, msg="zeroth order")
    assert_close(first.intensity, 0.3, msg="first order")
    theta = 550e-9 * 80e6 / 4200
    assert_close(first.direction.angle(), theta, 1e-12, "Bragg deflection")

    out = continue_ray(aom, zeroth)
    assert len(out) == 1, "no second diffraction on exit"
    assert zeroth.end_reason == 'pass_aom_surface'


def test_fiber_coupling():
    """On-axis light couples fully; offset light scales with 1 - r / a."""
    print("\n" + "=" * 60)
    print("TEST: Fiber coupler")
    print("=" * 60)

    scene = Scene()
    fiber = FiberCoupler(scene, {
        'pos': {'x': 100, 'y': 0}, 'angle': 180,
        'output_pos': {'x': 300, 'y': 50}, 'output_angle': 90,
    })
    ray, hit, children = fire(fiber, (0, 0), (1, 0))
    assert ray.end_reason == 'coupled_fiber'
    assert_close(hit.extra['coupling_factor'], 1.0, 1e-12, "on-axis factor")
    child = children[0]
    assert_close(child.intensity, 1.0, 1e-12, "output intensity")
    assert_direction(child.direction, Point(0, 1), 1e-12, "output direction")
    assert (child.origin - Point(300, 50)).length() < 1e-5
    assert child.parent_uuid == ray.uuid

    _, hit, children = fire(fiber, (0, 2), (1, 0))
    assert_close(hit.extra['coupling_factor'], 1.0 - 2 / 4.5, 1e-9, "offset factor")

    outside_core = Ray(Point(0, 6), Point(1, 0))
    assert fiber.intersect(outside_core.origin, outside_core.direction) is None
    steep = Point.from_angle(math.radians(20))
    assert fiber.intersect(Point(100 - 50 * steep.x, -50 * steep.y), steep) is None
    backwards = Ray(Point(200, 0), Point(-1, 0))
    assert fiber.intersect(backwards.origin, backwards.direction) is None
    print("  Coupling 1.0 on axis, 0.556 at 2 px offset - PASS")


def test_fiber_propagation_loss():
    scene = Scene()
    fiber = FiberCoupler(scene, {
        'pos': {'x': 0, 'y': 0}, 'angle': 180,
        'output_pos': {'x': 1e6, 'y': 0}, 'loss_db_per_km': 10,
    })
    assert_close(fiber.transmission_factor(), 0.1, 1e-12, "10 dB over 1 km")
    _, _, children = fire(fiber, (-50, 0), (1, 0))
    assert_close(children[0].intensity, 0.1, 1e-12, "output after loss")


# =============================================================================
# DETECTORS
# =============================================================================

def test_screen_coherent_sum():
    """Two equal in-phase rays give 4x a single ray; opposite phases cancel."""
    print("\n" + "=" * 60)
    print("TEST: Screen coherent sum")
    print("=" * 60)

    scene = Scene()
    screen = Screen(scene, {'pos': {'x': 0, 'y': 0}, 'angle': 90, 'length': 10, 'num_bins': 10})

    def hit_screen(phase):
        ray = Ray(Point(-10, 0.2), Point(1, 0), phase=phase)
        hit = screen.intersect(ray.origin, ray.direction)
        children = screen.interact(ray, hit)
        assert children == []
        assert ray.end_reason == 'absorbed_screen'
        return screen.bin_index(hit.point)

    index = hit_screen(0.0)
    assert_close(screen.get_coherent_intensity()[index], 1.0, 1e-12, "single ray")
    hit_screen(0.0)
    assert_close(screen.get_coherent_intensity()[index], 4.0, 1e-12, "constructive")
    assert_close(screen.intensity_sum[index], 2.0, 1e-12, "incoherent sum")

    screen.reset()
    hit_screen(0.0)
    hit_screen(math.pi)
    assert_close(screen.get_coherent_intensity()[index], 0.0, 1e-12, "destructive")
    assert screen.total_hits() == 2

    assert screen.set_property('length', 20) == DirtyState.GEOMETRY
    assert screen.total_hits() == 0, "geometry change resets the bins"
    print("  1 -> 4 (in phase), 0 (opposite phase) - PASS")


def test_screen_normalizes_by_running_max():
    """Cancelling the brightest bin does not inflate the other bins."""
    print("\n" + "=" * 60)
    print("TEST: Screen normalization by running maximum")
    print("=" * 60)

    scene = Scene()
    screen = Screen(scene, {'pos': {'x': 0, 'y': 0}, 'angle': 90, 'length': 10, 'num_bins': 10})

    def hit_screen(y, phase, intensity=1.0):
        ray = Ray(Point(-10, y), Point(1, 0), intensity=intensity, phase=phase)
        hit = screen.intersect(ray.origin, ray.direction)
        screen.interact(ray, hit)
        return screen.bin_index(hit.point)

    bright = hit_screen(-3.5, 0.0)
    dim = hit_screen(3.5, 0.0, intensity=0.25)
    assert bright != dim
    assert_close(screen.get_intensity_pattern()[dim], 0.25, 1e-12, "dim bin before cancelling")

    hit_screen(-3.5, math.pi)
    pattern = screen.get_intensity_pattern()
    assert_close(screen.max_intensity, 1.0, 1e-12, "running maximum kept")
    assert_close(pattern[bright], 0.0, 1e-12, "cancelled bin")
    assert_close(pattern[dim], 0.25, 1e-12, "dim bin after cancelling")
    assert pattern.max() <= 1.0
    print(f"  dim bin stays at {pattern[dim]:.2f} of the running max - PASS")


def test_screen_readout_and_csv():
    scene = Scene()
    screen = Screen(scene, {'pos': {'x': 0, 'y': 0}, 'angle': 90, 'length': 10, 'num_bins': 5})
    ray = Ray(Point(-10, 4.5), Point(1, 0), intensity=0.5)
    screen.interact(ray, screen.intersect(ray.origin, ray.direction))
    readout = screen.get_readout()
    assert readout['total_hits'] == 1
    assert_close(readout['incoherent_power'], 0.5, msg="incoherent power")
    assert readout['pattern'][4] == 1.0
    csv_lines = screen.export_csv().splitlines()
    assert csv_lines[0] == "Position,Coherent,Incoherent,Hits"
    assert len(csv_lines) == 6


def test_photodiode_integration():
    scene = Scene()
    diode = Photodiode(scene, {'pos': {'x': 100, 'y': 0}, 'angle': 90})
    fire(diode, (0, 0), (1, 0), intensity=0.25)
    fire(diode, (0, 5), (1, 0), intensity=0.5)
    assert_close(diode.get_reading(), 0.75, 1e-12, "summed power")
    assert diode.get_readout()['hit_count'] == 2

    assert diode.intersect(Point(200, 0), Point(-1, 0)) is None, "back side is inactive"

    diode.move(10, 0)
    assert diode.get_reading() == 0.0, "moving resets the reading"


def test_photodiode_format_reading():
    scene = Scene()
    diode = Photodiode(scene)
    for power, text in ((0.0, '0.000'), (0.0005, '5.00e-04'), (1.5, '1.500'), (5000.0, '5.000e+03')):
        diode.incident_power = power
        assert diode.format_reading() == text, f"{power} -> {diode.format_reading()}"


# =============================================================================
# RUNNER
# =============================================================================

def run_all_tests():
    """Run all tests and report results."""
    print("\n" + "=" * 78)
    print("COMPONENT PHYSICS TESTS")
    print("=" * 78)

    tests = [
        ("Flat mirror", test_flat_mirror_reflection),
        ("Mirror ignore_decay", test_mirror_ignore_decay_keeps_intensity),
        ("Spherical mirror focus", test_spherical_mirror_focus),
        ("Flat spherical mirror", test_flat_spherical_mirror),
        ("Parabolic mirror focus", test_parabolic_mirror_focus),
        ("Parabolic focal length check", test_parabolic_mirror_rejects_non_positive_focal_length),
        ("Matched index block", test_matched_index_block_passes_collinear),
        ("Normal incidence split", test_block_normal_incidence_split),
        ("Oblique energy conservation", test_block_energy_conservation_oblique),
        ("Total internal reflection", test_block_total_internal_reflection),
        ("Absorption on exit", test_block_absorption_on_exit),
        ("Prism refraction", test_prism_entry_refraction),
        ("Thin lens", test_thin_lens_on_axis_and_focusing),
        ("Flat lens", test_flat_lens_passes_through),
        ("Aperture", test_aperture_blocks_and_clips),
        ("Aperture separation clamp", test_aperture_separation_clamped_to_width),
        ("Grating orders", test_grating_orders_and_efficiencies),
        ("Grating zero period", test_grating_zero_period_passes),
        ("Polarizer", test_polarizer_malus_and_crossed),
        ("Half-wave plate", test_half_wave_plate),
        ("Quarter-wave plate", test_quarter_wave_plate),
        ("Beam splitter", test_plain_beam_splitter),
        ("Polarizing beam splitter", test_polarizing_beam_splitter),
        ("Faraday rotator", test_faraday_rotator_non_reciprocal),
        ("Faraday isolator", test_faraday_isolator_blocks_backward_light),
        ("AOM", test_aom_orders),
        ("Fiber coupling", test_fiber_coupling),
        ("Fiber loss", test_fiber_propagation_loss),
        ("Screen coherent sum", test_screen_coherent_sum),
        ("Screen running-max normalization", test_screen_normalizes_by_running_max),
        ("Screen readout", test_screen_readout_and_csv),
        ("Photodiode", test_photodiode_integration),
        ("Photodiode formatting", test_photodiode_format_reading),
    ]

    passed = 0
    errors = []
    for name, test_func in tests:
        try:
            test_func()
            passed += 1
        except Exception as e:
            errors.append((name, str(e)))
            print(f"\n  FAILED: {name}")
            print(f"    Error: {e}")

    print("\n" + "=" * 78)
    print(f"SUMMARY: {passed}/{len(tests)} tests passed")
    print("=" * 78)

    if errors:
        print("\nFailed tests:")
        for name, error in errors:
            print(f"  - {name}: {error}")
        return False

    print("\nAll tests passed!")
    return True


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)

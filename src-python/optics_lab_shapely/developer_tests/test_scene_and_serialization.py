"""
===============================================================================
SCENE, SERIALIZATION AND RENDERING TESTS
===============================================================================

1. SCENE SETTINGS: validated limits and the intensity threshold
2. SERIALIZATION: every component type survives serialize() ->
   create_scene_obj() with identical intersect/interact behavior
3. MUTATION: DirtyState classification, unknown keys and invalid values
4. LIGHT SOURCES: ray fans and parallel beams
5. SVG EXPORT: objects, rays and screen patterns in the drawing

Run with:
    python developer_tests/test_scene_and_serialization.py

Or with pytest:
    pytest developer_tests/test_scene_and_serialization.py -v
===============================================================================
"""

import sys
import math
import tempfile
from pathlib import Path

# Add the src-python directory to the path
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from optics_lab_shapely.core.geometry import Point
from optics_lab_shapely.core.ray import Ray
from optics_lab_shapely.core.scene import Scene
from optics_lab_shapely.core.simulator import Simulator
from optics_lab_shapely.core.constants import GREEN_WAVELENGTH
from optics_lab_shapely.core.svg_renderer import SVGRenderer, wavelength_to_rgb, intensity_to_opacity
from optics_lab_shapely.core.scene_objs import (
    SCENE_OBJ_TYPES, DirtyState, create_scene_obj,
    Mirror, LaserSource, Beam, Aperture, ThinLens, Screen, Photodiode,
)


def assert_close(actual, expected, tol=1e-9, msg=""):
    """Assert that two values are close within tolerance."""
    if abs(actual - expected) > tol:
        raise AssertionError(
            f"{msg}: expected {expected}, got {actual} (diff: {abs(actual - expected)})"
        )


# =============================================================================
# SCENE SETTINGS
# =============================================================================

def test_scene_settings_validation():
    scene = Scene()
    assert scene.max_bounces == 500
    assert_close(scene.get_min_intensity_threshold(), 1e-4, 1e-18, "default threshold")

    scene.min_intensity_exp = 2
    assert_close(scene.get_min_intensity_threshold(), 0.01, 1e-15, "threshold")

    for name, bad in (('max_bounces', 0), ('max_total_rays', -5), ('max_rays_per_source', 2.5),
                      ('min_intensity_exp', 0), ('view_width', -1)):
        try:
            setattr(scene, name, bad)
            raise AssertionError(f"{name}={bad} should be rejected")
        except ValueError:
            pass


def test_scene_object_management():
    scene = Scene()
    mirror = scene.add_object(Mirror(scene, {'pos': {'x': 10, 'y': 0}}))
    mirror.name = 'M1'
    laser = scene.add_object(LaserSource(scene))
    assert scene.get_object('M1') is mirror
    assert scene.get_object(laser.uuid) is laser
    assert scene.light_sources == [laser]

    min_x, min_y, max_x, max_y = scene.get_bounds()
    assert_close(min_x, -40, 1e-9, "min x")
    assert_close(max_x, 60, 1e-9, "max x")

    scene.remove_object(mirror)
    assert scene.get_object('M1') is None
    assert scene.get_bounds() is None


# =============================================================================
# SERIALIZATION
# =============================================================================

# One non-default configuration per component type, all in the path of the reference ray
ROUND_TRIP_CONFIGS = [
    {'type': 'Mirror', 'pos': {'x': 100, 'y': 0}, 'angle': 80, 'reflectivity': 0.9},
    {'type': 'SphericalMirror', 'pos': {'x': 100, 'y': 0}, 'angle': 90, 'radius': 300},
    {'type': 'ParabolicMirror', 'pos': {'x': 100, 'y': 0}, 'angle': 180, 'focal_length': 80},
    {'type': 'ThinLens', 'pos': {'x': 100, 'y': 0}, 'focal_length': -120},
    {'type': 'DielectricBlock', 'pos': {'x': 130, 'y': 0}, 'base_refractive_index': 1.7},
    {'type': 'Prism', 'pos': {'x': 130, 'y': 0}, 'angle': 180, 'apex_angle': 45},
    {'type': 'Aperture', 'pos': {'x': 100, 'y': 0}, 'slit_width': 20},
    {'type': 'DiffractionGrating', 'pos': {'x': 100, 'y': 0}, 'grating_period': 2.5, 'max_order': 1},
    {'type': 'Polarizer', 'pos': {'x': 100, 'y': 0}, 'transmission_axis': 30},
    {'type': 'HalfWavePlate', 'pos': {'x': 100, 'y': 0}, 'fast_axis': 15},
    {'type': 'QuarterWavePlate', 'pos': {'x': 100, 'y': 0}, 'fast_axis': 65},
    {'type': 'BeamSplitter', 'pos': {'x': 100, 'y': 0}, 'split_ratio': 0.3},
    {'type': 'FaradayRotator', 'pos': {'x': 130, 'y': 0}, 'rotation_angle': 30},
    {'type': 'FaradayIsolator', 'pos': {'x': 150, 'y': 0}},
    {'type': 'AcoustoOpticModulator', 'pos': {'x': 130, 'y': 0}, 'rf_frequency': 110},
    {'type': 'FiberCoupler', 'pos': {'x': 100, 'y': 0}, 'angle': 180,
     'output_pos': {'x': 100, 'y': 300}, 'loss_db_per_km': 3},
    {'type': 'Screen', 'pos': {'x': 100, 'y': 0}, 'angle': 90, 'num_bins': 50},
    {'type': 'Photodiode', 'pos': {'x': 100, 'y': 0}, 'angle': 90, 'diameter': 30},
]


def trace_reference_ray(obj):
    """Fire the same ray at a component and summarize the outcome."""
    ray = Ray(Point(0, 1), Point(1, 0.01), polarization=math.radians(20))
    hit = obj.intersect(ray.origin, ray.direction)
    assert hit is not None, f"reference ray missed {obj.type}"
    ray.advance_to(hit.point)
    children = obj.interact(ray, hit)
    return (
        hit.distance,
        ray.end_reason,
        [(c.direction.x, c.direction.y, c.intensity, c.polarization.scalar) for c in children],
    )


def test_round_trip_preserves_behavior():
    print("\n" + "=" * 60)
    print("TEST: Serialization round trip")
    print("=" * 60)

    covered = set()
    for config in ROUND_TRIP_CONFIGS:
        scene = Scene()
        original = create_scene_obj(scene, config)
        snapshot = original.serialize()
        assert snapshot == config, f"{config['type']}: {snapshot}"
        clone = create_scene_obj(Scene(), snapshot)
        assert type(clone) is type(original)
        assert clone.serialize() == snapshot

        a = trace_reference_ray(original)
        b = trace_reference_ray(clone)
        assert a[1] == b[1], f"{config['type']}: end reasons differ"
        assert_close(a[0], b[0], 1e-12, f"{config['type']} hit distance")
        assert len(a[2]) == len(b[2]), f"{config['type']}: child count differs"
        for ca, cb in zip(a[2], b[2]):
            for va, vb in zip(ca[:3], cb[:3]):
                assert_close(va, vb, 1e-12, f"{config['type']} child")
            assert ca[3] == cb[3]
        covered.add(config['type'])
        print(f"  {config['type']:<22} -> {a[1]}, {len(a[2])} children")

    for source_type in ('LaserSource', 'Beam'):
        source = create_scene_obj(Scene(), {'type': source_type, 'wavelength': 633, 'angle': 10})
        clone = create_scene_obj(Scene(), source.serialize())
        assert clone.wavelength == 633 and clone.angle == 10
        covered.add(source_type)

    assert covered == set(SCENE_OBJ_TYPES), f"not covered: {set(SCENE_OBJ_TYPES) - covered}"


def test_scene_load_from_snapshot():
    scene = Scene()
    scene.add_object(LaserSource(scene))
    scene.add_object(Mirror(scene, {'pos': {'x': 100, 'y': 0}, 'angle': 90}))
    snapshot = scene.serialize()

    restored = Scene()
    objs = restored.load(snapshot)
    assert [o.type for o in objs] == ['LaserSource', 'Mirror']
    assert restored.serialize() == snapshot
    segments = Simulator(restored).run()
    assert [r.end_reason for r in segments] == ['reflected', 'escaped']


def test_unknown_type_is_rejected():
    try:
        create_scene_obj(Scene(), {'type': 'Teleporter'})
        raise AssertionError("expected ValueError")
    except ValueError as e:
        assert 'Teleporter' in str(e)


# =============================================================================
# MUTATION
# =============================================================================

def test_dirty_state_classification():
    scene = Scene()
    mirror = Mirror(scene)
    assert mirror.set_property('reflectivity', 0.5) == DirtyState.OPTICS
    assert mirror.set_property('reflectivity', 0.5) == DirtyState.NONE
    assert mirror.move(10, 0) == DirtyState.GEOMETRY
    assert_close(mirror.p1.x, -40, 1e-9, "endpoints recomputed")
    assert mirror.rotate(90) == DirtyState.GEOMETRY
    assert mirror.angle == 90


def test_invalid_values():
    scene = Scene()
    mirror = Mirror(scene, {'reflectivity': 5})
    assert mirror.error is not None
    assert mirror.reflectivity == 0.99, "invalid value falls back to the default"

    try:
        mirror.set_property('reflectivity', -0.1)
        raise AssertionError("expected ValueError")
    except ValueError:
        pass
    assert mirror.reflectivity == 0.99

    try:
        mirror.set_property('focal_length', 10)
        raise AssertionError("expected ValueError")
    except ValueError as e:
        assert 'focal_length' in str(e)

    try:
        ThinLens(scene).set_property('diameter', float('nan'))
        raise AssertionError("expected ValueError")
    except ValueError:
        pass

    assert ThinLens(scene, {'focal_length': math.inf}).is_flat

    bad_pos = Mirror(scene, {'pos': {'x': 'a', 'y': 0}})
    assert bad_pos.error is not None and 'pos' in bad_pos.error
    assert bad_pos.pos == {'x': 0, 'y': 0}, "non-numeric coordinate falls back to the default"
    try:
        bad_pos.set_property('pos', {'x': None, 'y': 1})
        raise AssertionError("expected ValueError")
    except ValueError:
        pass


def test_unknown_key_reported_on_scene():
    scene = Scene()
    Mirror(scene, {'pos': {'x': 0, 'y': 0}, 'shininess': 3})
    assert scene.error is not None and 'shininess' in scene.error


def test_geometry_change_resets_detectors():
    scene = Scene()
    diode = scene.add_object(Photodiode(scene, {'pos': {'x': 100, 'y': 0}, 'angle': 90}))
    scene.add_object(LaserSource(scene))
    Simulator(scene).run()
    assert diode.get_reading() == 1.0
    assert diode.set_property('diameter', 10) == DirtyState.GEOMETRY
    assert diode.get_reading() == 0.0


# =============================================================================
# LIGHT SOURCES
# =============================================================================

def test_laser_fan():
    scene = Scene()
    laser = LaserSource(scene, {'num_rays': 3, 'spread': 20, 'intensity': 0.9, 'wavelength': 650})
    rays = laser.generate_rays(1000)
    assert len(rays) == 3
    angles = [math.degrees(r.direction.angle()) for r in rays]
    for angle, expected in zip(angles, (-10, 0, 10)):
        assert_close(angle, expected, 1e-9, "fan angle")
    for ray in rays:
        assert_close(ray.intensity, 0.3, 1e-12, "per-ray intensity")
        assert ray.wavelength == 650
        assert ray.source_uuid == laser.uuid
        assert ray.bounces == 0
        assert ray.beam_waist == 5.0 and ray.rayleigh_range > 0

    assert len(laser.generate_rays(2)) == 2, "capped by max_rays"


def test_beam_rays():
    scene = Scene()
    beam = Beam(scene, {'width': 40, 'num_rays': 4, 'angle': 90, 'polarization': 'linear',
                        'polarization_angle': 90})
    rays = beam.generate_rays(1000)
    xs = sorted(r.origin.x for r in rays)
    for x, expected in zip(xs, (-15, -5, 5, 15)):
        assert_close(x, expected, 1e-9, "ray spacing")
    for ray in rays:
        assert_close(ray.direction.y, 1.0, 1e-12, "parallel")
        assert_close(ray.beam_diameter, 10.0, 1e-12, "beam share")
        assert_close(ray.intensity, 0.25, 1e-12, "intensity share")
        assert abs(abs(ray.polarization.linear_angle()) - math.pi / 2) < 1e-9


def test_source_validation():
    scene = Scene()
    laser = LaserSource(scene, {'wavelength': 1064})
    assert laser.warning is not None, "infrared wavelength warns"
    laser.set_property('wavelength', 633)
    assert laser.warning is None, "warning cleared once back in the visible range"
    try:
        laser.set_property('polarization', 'sideways')
        raise AssertionError("expected ValueError")
    except ValueError:
        pass
    assert LaserSource(scene, {'wavelength': None}).generate_rays(1)[0].wavelength is None


# =============================================================================
# SVG EXPORT
# =============================================================================

def test_svg_export():
    print("\n" + "=" * 60)
    print("TEST: SVG export")
    print("=" * 60)

    scene = Scene()
    scene.add_object(Beam(scene, {'pos': {'x': 0, 'y': 0}, 'width': 30, 'num_rays': 5}))
    scene.add_object(Aperture(scene, {'pos': {'x': 60, 'y': 0}, 'length': 80, 'slit_width': 14}))
    scene.add_object(ThinLens(scene, {'pos': {'x': 120, 'y': 0}, 'focal_length': 80}))
    scene.add_object(Screen(scene, {'pos': {'x': 200, 'y': 0}, 'angle': 90, 'length': 40, 'num_bins': 20}))

    segments = Simulator(scene).run()
    renderer = SVGRenderer.for_scene(scene)
    assert renderer.draw_scene(scene, segments)
    svg = renderer.to_string()

    assert svg.count('class="ray"') == len(segments)
    assert 'data-end-reason="absorbed_screen"' in svg
    assert 'data-end-reason="hit_aperture_blocker"' in svg
    assert 'screen-pattern' in svg
    assert 'layer-objects' in svg

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / 'bench.svg'
        renderer.save(str(path))
        assert path.read_text().startswith('<?xml')
    print(f"  {len(segments)} rays drawn - PASS")


def test_color_helpers():
    r, g, b = wavelength_to_rgb(650)
    assert r == 255 and b == 0
    assert wavelength_to_rgb(None) == wavelength_to_rgb(GREEN_WAVELENGTH)
    assert intensity_to_opacity(1.0) == 1.0
    assert intensity_to_opacity(1e-6) == 0.05
    assert intensity_to_opacity(0.0) == 0.0


# =============================================================================
# RUNNER
# =============================================================================

def run_all_tests():
    """Run all tests and report results."""
    print("\n" + "=" * 78)
    print("SCENE, SERIALIZATION AND RENDERING TESTS")
    print("=" * 78)

    tests = [
        ("Scene settings", test_scene_settings_validation),
        ("Scene objects", test_scene_object_management),
        ("Round trip", test_round_trip_preserves_behavior),
        ("Scene load", test_scene_load_from_snapshot),
        ("Unknown type", test_unknown_type_is_rejected),
        ("DirtyState", test_dirty_state_classification),
        ("Invalid values", test_invalid_values),
        ("Unknown keys", test_unknown_key_reported_on_scene),
        ("Detector reset on geometry change", test_geometry_change_resets_detectors),
        ("Laser fan", test_laser_fan),
        ("Beam rays", test_beam_rays),
        ("Source validation", test_source_validation),
        ("SVG export", test_svg_export),
        ("Color helpers", test_color_helpers),
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

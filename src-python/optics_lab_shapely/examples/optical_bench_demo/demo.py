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
Optical Bench Demo - Isolated Laser, Polarization Split, Fiber and Grating

A small laboratory bench traced end to end:

Setup:
- Linearly polarized 633 nm laser at the origin, firing along +x
- Faraday isolator protecting the laser (leaves the beam at 45 degrees)
- Half-wave plate turning the polarization back to 0 degrees
- Polarizing beam splitter sending half the power up and half straight on
- Straight arm: fiber coupler relaying the beam to a photodiode
- Upper arm: diffraction grating fanning the beam onto a screen

Expected behavior:
- The photodiode reads about half the laser power
- The screen shows the 0 and +-1 grating orders
"""

import sys
import os
import json

# Add parent directories to path to import optics_lab_shapely
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', '..'))

from optics_lab_shapely.core.scene import Scene
from optics_lab_shapely.core.simulator import Simulator
from optics_lab_shapely.core.svg_renderer import SVGRenderer
from optics_lab_shapely.core.scene_objs import (
    LaserSource, FaradayIsolator, HalfWavePlate, BeamSplitter,
    FiberCoupler, Photodiode, DiffractionGrating, Screen,
)


def build_scene():
    """Assemble the bench."""
    scene = Scene()

    laser = LaserSource(scene, {
        'pos': {'x': 0, 'y': 0},
        'wavelength': 633,
        'polarization': 'linear',
        'polarization_angle': 0,
    })
    laser.name = 'HeNe laser'
    scene.add_object(laser)

    scene.add_object(FaradayIsolator(scene, {'pos': {'x': 80, 'y': 0}, 'width': 60}))
    scene.add_object(HalfWavePlate(scene, {'pos': {'x': 150, 'y': 0}, 'fast_axis': 22.5}))
    scene.add_object(BeamSplitter(scene, {'pos': {'x': 220, 'y': 0}, 'angle': 45, 'polarizing': True}))

    fiber = FiberCoupler(scene, {
        'pos': {'x': 300, 'y': 0},
        'angle': 180,
        'output_pos': {'x': 300, 'y': -150},
        'output_angle': 0,
        'loss_db_per_km': 3,
    })
    fiber.name = 'Fiber'
    scene.add_object(fiber)

    diode = Photodiode(scene, {'pos': {'x': 450, 'y': -150}, 'angle': 90})
    diode.name = 'Power meter'
    scene.add_object(diode)

    scene.add_object(DiffractionGrating(scene, {
        'pos': {'x': 220, 'y': 100}, 'angle': 0, 'grating_period': 1.6,
    }))

    screen = Screen(scene, {'pos': {'x': 220, 'y': 300}, 'angle': 0, 'length': 400, 'num_bins': 200})
    screen.name = 'Screen'
    scene.add_object(screen)

    return scene


def main():
    """Run the bench and export the drawing and detector readings."""
    print("Optical Bench Demo")
    print("=" * 60)

    scene = build_scene()
    print(f"\nScene setup ({len(scene.objs)} objects):")
    for obj in scene.objs:
        print(f"  {obj.get_display_name()}: {obj.serialize()}")

    # Run simulation
    print("\nRunning simulation...")
    simulator = Simulator(scene)
    ray_segments = simulator.run()

    print(f"  Processed {simulator.processed_ray_count} rays")
    print(f"  End reasons: {dict(simulator.end_reason_counts)}")

    if scene.warning:
        print(f"  Warning: {scene.warning}")
    if scene.error:
        print(f"  Error: {scene.error}")

    diode = scene.get_object('Power meter')
    screen = scene.get_object('Screen')
    print(f"\nPower meter: {diode.format_reading()}")
    print(f"Screen: {screen.total_hits()} hits, peak {screen.max_intensity:.4f}")

    output_dir = os.path.dirname(os.path.abspath(__file__))

    # Save SVG
    renderer = SVGRenderer.for_scene(scene)
    renderer.draw_scene(scene, ray_segments)
    renderer.draw_label(diode.format_reading(), diode.position, color='darkgreen')
    svg_file = os.path.join(output_dir, 'output.svg')
    renderer.save(svg_file)
    print(f"\nSVG saved to: {svg_file}")

    # Export the screen pattern
    csv_file = os.path.join(output_dir, 'screen.csv')
    with open(csv_file, 'w') as f:
        f.write(screen.export_csv())
    print(f"Screen pattern exported to: {csv_file}")

    # Export the scene and the readings
    json_file = os.path.join(output_dir, 'bench.json')
    data = {
        'scene': scene.serialize(),
        'simulation': {
            'processed_rays': simulator.processed_ray_count,
            'end_reasons': dict(simulator.end_reason_counts),
            'warning': scene.warning,
            'error': scene.error,
        },
        'detectors': {
            scene.get_object(uuid).get_display_name(): readout
            for uuid, readout in simulator.get_detector_readouts().items()
        },
        'rays': [ray.to_dict() for ray in ray_segments],
    }
    with open(json_file, 'w') as f:
        json.dump(data, f, indent=2)
    print(f"Scene and readings exported to: {json_file}")


if __name__ == "__main__":
    main()

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
from collections import Counter, deque
from typing import Any, Deque, Dict, List, Optional, Tuple, TYPE_CHECKING

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from optics_lab_shapely.core.ray import Ray
    from optics_lab_shapely.core.geometry import Point
    from optics_lab_shapely.core.constants import MIN_RAY_SEGMENT_LENGTH, GEOMETRY_EPSILON
else:
    from .ray import Ray
    from .geometry import Point
    from .constants import MIN_RAY_SEGMENT_LENGTH, GEOMETRY_EPSILON

if TYPE_CHECKING:
    from .scene import Scene
    from .scene_objs.base_scene_obj import BaseSceneObj, Intersection


class Simulator:
    """
    Main ray tracing simulation engine.

    This class implements the trace pass: every enabled light source emits
    its initial rays, which are processed breadth-first from a work queue.
    For each ray the nearest component hit strictly ahead of its origin is
    found; the component terminates the ray with a reason code and returns
    zero or more child rays, which are queued in turn. Rays that hit nothing
    escape to a boundary around the scene.

    The queue is bounded by the scene's limits: children at the bounce
    ceiling are dropped ('max_bounces') and, once the pass has created
    `scene.max_total_rays` rays, further children are dropped
    ('ray_budget_exhausted'). A ray trapped between two mirrors therefore
    ends after at most `max_bounces` interactions.

    Attributes:
        scene (Scene): The scene containing objects and settings
        verbose (int): Verbosity level forwarded to the components
        pending_rays (deque): Queue of rays waiting to be processed
        processed_ray_count (int): Number of rays processed so far
        total_ray_count (int): Number of rays created in this pass
        ray_segments (list): Every ray of the pass, with its waypoint history
        end_reason_counts (Counter): How many rays ended for each reason
        budget_exhausted (bool): Whether the ray budget was reached
    """

    ESCAPE_MARGIN_FACTOR = 2.0  # Escape boundary: this many view sizes beyond the scene bounds

    def __init__(self, scene: 'Scene', verbose: int = 0) -> None:
        """
        Initialize the simulator.

        Args:
            scene (Scene): The scene to simulate
            verbose (int): Verbosity level (default: 0)
                0 = silent (no debug output)
                1 = verbose (show ray processing info)
                2 = very verbose/debug (show detailed interaction calculations)
        """
        self.scene: 'Scene' = scene
        self.verbose: int = verbose
        self.pending_rays: Deque[Ray] = deque()
        self.processed_ray_count: int = 0
        self.total_ray_count: int = 0
        self.ray_segments: List[Ray] = []
        self.end_reason_counts: Counter = Counter()
        self.budget_exhausted: bool = False
        self._escape_box: Optional[Tuple[float, float, float, float]] = None

    def run(self) -> List[Ray]:
        """
        Trace all active sources.

        This is the main entry point for simulation. It:
        1. Resets the per-pass state and calls on_trace_start() on all
           optical objects (detectors zero their readings)
        2. Collects the initial rays of every enabled light source
        3. Processes all pending rays until the queue is empty
        4. Returns the list of ray segments for visualization

        Rays added with `add_ray()` before the call are traced too.

        Returns:
            list: Every ray of the pass (each with its waypoint history)
        """
        # Manually added rays stay queued across the reset
        manual_rays = list(self.pending_rays)
        self.pending_rays = deque()
        self.processed_ray_count = 0
        self.total_ray_count = 0
        self.ray_segments = []
        self.end_reason_counts = Counter()
        self.budget_exhausted = False
        self.scene.error = None
        self.scene.warning = None
        self._escape_box = self._compute_escape_box()

        # Step 1: Initialize all optical objects
        for obj in self.scene.optical_objs:
            obj.on_trace_start()
        self._collect_warnings()

        # Step 2: Initial rays
        for ray in manual_rays:
            self._enqueue(ray)
        for source in self.scene.light_sources:
            rays = source.generate_rays(self.scene.max_rays_per_source)
            if self.verbose >= 1:
                print(f"{source.get_display_name()}: emitted {len(rays)} rays")
            for ray in rays:
                self._enqueue(ray)

        # Step 3: Process all rays
        self._process_rays()

        if self.budget_exhausted and not self.scene.warning:
            self.scene.warning = (
                f"Simulation stopped: maximum ray count ({self.scene.max_total_rays}) reached"
            )

        if self.verbose >= 1:
            print(f"\nProcessed {self.processed_ray_count} rays: {dict(self.end_reason_counts)}")

        return self.ray_segments

    def _collect_warnings(self) -> None:
        """Copy the first component warning or error into the scene."""
        for obj in self.scene.objs:
            message = obj.get_warning() if hasattr(obj, 'get_warning') else None
            if message is None and hasattr(obj, 'get_error'):
                message = obj.get_error()
            if message:
                self.scene.warning = f"{obj.get_display_name()}: {message}"
                return

    def _enqueue(self, ray: Ray) -> bool:
        """
        Queue a ray if the limits allow it, otherwise terminate and record it.

        Returns:
            True if the ray was queued.
        """
        if ray.terminated:
            self._record(ray)
            return False
        if ray.bounces >= self.scene.max_bounces:
            ray.terminate('max_bounces')
            self._record(ray)
            return False
        if self.total_ray_count >= self.scene.max_total_rays:
            self.budget_exhausted = True
            ray.terminate('ray_budget_exhausted')
            self._record(ray)
            return False
        self.total_ray_count += 1
        self.pending_rays.append(ray)
        return True

    def _record(self, ray: Ray) -> None:
        self.ray_segments.append(ray)
        self.end_reason_counts[ray.end_reason] += 1

    def _process_rays(self) -> None:
        """
        Process all rays in the pending queue.

        For each ray:
        1. Drop it if a runtime termination condition holds
        2. Find the nearest intersection with any optical object
        3. Without a hit, extend the ray to the escape boundary
        4. Otherwise advance it to the hit point and let the object interact
        5. Queue the returned children
        """
        min_intensity = self.scene.get_min_intensity_threshold()
        while self.pending_rays:
            ray: Ray = self.pending_rays.popleft()  # FIFO queue
            self.processed_ray_count += 1

            if self.verbose >= 1:
                print(f"\n### SIMULATOR processing ray {self.processed_ray_count}: {ray}")

            if ray.should_terminate(self.scene.max_bounces, min_intensity):
                self._record(ray)
                continue

            found = self._find_nearest_intersection(ray)
            if found is None:
                ray.advance_to(self._escape_point(ray))
                ray.terminate('escaped')
                self._record(ray)
                continue

            obj, hit = found
            if self.verbose >= 1:
                print(f"  Hit {obj.get_display_name()} at ({hit.point.x:.4f}, {hit.point.y:.4f}), "
                      f"surface={hit.surface_id}")

            if not hit.point.is_finite():
                ray.terminate('invalid_hit_point')
                self._record(ray)
                continue

            ray.advance_to(hit.point)
            try:
                children = obj.interact(ray, hit, verbose=self.verbose)
            except Exception as e:
                if self.verbose >= 1:
                    print(f"  Interaction error in {obj.get_display_name()}: {e}")
                ray.terminate('interaction_error')
                children = []
            # A component that forgets to end the ray still ends its segment here
            ray.terminate('no_interaction_logic')
            self._record(ray)

            for child in children or []:
                self._enqueue(child)

    def _find_nearest_intersection(self, ray: Ray) -> Optional[Tuple['BaseSceneObj', 'Intersection']]:
        """
        Find the nearest intersection between a ray and all optical objects.

        Args:
            ray (Ray): The ray to test for intersections

        Returns:
            (object, Intersection) for the smallest distance beyond
            MIN_RAY_SEGMENT_LENGTH, or None if nothing is hit.
        """
        nearest = None
        nearest_distance = math.inf
        for obj in self.scene.optical_objs:
            hit = obj.intersect(ray.origin, ray.direction)
            if hit is None or not math.isfinite(hit.distance):
                continue
            if hit.distance <= MIN_RAY_SEGMENT_LENGTH:
                continue
            if hit.distance < nearest_distance:
                nearest_distance = hit.distance
                nearest = (obj, hit)
        return nearest

    def _compute_escape_box(self) -> Tuple[float, float, float, float]:
        """Scene bounds (or the view area) grown by the escape margin."""
        margin = self.ESCAPE_MARGIN_FACTOR * max(self.scene.view_width, self.scene.view_height)
        bounds = self.scene.get_bounds()
        if bounds is None:
            bounds = (0.0, 0.0, self.scene.view_width, self.scene.view_height)
        min_x, min_y, max_x, max_y = bounds
        return (min_x - margin, min_y - margin, max_x + margin, max_y + margin)

    def _escape_point(self, ray: Ray) -> Point:
        """Where a ray that hits nothing leaves the escape box."""
        if self._escape_box is None:
            self._escape_box = self._compute_escape_box()
        min_x, min_y, max_x, max_y = self._escape_box
        origin, d = ray.origin, ray.direction
        t_exit = math.inf
        for o, dv, lo, hi in ((origin.x, d.x, min_x, max_x), (origin.y, d.y, min_y, max_y)):
            if abs(dv) > GEOMETRY_EPSILON:
                t = ((hi if dv > 0 else lo) - o) / dv
                t_exit = min(t_exit, t)
        if not math.isfinite(t_exit) or t_exit <= 0:
            # Origin already outside the box
            t_exit = max(max_x - min_x, max_y - min_y)
        return origin + d * t_exit

    def add_ray(self, ray: Ray) -> None:
        """
        Add a ray to the pending queue.

        Rays added before `run()` are traced together with the sources' rays.

        Args:
            ray (Ray): The ray to add
        """
        self.pending_rays.append(ray)

    def get_detector_readouts(self) -> Dict[str, Dict[str, Any]]:
        """
        Readings of every detector after a pass.

        Returns:
            A dictionary keyed by detector uuid; each value is the detector's
            `get_readout()` dictionary.
        """
        return {obj.uuid: obj.get_readout() for obj in self.scene.detectors}


# Example usage and testing
if __name__ == "__main__":
    from optics_lab_shapely.core.scene import Scene
    from optics_lab_shapely.core.scene_objs import LaserSource, Mirror, Photodiode

    scene = Scene()
    scene.add_object(LaserSource(scene, {'pos': {'x': 0, 'y': 0}}))
    scene.add_object(Mirror(scene, {'pos': {'x': 100, 'y': 0}, 'angle': 135}))
    scene.add_object(Photodiode(scene, {'pos': {'x': 100, 'y': -80}, 'angle': 0}))

    simulator = Simulator(scene, verbose=1)
    segments = simulator.run()
    print(f"Segments: {len(segments)}")
    print(f"Readouts: {simulator.get_detector_readouts()}")

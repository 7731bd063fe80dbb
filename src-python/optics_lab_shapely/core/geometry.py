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
from typing import Union, List, Tuple, Dict, Optional

if __name__ == "__main__":
    from constants import MIN_RAY_SEGMENT_LENGTH, GEOMETRY_EPSILON
else:
    from .constants import MIN_RAY_SEGMENT_LENGTH, GEOMETRY_EPSILON


class Point:
    """
    A point (or free vector) in 2D space.

    Supports the usual vector arithmetic so that optical formulas read the way
    they are written on paper: ``d - 2 * d.dot(n) * n``.
    """
    __slots__ = ('x', 'y')

    def __init__(self, x: float, y: float):
        self.x = float(x)
        self.y = float(y)

    # ==================== Arithmetic ====================

    def __add__(self, other: 'Point') -> 'Point':
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Point') -> 'Point':
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, k: float) -> 'Point':
        return Point(self.x * k, self.y * k)

    __rmul__ = __mul__

    def __truediv__(self, k: float) -> 'Point':
        return Point(self.x / k, self.y / k)

    def __neg__(self) -> 'Point':
        return Point(-self.x, -self.y)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Point):
            return NotImplemented
        return self.x == other.x and self.y == other.y

    def __hash__(self) -> int:
        return hash((self.x, self.y))

    def dot(self, other: 'Point') -> float:
        """Dot product with another vector."""
        return self.x * other.x + self.y * other.y

    def cross(self, other: 'Point') -> float:
        """z-component of the cross product with another vector."""
        return self.x * other.y - self.y * other.x

    def length(self) -> float:
        """Euclidean norm."""
        return math.hypot(self.x, self.y)

    def length_squared(self) -> float:
        """Squared Euclidean norm."""
        return self.x * self.x + self.y * self.y

    def normalized(self) -> 'Point':
        """
        Unit vector in the same direction.

        Returns the zero vector unchanged when the length is (numerically) zero,
        so callers can detect the degenerate case with ``length()``.
        """
        length = self.length()
        if length < GEOMETRY_EPSILON:
            return Point(0.0, 0.0)
        return Point(self.x / length, self.y / length)

    def rotated(self, angle: float) -> 'Point':
        """Rotate counter-clockwise by `angle` radians."""
        c = math.cos(angle)
        s = math.sin(angle)
        return Point(self.x * c - self.y * s, self.x * s + self.y * c)

    def perpendicular(self) -> 'Point':
        """The vector rotated by +90 degrees."""
        return Point(-self.y, self.x)

    def angle(self) -> float:
        """Polar angle in radians, in (-pi, pi]."""
        return math.atan2(self.y, self.x)

    def is_finite(self) -> bool:
        """Whether both coordinates are finite numbers."""
        return math.isfinite(self.x) and math.isfinite(self.y)

    @classmethod
    def from_angle(cls, angle: float) -> 'Point':
        """Unit vector at `angle` radians from the +x axis."""
        return cls(math.cos(angle), math.sin(angle))

    # ==================== Conversions ====================

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary representation."""
        return {'x': self.x, 'y': self.y}

    @classmethod
    def from_dict(cls, d: Union[Dict[str, float], 'Point']) -> 'Point':
        """Create Point from a {'x', 'y'} dictionary (Points pass through as copies)."""
        if isinstance(d, Point):
            return cls(d.x, d.y)
        return cls(d['x'], d['y'])

    def copy(self) -> 'Point':
        return Point(self.x, self.y)

    def __repr__(self) -> str:
        return f"Point(x={self.x}, y={self.y})"


class Geometry:
    """
    The ray primitives shared by every optical component.
    """

    @staticmethod
    def ray_segment_intersection(
        origin: Point,
        direction: Point,
        a: Point,
        b: Point,
        edge_tolerance: float = MIN_RAY_SEGMENT_LENGTH
    ) -> Optional[Tuple[float, float]]:
        """
        Intersect a ray with the segment [a, b].

        With v1 = origin - a, v2 = b - a and v3 = perpendicular(direction):
            t = cross(v2, v1) / dot(v2, v3)   (distance along the ray)
            s = dot(v1, v3) / dot(v2, v3)     (fraction along the segment)

        Args:
            origin: Ray origin.
            direction: Unit ray direction.
            a: First segment endpoint.
            b: Second segment endpoint.
            edge_tolerance: Slack allowed on the segment fraction at both ends.

        Returns:
            (t, s) when t > MIN_RAY_SEGMENT_LENGTH and s lies within
            [-edge_tolerance, 1 + edge_tolerance], otherwise None.
        """
        v1 = origin - a
        v2 = b - a
        v3 = Point(-direction.y, direction.x)
        denominator = v2.dot(v3)
        if abs(denominator) < GEOMETRY_EPSILON:
            return None
        t = v2.cross(v1) / denominator
        s = v1.dot(v3) / denominator
        if t > MIN_RAY_SEGMENT_LENGTH and -edge_tolerance <= s <= 1.0 + edge_tolerance:
            return t, s
        return None

    @staticmethod
    def ray_circle_intersections(
        origin: Point,
        direction: Point,
        center: Point,
        radius: float
    ) -> List[float]:
        """
        Positive ray parameters at which the ray crosses a circle.

        Args:
            origin: Ray origin.
            direction: Unit ray direction.
            center: Circle center.
            radius: Circle radius.

        Returns:
            Sorted list of roots greater than MIN_RAY_SEGMENT_LENGTH (0, 1 or 2 items).
        """
        oc = origin - center
        b = oc.dot(direction)
        c = oc.length_squared() - radius * radius
        disc = b * b - c
        if disc < 0:
            return []
        sq = math.sqrt(disc)
        roots = sorted((-b - sq, -b + sq))
        return [t for t in roots if t > MIN_RAY_SEGMENT_LENGTH]

    @staticmethod
    def solve_quadratic(a: float, b: float, c: float) -> List[float]:
        """
        Real roots of a*t^2 + b*t + c = 0, degrading to the linear case when a ~ 0.

        Returns:
            Sorted list of real roots (possibly empty).
        """
        if abs(a) < GEOMETRY_EPSILON:
            if abs(b) < GEOMETRY_EPSILON:
                return []
            return [-c / b]
        disc = b * b - 4 * a * c
        if disc < 0:
            return []
        sq = math.sqrt(disc)
        return sorted(((-b - sq) / (2 * a), (-b + sq) / (2 * a)))

    @staticmethod
    def face_normal_against(normal: Point, direction: Point) -> Point:
        """Flip `normal` if needed so that it points against `direction`."""
        if normal.dot(direction) > 0:
            return -normal
        return normal


# Create a singleton instance for convenience
geometry = Geometry()


if __name__ == "__main__":
    print("Testing geometry primitives...\n")

    origin = Point(0, 0)
    direction = Point(1, 0)
    hit = geometry.ray_segment_intersection(origin, direction, Point(10, -5), Point(10, 5))
    print(f"Ray/segment hit (t, s): {hit}")

    roots = geometry.ray_circle_intersections(origin, direction, Point(20, 0), 5)
    print(f"Ray/circle roots: {roots}")

    n = geometry.face_normal_against(Point(1, 0), direction)
    print(f"Normal facing the ray: {n}")

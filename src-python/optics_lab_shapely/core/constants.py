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
Constants used throughout the optics lab simulation.

Kept in a dedicated module so that the ray, the optical components and the
trace scheduler can share them without circular imports.
"""

# Refractive index of the ambient medium (air at standard conditions)
N_AIR = 1.000293

# Wavelengths (in nanometers)
DEFAULT_WAVELENGTH_NM = 550  # Used for broadband light and as Cauchy reference
CAUCHY_REFERENCE_WAVELENGTH_NM = 550
UV_WAVELENGTH = 380
INFRARED_WAVELENGTH = 700
GREEN_WAVELENGTH = 532

# Trace limits
MAX_RAY_BOUNCES = 500
MIN_RAY_INTENSITY = 1e-4
MAX_RAYS_PER_SOURCE = 1001
MAX_TOTAL_RAYS = 100000

# Length scale: scene coordinates are pixels
PIXELS_PER_MICROMETER = 1.0
PIXELS_PER_NANOMETER = PIXELS_PER_MICROMETER / 1000.0

# Minimum positive ray parameter for an intersection; also the distance a
# child ray's origin is pushed along its new direction
MIN_RAY_SEGMENT_LENGTH = 1e-6
MIN_RAY_SEGMENT_LENGTH_SQUARED = MIN_RAY_SEGMENT_LENGTH * MIN_RAY_SEGMENT_LENGTH

# Threshold for degenerate geometry and near-zero vectors
GEOMETRY_EPSILON = 1e-9

# Component defaults shared by several modules
DEFAULT_REFLECTIVITY = 0.99
DEFAULT_DISPERSION_B = 5000.0  # Cauchy B coefficient in nm^2
DEFAULT_MEDIUM_INDEX = 1.5     # Used for bodies that do not model refraction

# Scene view defaults, used for the escape boundary of rays that hit nothing
DEFAULT_VIEW_WIDTH = 800
DEFAULT_VIEW_HEIGHT = 600

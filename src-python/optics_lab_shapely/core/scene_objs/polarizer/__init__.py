"""
Polarization optics (polarizers, wave plates, splitters, Faraday devices)

Original work Copyright 2024 The Ray Optics Simulation authors and contributors
Python translation Copyright 2026 ray-tracing-shapely authors and contributors
Licensed under the Apache License, Version 2.0
"""

from .polarizer import Polarizer
from .wave_plate import BaseWavePlate, HalfWavePlate, QuarterWavePlate
from .beam_splitter import BeamSplitter
from .faraday_rotator import FaradayRotator
from .faraday_isolator import FaradayIsolator

__all__ = ['Polarizer', 'BaseWavePlate', 'HalfWavePlate', 'QuarterWavePlate',
           'BeamSplitter', 'FaradayRotator', 'FaradayIsolator']

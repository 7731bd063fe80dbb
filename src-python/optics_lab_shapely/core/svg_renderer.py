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

import svgwrite
from shapely.geometry import LineString, MultiLineString, Polygon, MultiPolygon

if __name__ == "__main__":
    from optics_lab_shapely.core.constants import GREEN_WAVELENGTH
else:
    from .constants import GREEN_WAVELENGTH


def wavelength_to_rgb(wavelength):
    """
    Convert a wavelength (in nm) to an RGB color tuple.

    Based on approximation of CIE color matching functions.
    Returns values in range 0-255. Broadband light (None) is drawn white-ish green.

    Args:
        wavelength (float or None): Wavelength in nanometers (380-780 nm)

    Returns:
        tuple: (r, g, b) values from 0-255
    """
    if wavelength is None:
        wavelength = GREEN_WAVELENGTH

    # Clamp to visible range
    wavelength = max(380, min(780, wavelength))

    if wavelength < 440:
        r, g, b = -(wavelength - 440) / (440 - 380), 0.0, 1.0
    elif wavelength < 490:
        r, g, b = 0.0, (wavelength - 440) / (490 - 440), 1.0
    elif wavelength < 510:
        r, g, b = 0.0, 1.0, -(wavelength - 510) / (510 - 490)
    elif wavelength < 580:
        r, g, b = (wavelength - 510) / (580 - 510), 1.0, 0.0
    elif wavelength < 645:
        r, g, b = 1.0, -(wavelength - 645) / (645 - 580), 0.0
    else:
        r, g, b = 1.0, 0.0, 0.0

    # Intensity correction at spectrum edges
    if wavelength < 420:
        factor = 0.3 + 0.7 * (wavelength - 380) / (420 - 380)
    elif wavelength > 700:
        factor = 0.3 + 0.7 * (780 - wavelength) / (780 - 700)
    else:
        factor = 1.0

    return (
        int(255 * r * factor),
        int(255 * g * factor),
        int(255 * b * factor)
    )


def intensity_to_opacity(intensity, floor=0.05):
    """
    Map ray intensity to a stroke opacity.

    Uses a logarithmic scale over four decades so that weak reflections stay
    visible next to the main beam.

    Args:
        intensity (float): Ray intensity
        floor (float): Minimum opacity for any ray with positive intensity

    Returns:
        float: Opacity from 0.0 to 1.0
    """
    if intensity <= 0:
        return 0.0
    value = (math.log10(min(intensity, 1.0)) + 4.0) / 4.0
    return max(floor, min(1.0, value))


class SVGRenderer:
    """
    Static SVG export of a scene and the rays of a trace pass.

    The SVG is organized into three layers (bottom to top):
    - objects: Component footprints from `get_shape()`
    - rays: Ray waypoint histories
    - labels: Text annotations and detector patterns

    Coordinate System:
        The renderer uses a Y-up coordinate system (positive Y points upward),
        which matches the scene. This is achieved by applying a vertical flip
        transformation to every layer.

    Attributes:
        width (int): Canvas width in pixels
        height (int): Canvas height in pixels
        viewbox (tuple): SVG viewBox (min_x, min_y, width, height) after the flip
        dwg (svgwrite.Drawing): The SVG drawing object
    """

    def __init__(self, width=800, height=600, viewbox=None):
        """
        Initialize the SVG renderer.

        Args:
            width (int): Canvas width in pixels (default: 800)
            height (int): Canvas height in pixels (default: 600)
            viewbox (tuple or None): Y-up viewBox as (min_x, min_y, width, height).
                If None, uses (0, 0, width, height)
        """
        self.width = width
        self.height = height
        self.user_viewbox = viewbox if viewbox is not None else (0, 0, width, height)

        min_x, min_y, vb_width, vb_height = self.user_viewbox
        self.viewbox = (min_x, -(min_y + vb_height), vb_width, vb_height)

        self.dwg = svgwrite.Drawing(size=(f'{width}px', f'{height}px'),
                                    profile='full', debug=False)
        self.dwg.viewbox(*self.viewbox)
        self.dwg['xmlns:inkscape'] = 'http://www.inkscape.org/namespaces/inkscape'

        self.dwg.add(self.dwg.rect(
            insert=(self.viewbox[0], self.viewbox[1]),
            size=(self.viewbox[2], self.viewbox[3]),
            fill='white'
        ))

        self.layer_objects = self._add_layer('layer-objects', 'Objects')
        self.layer_rays = self._add_layer('layer-rays', 'Rays')
        self.layer_labels = self._add_layer('layer-labels', 'Labels')

    def _add_layer(self, layer_id, label):
        return self.dwg.add(self.dwg.g(
            id=layer_id,
            transform='scale(1, -1)',
            **{'inkscape:groupmode': 'layer', 'inkscape:label': label}
        ))

    @classmethod
    def for_scene(cls, scene, width=800, height=600, padding=40):
        """Renderer whose viewBox fits the scene's component footprints."""
        bounds = scene.get_bounds()
        if bounds is None:
            return cls(width, height)
        min_x, min_y, max_x, max_y = bounds
        return cls(width, height, viewbox=(
            min_x - padding, min_y - padding,
            max(max_x - min_x, 1.0) + 2 * padding,
            max(max_y - min_y, 1.0) + 2 * padding,
        ))

    @staticmethod
    def _normalize_coord(value):
        """Turn negative zero and tiny values into 0.0."""
        if value == 0.0 or abs(value) < 1e-10:
            return 0.0
        return value

    def _attach_metadata(self, element, scene_obj, css_class='scene-obj'):
        """Attach id, inkscape:label, class and data-uuid from a scene object."""
        element['id'] = f'{css_class}-{scene_obj.uuid}'
        element['inkscape:label'] = scene_obj.get_display_name()
        element['class'] = css_class
        element['data-uuid'] = scene_obj.uuid
        element['data-type'] = scene_obj.type

    def draw_shape(self, shape, scene_obj=None, stroke='dimgray', fill='lightsteelblue',
                   stroke_width=2):
        """
        Draw a shapely geometry on the objects layer.

        Args:
            shape: LineString, MultiLineString, Polygon or MultiPolygon
            scene_obj: Optional scene object for metadata
            stroke (str): Stroke color
            fill (str): Fill color for polygons
            stroke_width (float): Line width in pixels
        """
        if shape is None or shape.is_empty:
            return
        if isinstance(shape, (Polygon, MultiPolygon)):
            polygons = [shape] if isinstance(shape, Polygon) else list(shape.geoms)
            elements = [
                self.dwg.polygon(
                    points=[(self._normalize_coord(x), self._normalize_coord(y))
                            for x, y in poly.exterior.coords[:-1]],
                    stroke=stroke, stroke_width=stroke_width,
                    fill=fill, fill_opacity=0.4
                )
                for poly in polygons
            ]
        elif isinstance(shape, (LineString, MultiLineString)):
            lines = [shape] if isinstance(shape, LineString) else list(shape.geoms)
            elements = [
                self.dwg.polyline(
                    points=[(self._normalize_coord(x), self._normalize_coord(y))
                            for x, y in line.coords],
                    stroke=stroke, stroke_width=stroke_width, fill='none'
                )
                for line in lines
            ]
        else:
            return

        group = self.dwg.g()
        for element in elements:
            group.add(element)
        if scene_obj is not None:
            self._attach_metadata(group, scene_obj)
        self.layer_objects.add(group)

    def draw_point(self, point, color='orange', radius=4, scene_obj=None):
        """Draw a filled circle (used for point light sources)."""
        circle = self.dwg.circle(
            center=(self._normalize_coord(point.x), self._normalize_coord(point.y)),
            r=radius, fill=color
        )
        if scene_obj is not None:
            self._attach_metadata(circle, scene_obj, css_class='source')
        self.layer_objects.add(circle)

    def draw_label(self, text, point, color='black', font_size='8px'):
        """Draw readable text at a scene point."""
        self.layer_labels.add(self.dwg.text(
            text,
            insert=(point.x, -point.y),
            fill=color,
            font_size=font_size,
            font_family='sans-serif',
            text_anchor='middle',
            transform='scale(1, -1)'  # Flip text back to be readable
        ))

    def draw_ray(self, ray, stroke_width=1.0):
        """
        Draw a ray's waypoint history.

        Color follows the wavelength and opacity the intensity. Rays with a
        single waypoint are skipped.
        """
        if len(ray.history) < 2:
            return
        r, g, b = wavelength_to_rgb(ray.wavelength)
        polyline = self.dwg.polyline(
            points=[(self._normalize_coord(p.x), self._normalize_coord(p.y)) for p in ray.history],
            stroke=f'rgb({r}, {g}, {b})',
            stroke_width=stroke_width,
            stroke_opacity=intensity_to_opacity(ray.intensity),
            fill='none'
        )
        polyline['class'] = 'ray'
        polyline['data-uuid'] = ray.uuid
        if ray.parent_uuid:
            polyline['data-parent-uuid'] = ray.parent_uuid
        if ray.wavelength is not None:
            polyline['data-wavelength'] = str(ray.wavelength)
        polyline['data-intensity'] = f'{ray.intensity:.6g}'
        if ray.end_reason:
            polyline['data-end-reason'] = ray.end_reason
        self.layer_rays.add(polyline)

    def draw_screen_pattern(self, screen, max_height=40, color='crimson'):
        """
        Draw a Screen's normalized coherent pattern as bars behind the screen.

        Each bin becomes a bar of height pattern * max_height along the
        screen's back normal.
        """
        pattern = screen.get_intensity_pattern(normalized=True)
        if pattern is None or len(pattern) == 0 or not pattern.any():
            return
        back = -screen.normal
        direction = screen.line_direction
        half_bin = direction * (screen.bin_width / 2.0)
        group = self.dwg.g()
        group['class'] = 'screen-pattern'
        group['data-uuid'] = screen.uuid
        for distance, value in zip(screen.bin_centers(), pattern):
            if value <= 0:
                continue
            center = screen.p1 + direction * float(distance)
            top = back * (float(value) * max_height)
            corners = [center - half_bin, center + half_bin,
                       center + half_bin + top, center - half_bin + top]
            group.add(self.dwg.polygon(
                points=[(p.x, p.y) for p in corners],
                fill=color, fill_opacity=0.6, stroke='none'
            ))
        self.layer_labels.add(group)

    def draw_scene(self, scene, segments=None, draw_rays=True, draw_objects=True,
                   draw_patterns=True):
        """
        Draw all objects and rays from a scene.

        Args:
            scene: The Scene object
            segments: Ray segments returned by `Simulator.run()`
            draw_rays (bool): Whether to draw ray segments
            draw_objects (bool): Whether to draw the component footprints
            draw_patterns (bool): Whether to draw Screen intensity patterns

        Returns:
            bool: True on success.
        """
        if draw_objects:
            for obj in scene.objs:
                shape = obj.get_shape()
                if shape is None and getattr(obj, 'is_light_source', False):
                    self.draw_point(obj.position, scene_obj=obj)
                else:
                    self.draw_shape(shape, scene_obj=obj)

        if draw_rays and segments:
            for ray in segments:
                self.draw_ray(ray)

        if draw_patterns:
            for obj in scene.detectors:
                if hasattr(obj, 'get_intensity_pattern'):
                    self.draw_screen_pattern(obj)

        return True

    def save(self, filename: str = None):
        """
        Save the SVG to a file.

        Args:
            filename (str): Output filename (default: 'output.svg')
        """
        if filename is None:
            filename = "output.svg"
        self.dwg.saveas(filename)

    def to_string(self):
        """
        Get the SVG as a string.

        Returns:
            str: SVG content as XML string
        """
        return self.dwg.tostring()

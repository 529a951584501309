"""This submodule provides the drawing surface the metric models paint
on, backed by [matplotlib](https://matplotlib.org/).

A `Canvas` works in pixel coordinates, with the origin in the top-left
corner and the y-axis pointing down. It supports vector primitives
(points, segments, arcs, circles, polygons) drawn as matplotlib
artists, plus an RGBA pixel buffer used for per-pixel colourings such
as Voronoi tessellations and bisector error gradients.

```python
from hilbert_geometry import drawtools, model
from hilbert_geometry.linalg import Vector

canvas = drawtools.Canvas(410, 410)
disk = model.PoincareModel((205, 205), 200)

disk.draw(canvas)
disk.draw_geodesic(canvas, Vector.from_list(0., 0.5, 1.),
                   Vector.from_list(0.5, 0., 1.))
canvas.show()
```

"""

import numpy as np

import matplotlib
import matplotlib.pyplot as plt
from matplotlib.patches import Circle, Arc, Polygon
from matplotlib.collections import LineCollection

#default canvas size, in pixels
DEFAULT_WIDTH = 1000
DEFAULT_HEIGHT = 800

#colormap used for nearest-site colourings
DEFAULT_LABEL_CMAP = "tab20"

#colormap used for bisector error gradients
DEFAULT_GRADIENT_CMAP = "viridis"


class Canvas:
    def __init__(self, width=DEFAULT_WIDTH,
                 height=DEFAULT_HEIGHT,
                 figsize=8,
                 ax=None,
                 fig=None,
                 facecolor="white"):

        if ax is None or fig is None:
            fig, ax = plt.subplots(figsize=(figsize, figsize * height / width))

        self.width = int(width)
        self.height = int(height)

        self.ax, self.fig = ax, fig

        self.ax.axis("off")
        self.ax.set_aspect("equal")
        self.ax.set_xlim((0, self.width))
        self.ax.set_ylim((self.height, 0))
        self.fig.set_facecolor(facecolor)

        self.pixels = np.zeros((self.height, self.width, 4))
        self._image = None

    def in_bounds(self, xs, ys):
        xs = np.asarray(xs)
        ys = np.asarray(ys)
        return (xs >= 0) & (xs < self.width) & (ys >= 0) & (ys < self.height)

    def draw_point(self, point, **kwargs):
        default_kwargs = {
            "color" : "black",
            "marker": "o",
            "markersize": 3,
            "linestyle":"none"
        }
        for key, value in kwargs.items():
            default_kwargs[key] = value

        x, y = point
        return self.ax.plot([x], [y], **default_kwargs)

    def draw_points(self, points, **kwargs):
        default_kwargs = {
            "color" : "black",
            "marker": "o",
            "markersize": 1,
            "linestyle":"none"
        }
        for key, value in kwargs.items():
            default_kwargs[key] = value

        coords = np.array([tuple(p) for p in points]).reshape((-1, 2))
        return self.ax.plot(coords[:, 0], coords[:, 1], **default_kwargs)

    def draw_line(self, p1, p2, **kwargs):
        return self.draw_segments([(tuple(p1), tuple(p2))], **kwargs)

    def draw_segments(self, segments, **kwargs):
        """Draw a collection of segments, given as pairs of (x, y) pixel
        coordinates."""
        default_kwargs = {
            "color":"black",
            "linewidth":1
        }
        for key, value in kwargs.items():
            default_kwargs[key] = value

        lines = LineCollection(np.asarray(segments, dtype=float).reshape((-1, 2, 2)),
                               **default_kwargs)
        self.ax.add_collection(lines)
        return lines

    def draw_polyline(self, points, **kwargs):
        default_kwargs = {
            "color":"black",
            "linewidth":1
        }
        for key, value in kwargs.items():
            default_kwargs[key] = value

        coords = np.array([tuple(p) for p in points]).reshape((-1, 2))
        return self.ax.plot(coords[:, 0], coords[:, 1], **default_kwargs)

    def draw_circle(self, center, radius, **kwargs):
        default_kwargs = {
            "facecolor": "none",
            "edgecolor": "black",
            "linewidth": 1
        }
        for key, value in kwargs.items():
            default_kwargs[key] = value

        circle = Circle(tuple(center), radius, **default_kwargs)
        self.ax.add_patch(circle)
        return circle

    def draw_arc(self, center, radius, theta1, theta2, **kwargs):
        """Draw a circular arc, counterclockwise in pixel coordinates
        from theta1 to theta2 (radians)."""
        default_kwargs = {
            "color": "black",
            "linewidth": 1
        }
        for key, value in kwargs.items():
            default_kwargs[key] = value

        arc = Arc(tuple(center), radius * 2, radius * 2,
                  theta1=np.degrees(theta1), theta2=np.degrees(theta2),
                  **default_kwargs)
        self.ax.add_patch(arc)
        return arc

    def draw_polygon(self, coords, **kwargs):
        default_kwargs = {
            "facecolor": "none",
            "edgecolor": "black"
        }
        for key, value in kwargs.items():
            default_kwargs[key] = value

        polygon = Polygon(np.asarray(coords, dtype=float), closed=True,
                          **default_kwargs)
        self.ax.add_patch(polygon)
        return polygon

    def paint_pixels(self, xs, ys, colors):
        """Set the colour of individual pixels in the pixel buffer.

        Parameters
        ----------
        xs, ys : ndarrays of ints
            pixel columns and rows. Out of bounds pixels are ignored.
        colors : ndarray of shape (k, 4) or (4,)
            RGBA colours with entries in [0, 1]

        """
        xs = np.asarray(xs, dtype=int)
        ys = np.asarray(ys, dtype=int)
        colors = np.broadcast_to(np.asarray(colors, dtype=float),
                                 xs.shape + (4,))

        good = self.in_bounds(xs, ys)
        self.pixels[ys[good], xs[good]] = colors[good]
        self._refresh()

    def paint_labels(self, labels, cmap=DEFAULT_LABEL_CMAP, alpha=1.):
        """Colour the whole pixel buffer by integer labels.

        Parameters
        ----------
        labels : ndarray of ints with shape (height, width)
            negative labels are left transparent
        cmap : str
            name of a matplotlib colormap. Labels cycle through its
            colours.

        """
        colormap = matplotlib.colormaps[cmap]
        labels = np.asarray(labels, dtype=int)

        # integer input indexes the colormap's lookup table directly
        colors = colormap(np.mod(labels, colormap.N))
        colors[..., 3] = np.where(labels >= 0, alpha, 0.)

        self.pixels = colors
        self._refresh()

    def clear_pixels(self):
        self.pixels = np.zeros((self.height, self.width, 4))
        self._refresh()

    def _refresh(self):
        if self._image is None:
            self._image = self.ax.imshow(self.pixels,
                                         extent=(0, self.width, self.height, 0),
                                         interpolation="nearest",
                                         zorder=0)
        else:
            self._image.set_data(self.pixels)

    def savefig(self, filename, **kwargs):
        self.fig.savefig(filename, **kwargs)

    def show(self):
        plt.show()

    def close(self):
        plt.close(self.fig)

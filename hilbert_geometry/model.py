"""Models of metric geometries drawn on a pixel canvas.

A `Model` owns a `CanvasFrame` (which maps canvas pixels to model
coordinates and back), a metric `d`, and a `TransformationStack`
holding the cumulative transformation applied to points before they
are drawn. The disk models of the hyperbolic plane live here; the
convex projective model with the Hilbert metric lives in
`hilbert_geometry.hilbert`.

Model points are `Vector` objects (x, y, 1). Canvas points are
`geometry.Point` objects, or anything unpacking to (x, y).

```python
from hilbert_geometry.model import PoincareModel
from hilbert_geometry.linalg import Vector

disk = PoincareModel((205, 205), 200)
disk.d(Vector.from_list(0., 0., 1.), Vector.from_list(0.5, 0., 1.))
```

"""

import numpy as np

from hilbert_geometry import utils, bisector, delaunay
from hilbert_geometry.base import DegenerateGeometry
from hilbert_geometry.geometry import Point
from hilbert_geometry.linalg import (Vector, LinearTransformation,
                                     MobiusTransformation, TransformationStack)
from hilbert_geometry.logging_utils import get_logger

logger = get_logger(__name__)

#below this, two points are treated as collinear with the origin
COLLINEAR_EPSILON = 1e-9


def model_coords(v):
    """Get affine (x, y) coordinates of a model point as an ndarray."""
    if isinstance(v, Vector):
        if v.dimension == 3:
            return v.homogenize().coords[:2]
        return v.coords[:2]
    return np.asarray(v, dtype=float)[:2]


class CanvasFrame:
    """An affine map between canvas pixels and model coordinates.

    The pixel (ox, oy) at `draw_origin` goes to the model origin, and
    `draw_radius` pixels correspond to one model unit. The canvas
    y-axis points down, so it is flipped.
    """

    def __init__(self, draw_origin, draw_radius):
        ox, oy = draw_origin
        self.origin = Point(ox, oy)
        self.radius = float(draw_radius)

    def canvas_to_model(self, p):
        x, y = p
        return Vector.from_list((x - self.origin.x) / self.radius,
                                -1 * (y - self.origin.y) / self.radius,
                                1.)

    def model_to_canvas(self, v):
        x, y = model_coords(v)
        return Point(self.origin.x + x * self.radius,
                     self.origin.y - y * self.radius)

    def to_model_coords(self, pixels):
        """Vectorized `canvas_to_model` on an ndarray of shape (..., 2),
        returning affine model coordinates."""
        pixels = np.asarray(pixels, dtype=float)
        return np.stack([(pixels[..., 0] - self.origin.x) / self.radius,
                         -1 * (pixels[..., 1] - self.origin.y) / self.radius],
                        axis=-1)

    def to_canvas_coords(self, coords):
        """Vectorized `model_to_canvas` on affine model coordinates."""
        coords = np.asarray(coords, dtype=float)
        return np.stack([self.origin.x + coords[..., 0] * self.radius,
                         self.origin.y - coords[..., 1] * self.radius],
                        axis=-1)


class Model:
    """Base class for metric models drawn on a canvas.

    Subclasses implement `d` and `contains`, and usually override the
    vectorized versions `distances` and `contains_coords` as well as
    `draw` and `draw_geodesic`.
    """

    def __init__(self, draw_origin, draw_radius, base_transformation=None):
        self.frame = CanvasFrame(draw_origin, draw_radius)

        if base_transformation is None:
            base_transformation = LinearTransformation.identity(3)
        self.transformations = TransformationStack(base_transformation)

    @property
    def draw_origin(self):
        return self.frame.origin

    @property
    def draw_radius(self):
        return self.frame.radius

    def canvas_to_model(self, p):
        return self.frame.canvas_to_model(p)

    def model_to_canvas(self, v):
        return self.frame.model_to_canvas(v)

    def d(self, p, q):
        raise NotImplementedError

    def distances(self, coords, q):
        """Distance from each point in an ndarray of affine model
        coordinates (shape (..., 2)) to the model point q."""
        coords = np.asarray(coords, dtype=float)
        flat = coords.reshape((-1, 2))
        result = np.array([
            self.d(Vector.from_list(x, y, 1.), q) for x, y in flat
        ])
        return result.reshape(coords.shape[:-1])

    def contains(self, v):
        raise NotImplementedError

    def contains_coords(self, coords):
        coords = np.asarray(coords, dtype=float)
        flat = coords.reshape((-1, 2))
        result = np.array([
            self.contains(Vector.from_list(x, y, 1.)) for x, y in flat
        ], dtype=bool)
        return result.reshape(coords.shape[:-1])

    def push(self, transformation):
        """Compose the current transformation with another one, saving
        the old one. Returns the index of the new frame."""
        return self.transformations.push(transformation)

    def pop(self):
        return self.transformations.pop()

    def apply(self, v):
        """Apply the current transformation to a model point."""
        image = self.transformations.apply(v)
        if image.dimension == 3:
            return image.homogenize()
        return image

    def draw(self, canvas, **kwargs):
        raise NotImplementedError

    def draw_point(self, canvas, v, **kwargs):
        """Draw the image of a model point under the current transformation."""
        return canvas.draw_point(self.model_to_canvas(self.apply(v)), **kwargs)

    def draw_geodesic(self, canvas, p, q, **kwargs):
        """Draw the geodesic segment between two model points. The
        default is a straight segment."""
        return canvas.draw_line(self.model_to_canvas(p),
                                self.model_to_canvas(q), **kwargs)

    def draw_bisector(self, canvas, p, q,
                      option=bisector.BisectorDrawOption.EPSILON,
                      epsilon=bisector.DEFAULT_EPSILON, **kwargs):
        """Trace the metric bisector of two model points and draw it.

        Returns
        -------
        bisector.BisectorTrace

        """
        trace = bisector.trace_bisector(self, p, q, epsilon=epsilon,
                                        option=option, **kwargs)
        bisector.draw_trace(canvas, trace, option=option)
        return trace

    def tesselate(self, canvas, points, step=1, cmap=None):
        """Colour every canvas pixel inside the model by its nearest site.

        Parameters
        ----------
        points : list of Vector
            the sites, as model points
        step : int
            pixel stride; each computed label fills a step x step block

        Returns
        -------
        ndarray of ints
            labels of shape (canvas.height, canvas.width), -1 outside
            the model.

        """
        labels = delaunay.nearest_site_labels(self, points,
                                              canvas.width, canvas.height,
                                              step=step)
        if cmap is None:
            canvas.paint_labels(labels)
        else:
            canvas.paint_labels(labels, cmap=cmap)
        return labels

    def draw_triangulation(self, canvas, points, **kwargs):
        """Compute the Delaunay triangulation of some sites for this
        model's metric and draw its edges as geodesics.

        Returns
        -------
        list of Simplex

        """
        triangles = delaunay.bowyer_watson(points, self.d)
        drawn = set()
        for triangle in triangles:
            for edge in triangle.edges():
                key = edge.key()
                if key in drawn:
                    continue
                drawn.add(key)
                self.draw_geodesic(canvas, edge.start, edge.end, **kwargs)
        return triangles


class DiskModel(Model):
    """A model of the hyperbolic plane in the open unit disk."""

    def contains(self, v):
        return bool(utils.normsq(model_coords(v)) < 1)

    def contains_coords(self, coords):
        return utils.normsq(np.asarray(coords, dtype=float)) < 1

    def draw(self, canvas, **kwargs):
        default_kwargs = {
            "facecolor": "none",
            "edgecolor": "black",
            "linewidth": 1
        }
        for key, value in kwargs.items():
            default_kwargs[key] = value

        return canvas.draw_circle(self.draw_origin, self.draw_radius,
                                  **default_kwargs)


class PoincareModel(DiskModel):
    """The Poincare disk. Isometries are Mobius transformations."""

    def __init__(self, draw_origin, draw_radius):
        DiskModel.__init__(self, draw_origin, draw_radius,
                           base_transformation=MobiusTransformation.identity())

    def d(self, p, q):
        return float(self.distances(model_coords(p), q))

    def distances(self, coords, q):
        coords = np.asarray(coords, dtype=float)
        q = model_coords(q)

        num = 2 * utils.normsq(coords - q)
        denom = (1 - utils.normsq(coords)) * (1 - utils.normsq(q))
        with np.errstate(divide="ignore", invalid="ignore"):
            return np.arccosh(1 + num / denom)

    def geodesic_circle(self, p, q):
        """Get the circle orthogonal to the unit circle through p and q.

        Returns
        -------
        tuple
            `(center, radius)` with center an ndarray of shape (2,), in
            model coordinates.

        Raises
        ------
        DegenerateGeometry
            Raised if p and q are collinear with the origin, in which
            case the geodesic is a diameter.

        """
        z = model_coords(p)
        w = model_coords(q)

        det = z[0] * w[1] - z[1] * w[0]
        if abs(det) < COLLINEAR_EPSILON:
            raise DegenerateGeometry(
                "Points {} and {} are collinear with the origin".format(z, w)
            )

        zz = utils.normsq(z) + 1
        ww = utils.normsq(w) + 1
        a = (z[1] * ww - w[1] * zz) / det
        b = (w[0] * zz - z[0] * ww) / det

        center = np.array([-a / 2, -b / 2])
        radius = np.sqrt(utils.normsq(center) - 1)
        return center, radius

    def draw_geodesic(self, canvas, p, q, **kwargs):
        try:
            center, radius = self.geodesic_circle(p, q)
        except DegenerateGeometry:
            return Model.draw_geodesic(self, canvas, p, q, **kwargs)

        canvas_center = self.frame.to_canvas_coords(center)
        endpoints = self.frame.to_canvas_coords(
            np.array([model_coords(p), model_coords(q)])
        )

        thetas = utils.short_arc(
            utils.circle_angles(canvas_center, endpoints)[np.newaxis]
        )[0]
        return canvas.draw_arc(canvas_center, radius * self.draw_radius,
                               thetas[0], thetas[1], **kwargs)


class KleinModel(DiskModel):
    """The Klein disk. Geodesics are straight chords and the metric is
    half the log of a cross ratio."""

    def chord(self, p, q):
        """Get the points where the line through p and q meets the unit
        circle, ordered so the first one is nearer to p."""
        x, y = model_coords(p), model_coords(q)
        if np.allclose(x, y, rtol=0., atol=0.):
            raise DegenerateGeometry("Chord through coincident points {}".format(x))

        u_min, u_max = utils.unit_circle_parameters(x, y)
        a = x + u_min * (y - x)
        b = x + u_max * (y - x)
        return (Vector.from_list(a[0], a[1], 1.), Vector.from_list(b[0], b[1], 1.))

    def cross_ratio(self, p, q):
        x, y = model_coords(p), model_coords(q)
        return float(utils.cross_ratio_from_parameters(
            *utils.unit_circle_parameters(x, y)
        ))

    def d(self, p, q):
        return float(self.distances(model_coords(p), q))

    def distances(self, coords, q):
        coords = np.asarray(coords, dtype=float)
        q = model_coords(q)
        q = np.broadcast_to(q, coords.shape)

        same = np.all(coords == q, axis=-1)
        ratio = utils.cross_ratio_from_parameters(
            *utils.unit_circle_parameters(q, coords)
        )
        with np.errstate(divide="ignore", invalid="ignore"):
            return np.where(same, 0., 0.5 * np.log(ratio))


def get_model(name, draw_origin, draw_radius, **kwargs):
    """Construct a model by name.

    Parameters
    ----------
    name : {"poincare", "klein", "hilbert"}
        "convex_projective" is accepted as an alias for "hilbert".
        Extra keyword arguments are passed to the
        `ConvexProjectiveModel` constructor.

    Raises
    ------
    ValueError
        Raised if the name is not recognized.

    """
    name = name.lower()
    if name == "poincare":
        return PoincareModel(draw_origin, draw_radius)
    if name == "klein":
        return KleinModel(draw_origin, draw_radius)
    if name in ("hilbert", "convex_projective"):
        from hilbert_geometry.hilbert import ConvexProjectiveModel
        return ConvexProjectiveModel(draw_origin, draw_radius, **kwargs)

    raise ValueError("Unknown model '{}'".format(name))

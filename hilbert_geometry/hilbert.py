"""Properly convex domains with the Hilbert metric.

The domain is the convex polygon tiled by the images of a reference
triangle under a projective reflection group from the bulging family
(see `hilbert_geometry.coxeter`), truncated at a bounded word length.
Distances are computed from the chord through two points: if the line
through x and y leaves the domain at a (on the side of x) and b (on the
side of y), then

    d(x, y) = 0.5 * log( |y - a| |b - x| / (|x - a| |b - y|) ).

```python
from hilbert_geometry.hilbert import ConvexProjectiveModel
from hilbert_geometry.linalg import Vector

domain = ConvexProjectiveModel((400, 400), 100, bulge=0.5)
domain.d(Vector.from_list(0., 0., 1.), Vector.from_list(0.1, 0.5, 1.))
```

"""

from collections import deque

import numpy as np

from hilbert_geometry import coxeter, convexity, utils
from hilbert_geometry.base import DegenerateGeometry
from hilbert_geometry.convexity import VERTEX_TOLERANCE
from hilbert_geometry.geometry import Edge
from hilbert_geometry.linalg import Vector, LinearTransformation
from hilbert_geometry.logging_utils import get_logger
from hilbert_geometry.model import Model, model_coords

logger = get_logger(__name__)

#cross ratio denominators below this are treated as degenerate
CROSS_RATIO_EPSILON = 1e-12

#number of recently hit boundary edges tried before a full scan
CHORD_CACHE_SIZE = 8

#tolerance on the edge parameter when deciding whether a line hits an edge
HIT_TOLERANCE = 1e-12

#number of points handled at once by the vectorized distance computation
DISTANCE_CHUNK_SIZE = 4096


class ConvexProjectiveModel(Model):
    """A properly convex polygon with its Hilbert metric.

    Attributes
    ----------
    bulge : float
        current value of the deformation parameter
    boundary : list of Edge
        the boundary edges, in counterclockwise cyclic order
    interior : list of Edge
        edges shared by two or more tiles
    generators : list of Matrix
        the three reflections generating the group
    group_elements : list of Matrix
        the group elements used to build the domain
    words : list of tuples
        the words (tuples of generator indices) of `group_elements`

    """

    def __init__(self, draw_origin, draw_radius,
                 bulge=coxeter.DEFAULT_BULGE,
                 max_length=coxeter.MAX_WORD_LENGTH,
                 vertex_tolerance=VERTEX_TOLERANCE):
        Model.__init__(self, draw_origin, draw_radius,
                       base_transformation=LinearTransformation.identity(3))

        self.max_length = max_length
        self.vertex_tolerance = vertex_tolerance
        self.triangle = coxeter.reference_triangle()
        self._chord_cache = deque(maxlen=CHORD_CACHE_SIZE)

        self.set_bulge(bulge)

    def set_bulge(self, t):
        """Rebuild the domain for a new value of the bulge parameter.

        The chord cache is *not* cleared; call `clear_chord_cache`
        after changing the bulge.

        Raises
        ------
        ValueError
            Raised if t is not positive.

        """
        self.generators = coxeter.bulge_reflections(t)
        self.bulge = t

        self.group_elements, self.words = coxeter.bounded_group_elements(
            self.generators, self.max_length,
            keep=lambda element: coxeter.nondegenerate_tile(element, self.triangle),
            with_words=True
        )

        tiles = [coxeter.tile_coords(element, self.triangle)
                 for element in self.group_elements]

        vertex_index = convexity.VertexIndex(self.vertex_tolerance)
        counts = convexity.count_edges(tiles, vertex_index)

        boundary_pairs = [pair for pair, count in counts.items() if count == 1]
        interior_pairs = [pair for pair, count in counts.items() if count >= 2]

        cycle = convexity.make_cycle(boundary_pairs)
        vertices = convexity.orient_counterclockwise(vertex_index.coords(cycle))

        self._vertices = vertices
        self._starts = vertices
        self._ends = np.roll(vertices, -1, axis=0)

        self.boundary = [Edge(_homogeneous(start), _homogeneous(end))
                         for start, end in zip(self._starts, self._ends)]
        self.interior = [Edge(_homogeneous(vertex_index.points[i]),
                              _homogeneous(vertex_index.points[j]))
                         for i, j in interior_pairs]

        logger.debug("bulge %s: %d tiles, %d boundary edges, %d interior edges",
                     t, len(tiles), len(self.boundary), len(self.interior))

    def clear_chord_cache(self):
        self._chord_cache.clear()

    def boundary_vertices(self):
        """Get the boundary vertices in counterclockwise order, as an
        ndarray of shape (k, 2)."""
        return self._vertices.copy()

    def contains(self, v):
        return bool(self.contains_coords(model_coords(v)))

    def contains_coords(self, coords):
        return convexity.polygon_contains(self._vertices, coords)

    def _hits(self, x, y, edge_indices):
        s, u = utils.line_segment_parameters(x, y,
                                             self._starts[edge_indices],
                                             self._ends[edge_indices])
        hit = (s >= -HIT_TOLERANCE) & (s <= 1 + HIT_TOLERANCE)
        return np.asarray(edge_indices)[hit], u[hit]

    def chord_parameters(self, x, y):
        """Find the boundary intersections of the line x + u (y - x).

        The cached edges are tried first. If they do not give one hit
        with u <= 0 and one with u >= 1, every boundary edge is
        scanned.

        Returns
        -------
        tuple
            `(u_min, u_max)`, the extreme line parameters among all
            boundary hits.

        Raises
        ------
        DegenerateGeometry
            Raised if x and y coincide, or if the line hits the
            boundary fewer than twice.

        """
        if np.all(x == y):
            raise DegenerateGeometry("Chord through coincident points {}".format(x))

        if len(self._chord_cache) > 0:
            cached = np.array(self._chord_cache)
            # indices left over from a larger boundary are skipped
            cached = cached[cached < len(self._starts)]
            edges, params = self._hits(x, y, cached)
            if np.any(params <= 0) and np.any(params >= 1):
                return np.min(params), np.max(params)
            logger.debug("chord cache miss, scanning %d boundary edges",
                         len(self.boundary))

        edges, params = self._hits(x, y, np.arange(len(self._starts)))
        if len(params) < 2:
            raise DegenerateGeometry(
                "Line through {} and {} meets the boundary {} time(s)".format(
                    x, y, len(params))
            )

        for edge in (edges[np.argmin(params)], edges[np.argmax(params)]):
            if edge not in self._chord_cache:
                self._chord_cache.append(edge)

        return np.min(params), np.max(params)

    def chord(self, p, q):
        """Get the chord of the domain through two points.

        Returns
        -------
        Edge
            endpoints `(a, b)` on the boundary, with a on the side of p
            and b on the side of q.

        """
        x, y = model_coords(p), model_coords(q)
        u_min, u_max = self.chord_parameters(x, y)
        return Edge(_homogeneous(x + u_min * (y - x)),
                    _homogeneous(x + u_max * (y - x)))

    def cross_ratio(self, p, q):
        """Cross ratio (|q - a| |b - p|) / (|p - a| |b - q|) of two points
        and the endpoints of their chord.

        Raises
        ------
        DegenerateGeometry
            Raised if the denominator is (numerically) zero, which
            happens when p or q lies on the boundary.

        """
        x, y = model_coords(p), model_coords(q)
        chord = self.chord(p, q)
        a = model_coords(chord.start)
        b = model_coords(chord.end)

        denom = np.linalg.norm(x - a) * np.linalg.norm(b - y)
        if denom < CROSS_RATIO_EPSILON:
            raise DegenerateGeometry(
                "Cross ratio of {} and {} is undefined (point on the boundary)".format(
                    x, y)
            )

        return float(np.linalg.norm(y - a) * np.linalg.norm(b - x) / denom)

    def d(self, p, q):
        x, y = model_coords(p), model_coords(q)
        if np.all(x == y):
            return 0.
        return 0.5 * np.log(self.cross_ratio(p, q))

    def distances(self, coords, q):
        """Vectorized Hilbert distance from many points to q.

        Points where the computation is degenerate (on or outside the
        boundary) get nan instead of raising. The chord cache is not
        used.
        """
        coords = np.asarray(coords, dtype=float)
        flat = coords.reshape((-1, 2))
        q = model_coords(q)

        result = np.empty(len(flat))
        for start in range(0, len(flat), DISTANCE_CHUNK_SIZE):
            chunk = flat[start:start + DISTANCE_CHUNK_SIZE]
            s, u = utils.line_segment_parameters(
                np.broadcast_to(q, chunk.shape), chunk,
                self._starts, self._ends
            )
            hit = (s >= -HIT_TOLERANCE) & (s <= 1 + HIT_TOLERANCE)
            u_min = np.min(np.where(hit, u, np.inf), axis=-1)
            u_max = np.max(np.where(hit, u, -np.inf), axis=-1)

            ratio = utils.cross_ratio_from_parameters(u_min, u_max)
            with np.errstate(divide="ignore", invalid="ignore"):
                dist = 0.5 * np.log(ratio)
            dist[~np.isfinite(dist)] = np.nan
            dist[np.all(chunk == q, axis=-1)] = 0.
            result[start:start + DISTANCE_CHUNK_SIZE] = dist

        return result.reshape(coords.shape[:-1])

    def orbit(self, point, max_length=None):
        """Get the images of a point under the group elements.

        Parameters
        ----------
        point : Vector
            a point in the domain
        max_length : int
            only use elements given by words of at most this length.
            Defaults to every element used to build the domain.

        Returns
        -------
        list of Vector
            distinct images lying in the domain, starting with the
            point itself

        """
        if max_length is None:
            max_length = self.max_length

        index = convexity.VertexIndex(self.vertex_tolerance)
        images = []
        for element, word in zip(self.group_elements, self.words):
            if len(word) > max_length:
                continue

            image = element.multiply(point).homogenize()
            xy = image.coords[:2]
            if not self.contains_coords(xy):
                continue

            if index.find(xy) is None:
                index.add(xy)
                images.append(image)

        return images

    def draw(self, canvas, interior=True, **kwargs):
        """Draw the boundary polygon and, optionally, the interior
        edges of the tiling."""
        default_kwargs = {
            "facecolor": "none",
            "edgecolor": "black",
            "linewidth": 1
        }
        for key, value in kwargs.items():
            default_kwargs[key] = value

        if interior and len(self.interior) > 0:
            segments = np.array([
                [tuple(self.model_to_canvas(edge.start)),
                 tuple(self.model_to_canvas(edge.end))]
                for edge in self.interior
            ])
            canvas.draw_segments(segments, color="lightgray", linewidth=0.5)

        return canvas.draw_polygon(self.frame.to_canvas_coords(self._vertices),
                                   **default_kwargs)

    def draw_chord(self, canvas, p, q, **kwargs):
        default_kwargs = {
            "color": "blue",
            "linewidth": 1
        }
        for key, value in kwargs.items():
            default_kwargs[key] = value

        chord = self.chord(p, q)
        a = self.model_to_canvas(chord.start)
        b = self.model_to_canvas(chord.end)
        canvas.draw_line(a, b, **default_kwargs)
        canvas.draw_point(a, color=default_kwargs["color"])
        canvas.draw_point(b, color=default_kwargs["color"])
        return chord

    def draw_orbit(self, canvas, point, max_length=None, **kwargs):
        """Draw the images of a point under reduced words in the
        generators, walking the words depth-first with the
        transformation stack."""
        if max_length is None:
            max_length = self.max_length

        generators = [LinearTransformation(gen) for gen in self.generators]
        count = self._draw_orbit(canvas, point, generators, (), max_length, **kwargs)
        logger.debug("drew %d orbit points", count)
        return count

    def _draw_orbit(self, canvas, point, generators, word, max_length, **kwargs):
        self.draw_point(canvas, point, **kwargs)
        count = 1
        if len(word) >= max_length:
            return count

        for i, generator in enumerate(generators):
            if len(word) > 0 and word[-1] == i:
                continue
            self.push(generator)
            count += self._draw_orbit(canvas, point, generators, word + (i,),
                                      max_length, **kwargs)
            self.pop()
        return count


def _homogeneous(xy):
    return Vector.from_list(xy[0], xy[1], 1.)

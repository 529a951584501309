"""Basic geometric objects: canvas points, edges, simplices and
metric circles.

Edges and simplices hold model-space `Vector`s. Nothing here assumes a
particular metric; `Simplex.circumcircle` takes the distance function
as an argument.
"""

import numpy as np
import scipy.linalg

from hilbert_geometry.base import GeometryError
from hilbert_geometry.linalg import Vector

#endpoints closer than this (coordinate-wise) are considered equal
EDGE_TOLERANCE = 1e-4


class Point:
    """A point on the drawing canvas, in pixel coordinates."""

    @staticmethod
    def rand_point(width, height, rng=None):
        """Get a uniformly random point in the rectangle [0, width) x [0, height).

        Parameters
        ----------
        rng : numpy.random.Generator
            source of randomness. If None, a fresh default generator
            is used.

        """
        if rng is None:
            rng = np.random.default_rng()
        return Point(rng.uniform(0, width), rng.uniform(0, height))

    def __init__(self, x, y):
        self.x = float(x)
        self.y = float(y)

    def to_array(self):
        return np.array([self.x, self.y])

    def add(self, other):
        return Point(self.x + other.x, self.y + other.y)

    def subtract(self, other):
        return Point(self.x - other.x, self.y - other.y)

    def distance(self, other):
        return float(np.hypot(self.x - other.x, self.y - other.y))

    def equals(self, other, tolerance=0.):
        return (abs(self.x - other.x) <= tolerance and
                abs(self.y - other.y) <= tolerance)

    def __iter__(self):
        return iter((self.x, self.y))

    def __repr__(self):
        return "Point({}, {})".format(self.x, self.y)


class Edge:
    """An unordered pair of vectors."""

    def __init__(self, start, end):
        self.start = Vector(start)
        self.end = Vector(end)

    @property
    def endpoints(self):
        return (self.start, self.end)

    def equals(self, other, tolerance=EDGE_TOLERANCE):
        """Check whether two edges have the same endpoints, in either
        order, up to `tolerance`."""
        return ((self.start.equals(other.start, tolerance) and
                 self.end.equals(other.end, tolerance)) or
                (self.start.equals(other.end, tolerance) and
                 self.end.equals(other.start, tolerance)))

    def key(self, decimals=4):
        """Hashable key which does not depend on endpoint order."""
        return tuple(sorted([self.start.key(decimals), self.end.key(decimals)]))

    def __repr__(self):
        return "Edge({}, {})".format(list(self.start), list(self.end))


class Circle:
    """A metric circle: every point at distance `radius` from `center`."""

    def __init__(self, center, radius):
        self.center = Vector(center)
        self.radius = radius

    def contains(self, point, distance):
        """Check whether a point lies strictly inside this circle,
        measuring with the given distance function.

        A nan radius contains nothing.
        """
        return distance(self.center, point) < self.radius

    def __repr__(self):
        return "Circle({}, {})".format(list(self.center), self.radius)


class Simplex:
    """An n-simplex, given by its n+1 vertices."""

    def __init__(self, vertices):
        if len(vertices) < 2:
            raise GeometryError(
                "A simplex needs at least two vertices, got {}".format(len(vertices))
            )
        self.vertices = [Vector(v) for v in vertices]

    @property
    def dimension(self):
        return len(self.vertices) - 1

    def edges(self):
        """Get the cyclic list of edges (v0, v1), (v1, v2), ..., (vn, v0).

        For a 1-simplex this is just the single edge.
        """
        if len(self.vertices) == 2:
            return [Edge(*self.vertices)]

        return [Edge(self.vertices[i], self.vertices[(i + 1) % len(self.vertices)])
                for i in range(len(self.vertices))]

    def distance_matrix(self, distance):
        n = len(self.vertices)
        dists = np.zeros((n, n))
        for i in range(n):
            for j in range(i + 1, n):
                dists[i, j] = distance(self.vertices[i], self.vertices[j])
                dists[j, i] = dists[i, j]
        return dists

    def circumcircle(self, distance):
        """Compute the circumcircle of this simplex for an arbitrary metric.

        The bordered Cayley-Menger matrix

            M = [[0, 1  ],
                 [1, D^2]]

        (with D the matrix of pairwise distances) is inverted. The first
        row of the inverse gives barycentric coordinates of the center
        (after normalizing), and its corner entry gives the radius as
        sqrt(-Q[0, 0] / 2). For the euclidean metric this is the usual
        circumcircle; for other metrics it is only a heuristic.

        Parameters
        ----------
        distance : callable
            function taking two vertices and returning a float

        Returns
        -------
        Circle
            The center is the barycentric combination of the vertices.
            The radius may be nan if the metric is far from euclidean.

        """
        n = len(self.vertices)
        dists = self.distance_matrix(distance)

        bordered = np.ones((n + 1, n + 1))
        bordered[0, 0] = 0.
        bordered[1:, 1:] = dists * dists

        inv = scipy.linalg.inv(bordered)
        weights = inv[0, 1:] / np.sum(inv[0, 1:])

        coords = np.array([v.coords for v in self.vertices])
        center = Vector(weights @ coords)

        with np.errstate(invalid="ignore"):
            radius = float(np.sqrt(-inv[0, 0] / 2))

        return Circle(center, radius)

    def __repr__(self):
        return "Simplex({})".format([list(v) for v in self.vertices])

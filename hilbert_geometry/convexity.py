"""Work with convex polygons in the affine plane.

The boundary of a convex domain is built edge by edge from many
overlapping triangles, so vertices have to be identified up to a small
tolerance before the edges can be put in cyclic order.

"""

from collections import defaultdict

import numpy as np
from matplotlib.path import Path

from hilbert_geometry.base import GeometryError

#vertices closer than this (in each coordinate) are identified
VERTEX_TOLERANCE = 1e-6


class VertexIndex:
    """Assign integer indices to points in the plane, identifying
    points which are within `tolerance` of each other.

    Points are bucketed on a grid of cell size `tolerance`; a lookup
    checks the neighbouring cells as well, so two points closer than
    the tolerance always get the same index.
    """

    def __init__(self, tolerance=VERTEX_TOLERANCE):
        self.tolerance = tolerance
        self.points = []
        self._cells = defaultdict(list)

    def __len__(self):
        return len(self.points)

    def _cell(self, point):
        return tuple(np.floor(np.asarray(point) / self.tolerance).astype(int))

    def find(self, point):
        """Get the index of a known point near `point`, or None."""
        point = np.asarray(point, dtype=float)
        cell = self._cell(point)
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                for index in self._cells[(cell[0] + dx, cell[1] + dy)]:
                    if np.all(np.abs(self.points[index] - point) <= self.tolerance):
                        return index
        return None

    def add(self, point):
        """Get the index for `point`, adding it if no nearby point is
        known yet."""
        index = self.find(point)
        if index is not None:
            return index

        point = np.array(point, dtype=float)
        index = len(self.points)
        self.points.append(point)
        self._cells[self._cell(point)].append(index)
        return index

    def coords(self, indices=None):
        if indices is None:
            return np.array(self.points)
        return np.array([self.points[i] for i in indices])


def count_edges(polygons, vertex_index):
    """Count how many of the given polygons contain each edge.

    Parameters
    ----------
    polygons : iterable of ndarrays of shape (k, 2)
        vertices of each polygon, in cyclic order
    vertex_index : VertexIndex
        used to identify nearby vertices. New vertices are added to it.

    Returns
    -------
    dict
        maps sorted index pairs `(i, j)` to edge counts. Degenerate
        edges (both endpoints identified) are dropped.

    """
    counts = defaultdict(int)
    for polygon in polygons:
        indices = [vertex_index.add(v) for v in polygon]
        for i in range(len(indices)):
            a, b = indices[i], indices[(i + 1) % len(indices)]
            if a != b:
                counts[(min(a, b), max(a, b))] += 1
    return counts

def make_cycle(simplices):
    """Get cyclically ordered indices representing the boundary of a
    convex polygon.

    Simplices is a sequence of index pairs. Each index represents a
    vertex in the boundary of a convex polygon, and each simplex is an
    edge in the boundary.

    Return: a list of indices corresponding to the cyclic order
    determined by the simplices (or the reverse). Raises GeometryError
    if the edges do not form a single closed cycle.

    """
    if len(simplices) == 0:
        return []

    neighbors = defaultdict(list)
    for simplex in simplices:
        neighbors[simplex[0]].append(simplex[1])
        neighbors[simplex[1]].append(simplex[0])

    for vertex, adjacent in neighbors.items():
        if len(adjacent) != 2:
            raise GeometryError(
                "Vertex {} has {} boundary neighbors, expected 2".format(
                    vertex, len(adjacent))
            )

    indices = []
    prev_point = None
    current_point = simplices[0][0]
    first_point = current_point
    while True:
        indices.append(current_point)
        n1, n2 = neighbors[current_point]
        if n1 != prev_point:
            prev_point, current_point = current_point, n1
        else:
            prev_point, current_point = current_point, n2

        if current_point == first_point:
            break

    if len(indices) != len(neighbors):
        raise GeometryError(
            "Boundary edges form more than one cycle ({} of {} vertices visited)".format(
                len(indices), len(neighbors))
        )
    return indices

def orient_counterclockwise(coords):
    """Reverse a cyclically ordered polygon if it is clockwise."""
    xs, ys = coords[:, 0], coords[:, 1]
    signed_area = 0.5 * np.sum(xs * np.roll(ys, -1) - np.roll(xs, -1) * ys)
    if signed_area < 0:
        return coords[::-1]
    return coords

def polygon_path(coords):
    """Get a closed matplotlib Path through cyclically ordered vertices."""
    coords = np.asarray(coords, dtype=float)
    return Path(np.concatenate([coords, coords[:1]]), closed=True)

def polygon_contains(coords, points, radius=0.):
    """Check which points lie inside a polygon.

    Parameters
    ----------
    coords : ndarray of shape (k, 2)
        polygon vertices in cyclic order
    points : ndarray of shape (..., 2)
        points to test
    radius : float
        passed through to `Path.contains_points`. A small negative
        value shrinks the polygon for a counterclockwise path.

    Returns
    -------
    ndarray of bools with shape points.shape[:-1]

    """
    points = np.asarray(points, dtype=float)
    flat = points.reshape((-1, 2))
    inside = polygon_path(coords).contains_points(flat, radius=radius)
    return inside.reshape(points.shape[:-1])

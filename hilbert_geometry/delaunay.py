"""Delaunay triangulations and Voronoi colourings for arbitrary metrics.

`bowyer_watson` is the incremental Bowyer-Watson algorithm, with the
euclidean circumcircle replaced by the metric circumcircle of
`geometry.Simplex.circumcircle`. Since the metric circumcircle is only
a heuristic away from the euclidean case, the Voronoi cells of a set
of sites are drawn by brute force instead, with
`nearest_site_labels`.

"""

from collections import defaultdict

import numpy as np

from hilbert_geometry.base import GeometryError
from hilbert_geometry.geometry import Point, Simplex
from hilbert_geometry.linalg import Vector
from hilbert_geometry.logging_utils import get_logger

logger = get_logger(__name__)

#the super triangle's incircle is this many times larger than the
#bounding box of the input points
SUPER_TRIANGLE_SCALE = 20.

#largest number of sites for nearest-site colouring
MAX_SITES = 100

#input points closer than this to an existing vertex are skipped
DUPLICATE_TOLERANCE = 1e-12

#number of random draws per requested site before giving up
SAMPLE_ATTEMPTS = 1000


def euclidean_distance(u, v):
    """Euclidean distance between the affine parts of two vectors."""
    return float(np.linalg.norm(_xy(u) - _xy(v)))

def _xy(v):
    if v.dimension == 3:
        return v.homogenize().coords[:2]
    return v.coords[:2]

def super_triangle(points, scale=SUPER_TRIANGLE_SCALE):
    """Get an equilateral triangle containing every point.

    The triangle is centered on the bounding box of the points and its
    incircle has radius `scale` times half the diagonal of the box (or
    `scale` if the box is a single point).

    Returns
    -------
    list of Vector
        three homogeneous vertices (x, y, 1)

    """
    coords = np.array([_xy(v) for v in points])
    lower = np.min(coords, axis=0)
    upper = np.max(coords, axis=0)

    center = (lower + upper) / 2
    size = np.linalg.norm(upper - lower) / 2
    if size == 0:
        size = 1.

    # the circumradius of an equilateral triangle is twice its inradius
    circumradius = 2 * scale * size
    thetas = np.pi / 2 + 2 * np.pi * np.arange(3) / 3
    return [Vector.from_list(center[0] + circumradius * np.cos(theta),
                             center[1] + circumradius * np.sin(theta),
                             1.)
            for theta in thetas]

def _contains_euclidean(vertices, point):
    (x0, y0), (x1, y1), (x2, y2) = [_xy(v) for v in vertices]
    px, py = _xy(point)

    d0 = (x1 - x0) * (py - y0) - (y1 - y0) * (px - x0)
    d1 = (x2 - x1) * (py - y1) - (y2 - y1) * (px - x1)
    d2 = (x0 - x2) * (py - y2) - (y0 - y2) * (px - x2)

    has_neg = (d0 < 0) or (d1 < 0) or (d2 < 0)
    has_pos = (d0 > 0) or (d1 > 0) or (d2 > 0)
    return not (has_neg and has_pos)

def _edges(triangle):
    a, b, c = triangle
    return [tuple(sorted(pair)) for pair in ((a, b), (b, c), (c, a))]

def _cavity_boundary(cavity):
    """Edges belonging to exactly one triangle of the cavity."""
    edge_counts = defaultdict(int)
    for triangle in cavity:
        for edge in _edges(triangle):
            edge_counts[edge] += 1
    return sorted(edge for edge, count in edge_counts.items() if count == 1)

def _orientation(a, b, c):
    return (b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])

def _repair_cavity(bad, seed, coords, new_index):
    """Shrink a set of bad triangles to a cavity which can be refilled
    with a fan around the new point.

    With a non-euclidean metric the bad triangles found by the flood
    fill can surround an existing vertex, or form a region the new
    point cannot see all of. Triangles other than `seed` are dropped
    from the cavity, one at a time, until every vertex of the cavity
    lies on its boundary and the new point is strictly on the inner
    side of every boundary edge.

    Parameters
    ----------
    bad : set of tuples
        index triples of the bad triangles, including `seed`
    seed : tuple
        the triangle containing the new point. It is never dropped.
    coords : ndarray of shape (n, 2)
        affine coordinates of every vertex
    new_index : int
        index of the new point in `coords`

    Returns
    -------
    set of tuples
        the repaired cavity

    """
    cavity = set(bad)
    point = coords[new_index]

    while True:
        boundary = set(_cavity_boundary(cavity))
        on_boundary = {i for edge in boundary for i in edge}

        drop = None
        for triangle in sorted(cavity):
            if triangle == seed:
                continue

            if any(i not in on_boundary for i in triangle):
                drop = triangle
                break

            for a, b in _edges(triangle):
                if (a, b) not in boundary:
                    continue
                c = sum(triangle) - a - b
                inner = _orientation(coords[a], coords[b], coords[c])
                side = _orientation(coords[a], coords[b], point)
                if inner * side <= 0:
                    drop = triangle
                    break

            if drop is not None:
                break

        if drop is None:
            return cavity
        cavity.discard(drop)

def bowyer_watson(points, distance, with_indices=False):
    """Compute a Delaunay triangulation of some points for a metric.

    Parameters
    ----------
    points : list of Vector
        points to triangulate, as homogeneous model points
    distance : callable
        metric taking two vectors. Triangles with a vertex on the
        super triangle are tested with the euclidean metric instead,
        since the super triangle is usually outside the model.
    with_indices : bool
        If True, also return the triangles as index triples into
        `points`.

    Returns
    -------
    list of Simplex or tuple
        the triangles of the triangulation. Any triangle with a vertex
        on the super triangle is discarded. If `with_indices` is True,
        a tuple `(simplices, index_triples)`.

    Notes
    -----
    Before a cavity is refilled it is shrunk with `_repair_cavity`, so
    that every point inserted so far stays a vertex of the mesh even
    when the metric circumcircles are only approximate.

    """
    points = [Vector(p) for p in points]
    if len(points) == 0:
        if with_indices:
            return [], []
        return []

    vertices = super_triangle(points) + points
    coords = np.array([_xy(v) for v in vertices])

    triangles = set()
    edge_triangles = defaultdict(set)
    circles = {}

    def add_triangle(triangle):
        triangles.add(triangle)
        for edge in _edges(triangle):
            edge_triangles[edge].add(triangle)

    def remove_triangle(triangle):
        triangles.discard(triangle)
        circles.pop(triangle, None)
        for edge in _edges(triangle):
            edge_triangles[edge].discard(triangle)
            if len(edge_triangles[edge]) == 0:
                del edge_triangles[edge]

    def metric_for(triangle):
        if min(triangle) < 3:
            return euclidean_distance
        return distance

    def in_circumcircle(triangle, point):
        metric = metric_for(triangle)
        if triangle not in circles:
            circles[triangle] = Simplex(
                [vertices[i] for i in triangle]
            ).circumcircle(metric)
        return circles[triangle].contains(point, metric)

    add_triangle((0, 1, 2))

    for new_index in range(3, len(vertices)):
        point = vertices[new_index]

        if any(vertices[i].equals(point, DUPLICATE_TOLERANCE)
               for i in range(3, new_index)):
            logger.debug("skipping duplicate point %s", list(point))
            continue

        seed = None
        for triangle in triangles:
            if _contains_euclidean([vertices[i] for i in triangle], point):
                seed = triangle
                break

        if seed is None:
            raise GeometryError(
                "Point {} is outside the super triangle".format(list(point))
            )

        bad = {seed}
        frontier = [seed]
        while frontier:
            triangle = frontier.pop()
            for edge in _edges(triangle):
                for neighbor in edge_triangles[edge]:
                    if neighbor in bad:
                        continue
                    if in_circumcircle(neighbor, point):
                        bad.add(neighbor)
                        frontier.append(neighbor)

        cavity = _repair_cavity(bad, seed, coords, new_index)
        if len(cavity) < len(bad):
            logger.debug("cavity of point %d shrunk from %d to %d triangles",
                         new_index - 3, len(bad), len(cavity))

        boundary = _cavity_boundary(cavity)

        for triangle in cavity:
            remove_triangle(triangle)

        for a, b in boundary:
            add_triangle(tuple(sorted((a, b, new_index))))

    index_triples = sorted(tuple(i - 3 for i in triangle)
                           for triangle in triangles if min(triangle) >= 3)

    logger.debug("triangulated %d points into %d triangles",
                 len(points), len(index_triples))

    simplices = [Simplex([points[i] for i in triple]) for triple in index_triples]
    if with_indices:
        return simplices, index_triples
    return simplices

def nearest_site_labels(model, sites, width, height, step=1):
    """Label each canvas pixel by the index of its nearest site.

    Parameters
    ----------
    model : Model
        provides the canvas frame and the metric
    sites : list of Vector
        model points
    width, height : int
        canvas size in pixels
    step : int
        pixel stride. Each computed label fills a step x step block.

    Returns
    -------
    ndarray of ints with shape (height, width)
        index of the nearest site, or -1 for pixels outside the model

    """
    step = max(int(step), 1)
    xs = np.arange(0, width, step)
    ys = np.arange(0, height, step)
    gx, gy = np.meshgrid(xs, ys)
    pixels = np.stack([gx, gy], axis=-1).reshape((-1, 2)).astype(float)

    coords = model.frame.to_model_coords(pixels)
    inside = model.contains_coords(coords)

    labels = np.full(len(pixels), -1, dtype=int)
    if np.any(inside) and len(sites) > 0:
        inside_coords = coords[inside]
        best_dist = np.full(len(inside_coords), np.inf)
        best_label = np.zeros(len(inside_coords), dtype=int)

        # running minimum over the sites
        for index, site in enumerate(sites):
            dists = model.distances(inside_coords, site)
            closer = np.less(dists, best_dist)
            best_dist = np.where(closer, dists, best_dist)
            best_label = np.where(closer, index, best_label)

        labels[inside] = best_label

    labels = labels.reshape((len(ys), len(xs)))
    labels = np.repeat(np.repeat(labels, step, axis=0), step, axis=1)
    return labels[:height, :width]

def sample_points(model, count, rng=None):
    """Draw random sites inside a model.

    Candidate pixels are drawn uniformly from the square of side
    2 * draw_radius around the model's draw origin, and kept if they
    lie in the model.

    Raises
    ------
    ValueError
        Raised if count is less than 1 or more than MAX_SITES.
    GeometryError
        Raised if too few random pixels land in the model.

    """
    if count < 1 or count > MAX_SITES:
        raise ValueError(
            "Number of sites must be between 1 and {}, got {}".format(
                MAX_SITES, count)
        )

    if rng is None:
        rng = np.random.default_rng()

    origin = model.draw_origin
    radius = model.draw_radius

    sites = []
    for _ in range(count * SAMPLE_ATTEMPTS):
        offset = Point.rand_point(2 * radius, 2 * radius, rng)
        pixel = Point(origin.x - radius + offset.x, origin.y - radius + offset.y)
        site = model.canvas_to_model(pixel)
        if model.contains(site):
            sites.append(site)
            if len(sites) == count:
                return sites

    raise GeometryError(
        "Only found {} of {} sites inside the model".format(len(sites), count)
    )

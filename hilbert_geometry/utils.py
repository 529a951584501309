"""Provide utility functions used by the various geometry tools in
this package.

"""

import numpy as np

def perpendicular(vectors):
    """Rotate an ndarray of 2d vectors counterclockwise by a right
    angle.

    """
    vectors = np.asarray(vectors, dtype=float)
    return np.stack([-1 * vectors[..., 1], vectors[..., 0]], axis=-1)

def apply_bilinear(v1, v2, bilinear_form=None):
    """apply a bilinar form to a pair of arrays of vectors.

    if v1 and v2 are ndarrays of shape (..., n) and (..., n), apply
    the bilinear form elementwise to them, using standard broadcasting
    rules.

    """

    if bilinear_form is None:
        bilinear_form = np.identity(v1.shape[-1])

    return ((v1 @ bilinear_form) * v2).sum(-1)

def normsq(vectors, bilinear_form=None):
    """norm of an ndarray of vectors"""
    return apply_bilinear(vectors, vectors, bilinear_form)

def circle_angles(center, coords):
    """Return angles relative to the center of a circle.

    Parameters:
    -----------
    center: ndarray of shape (..., 2) representing x,y coordinates the
    centers of some circles.

    coords: ndarray of shape (..., 2) representing x,y coordinates of
    some points.

    Return:
    --------
    ndarray representing angles (relative to x-axis) of each of the
    pair of points specified by coords.

    """
    xs = (coords - np.expand_dims(center, axis=-2))[..., 0]
    ys = (coords - np.expand_dims(center, axis=-2))[..., 1]

    return np.arctan2(ys, xs)

def short_arc(thetas):
    """reorder angles so that the counterclockwise arc between them is
    shorter than the clockwise angle.

    Parameters:
    ------------
    thetas: ndarray of pairs of angles in the range (-2pi, 2pi)

    Return:
    ------------
    ndarray of pairs of angles in the range [0, 2pi). a subset of the
    pairs in thetas have been swapped.

    """
    shifted_thetas = np.copy(thetas)

    shifted_thetas[shifted_thetas < 0] += 2 * np.pi
    shifted_thetas.sort(axis=-1)

    to_flip = shifted_thetas[...,1] - shifted_thetas[...,0] > np.pi
    shifted_thetas[to_flip] = np.flip(shifted_thetas[to_flip], axis=-1)

    return shifted_thetas


def line_segment_parameters(x, y, starts, ends):
    """Intersect lines through pairs of points with an array of segments.

    Each line is parameterized as x + u (y - x) and each segment as
    start + s (end - start).

    Parameters:
    -----------
    x, y: ndarrays of shape (..., 2)

    starts, ends: ndarrays of shape (k, 2)

    Return:
    --------
    tuple (s, u) of ndarrays of shape (..., k). Entries for segments
    parallel to their line are nan.

    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)

    direction = np.expand_dims(y - x, axis=-2)
    edge_dirs = ends - starts
    offsets = starts - np.expand_dims(x, axis=-2)

    # cross products of 2d vectors
    denom = direction[..., 0] * edge_dirs[..., 1] - direction[..., 1] * edge_dirs[..., 0]
    u_num = offsets[..., 0] * edge_dirs[..., 1] - offsets[..., 1] * edge_dirs[..., 0]
    s_num = offsets[..., 0] * direction[..., 1] - offsets[..., 1] * direction[..., 0]

    with np.errstate(divide="ignore", invalid="ignore"):
        parallel = np.abs(denom) < 1e-14
        safe = np.where(parallel, 1., denom)
        s = np.where(parallel, np.nan, s_num / safe)
        u = np.where(parallel, np.nan, u_num / safe)

    return s, u

def unit_circle_parameters(x, y):
    """Find where the line through x and y meets the unit circle.

    The line is parameterized as x + u (y - x). Returns the two
    parameters (u_min, u_max), which are nan when the line misses the
    circle. Works on ndarrays of points of shape (..., 2).

    """
    direction = y - x
    a = normsq(direction)
    b = 2 * apply_bilinear(x, direction)
    c = normsq(x) - 1

    with np.errstate(divide="ignore", invalid="ignore"):
        disc = np.sqrt(b * b - 4 * a * c)
        return (-b - disc) / (2 * a), (-b + disc) / (2 * a)

def cross_ratio_from_parameters(u_min, u_max):
    """Cross ratio of x, y and the endpoints a, b of the chord through
    them, where the chord is parameterized as x + u (y - x) and a, b sit
    at parameters u_min <= 0 and u_max >= 1.

    This is (|y - a| |b - x|) / (|x - a| |b - y|); the length of y - x
    cancels.

    """
    with np.errstate(divide="ignore", invalid="ignore"):
        return ((1 - u_min) * u_max) / ((-1 * u_min) * (u_max - 1))

"""Projective reflection groups deforming the ideal triangle group.

The groups here are generated by three projective reflections in the
sides of a fixed equilateral triangle. The reflections are determined
by a Cartan matrix depending on one parameter, the *bulge* `t`. At
`t = 1` the group is the hyperbolic ideal triangle group, acting on
the Klein disk; for other values the orbit of the triangle tiles a
properly convex domain which is not an ellipse.

```python
from hilbert_geometry import coxeter

gens = coxeter.bulge_reflections(0.5)
elements = coxeter.bounded_group_elements(gens, 4)
```

"""

from collections import deque

import numpy as np
import scipy.linalg

from hilbert_geometry.base import GeometryError
from hilbert_geometry.linalg import Matrix
from hilbert_geometry.logging_utils import get_logger

logger = get_logger(__name__)

#default word length bound for group enumeration
MAX_WORD_LENGTH = 7

#default value of the deformation parameter
DEFAULT_BULGE = 0.5

#tolerance when checking the eigenvalues of a reflection
REFLECTION_TOLERANCE = 1e-8

#tiles with smaller euclidean area are dropped, along with every tile
#beyond them
MIN_TILE_AREA = 1e-10


def reference_triangle():
    """Get the vertices of the reference triangle.

    Returns
    -------
    ndarray
        Array of shape (3, 3). Row k is the homogeneous vector
        (cos theta, sin theta, 1) with theta = pi/2 + 2 pi k / 3.

    """
    thetas = np.pi / 2 + 2 * np.pi * np.arange(3) / 3
    return np.column_stack([np.cos(thetas), np.sin(thetas), np.ones(3)])

def bulge_cartan_matrix(t):
    """Get the Cartan matrix of the bulging family at parameter t.

    The diagonal entries are 2. Every off-diagonal entry is
    -(t + 1/t), except for the (0, 1) and (1, 0) entries, which are
    scaled by t and 1/t respectively. The products of opposite
    off-diagonal entries are all (t + 1/t)^2 >= 4, so every pair of
    generators generates an infinite group.

    Raises
    ------
    ValueError
        Raised if t is not positive.

    """
    if t <= 0:
        raise ValueError("Bulge parameter must be positive, got {}".format(t))

    c = -1 * (t + 1 / t)
    cartan = np.full((3, 3), c)
    np.fill_diagonal(cartan, 2.)
    cartan[0, 1] = c * t
    cartan[1, 0] = c / t
    return cartan

def barycentric_functionals(triangle):
    """Get the linear functionals alpha_j with alpha_j(p_k) = delta_jk.

    Parameters
    ----------
    triangle : ndarray of shape (3, 3)
        rows are (homogeneous) vertices p_k

    Returns
    -------
    ndarray of shape (3, 3)
        row j is the functional alpha_j, which vanishes on the side
        opposite p_j.

    """
    return scipy.linalg.inv(triangle.T)

def cartan_reflections(cartan, triangle=None):
    """Build projective reflections in the sides of a triangle.

    The j-th reflection is r_j = I - v_j alpha_j, where alpha_j is the
    barycentric functional vanishing on the side opposite p_j and
    v_j = sum_i A_ij p_i. Since A_jj = 2, r_j fixes that side
    pointwise and negates v_j.

    Returns
    -------
    list of Matrix
        the three reflections, each checked with `check_reflection`.

    """
    if triangle is None:
        triangle = reference_triangle()

    functionals = barycentric_functionals(triangle)
    reflections = []
    for j in range(3):
        v_j = triangle.T @ cartan[:, j]
        reflection = Matrix(np.identity(3) - np.outer(v_j, functionals[j]))
        check_reflection(reflection)
        reflections.append(reflection)

    return reflections

def bulge_reflections(t):
    """Get the three generating reflections of the bulging family."""
    return cartan_reflections(bulge_cartan_matrix(t))

def check_reflection(matrix, tolerance=REFLECTION_TOLERANCE):
    """Verify that a 3x3 matrix has eigenvalues -1, 1, 1.

    Raises
    ------
    GeometryError
        Raised if the eigenvalues are not (numerically) -1, 1, 1.

    """
    values, _ = matrix.eigs()
    values = np.sort(values)
    if not np.allclose(values, [-1., 1., 1.], atol=tolerance):
        raise GeometryError(
            "Expected eigenvalues (-1, 1, 1) for a reflection, got {}".format(values)
        )

def reduced_words(num_generators, length):
    """Yield words in involutive generators with no letter repeated
    twice in a row, of a specified length.

    Words are tuples of generator indices.
    """
    if length == 0:
        yield ()
    else:
        for word in reduced_words(num_generators, length - 1):
            for generator in range(num_generators):
                if len(word) == 0 or generator != word[-1]:
                    yield word + (generator,)

def bounded_group_elements(generators, max_length=MAX_WORD_LENGTH,
                           keep=None, with_words=False):
    """Enumerate group elements given by words of bounded length.

    Words are expanded breadth-first by multiplying on the right by a
    generator. Each new element is compared against the elements seen
    so far using `Matrix.canonical_key`, so elements repeated up to
    scaling and rounding are only returned once.

    Parameters
    ----------
    generators : list of Matrix
        involutive generators
    max_length : int
        maximum word length (inclusive)
    keep : callable
        optional predicate on matrices. An element for which it
        returns False is dropped and its word is not extended.
    with_words : bool
        If True, also return the words (tuples of generator indices).

    Returns
    -------
    list or tuple
        The elements, starting with the identity, in order of word
        length. If `with_words` is True, a tuple `(elements, words)`.

    """
    identity = Matrix.identity(generators[0].rows)
    elements = [identity]
    words = [()]
    seen = {identity.canonical_key()}

    worklist = deque([((), identity)])
    while worklist:
        word, element = worklist.popleft()
        if len(word) >= max_length:
            continue

        for i, generator in enumerate(generators):
            if len(word) > 0 and word[-1] == i:
                continue

            product = element.multiply(generator)
            if keep is not None and not keep(product):
                continue

            key = product.canonical_key()
            if key in seen:
                continue

            seen.add(key)
            elements.append(product)
            words.append(word + (i,))
            worklist.append((word + (i,), product))

    logger.debug("enumerated %d group elements up to word length %d",
                 len(elements), max_length)

    if with_words:
        return elements, words
    return elements

def tile_coords(element, triangle=None):
    """Get affine coordinates of the image of a triangle.

    Returns
    -------
    ndarray of shape (3, 2)

    """
    if triangle is None:
        triangle = reference_triangle()

    images = (element.mat @ triangle.T).T
    return images[:, :2] / images[:, 2:]

def triangle_area(coords):
    """Unsigned euclidean area of a triangle given as a (3, 2) array."""
    (x0, y0), (x1, y1), (x2, y2) = coords
    return 0.5 * abs((x1 - x0) * (y2 - y0) - (x2 - x0) * (y1 - y0))

def nondegenerate_tile(element, triangle=None, min_area=MIN_TILE_AREA):
    """Check whether a group element maps a triangle to a tile of
    reasonable size lying in the affine chart."""
    if triangle is None:
        triangle = reference_triangle()

    images = (element.mat @ triangle.T).T
    scale = np.max(np.abs(images), axis=1)
    if np.any(np.abs(images[:, 2]) < 1e-12 * scale):
        return False

    # a tile crossing the line at infinity has no affine picture
    if len(np.unique(np.sign(images[:, 2]))) > 1:
        return False

    return triangle_area(tile_coords(element, triangle)) >= min_area

"""Small dense linear algebra for projective geometry of the plane.

The classes here are thin, immutable wrappers around numpy arrays.
`Matrix` and `Vector` (a column matrix) are what the metric models
pass around; `LinearTransformation` and `MobiusTransformation` are the
two concrete kinds of `Transformation`, and `TransformationStack`
keeps cumulative group elements for a depth-first walk over an orbit.

Numerically delicate operations (inversion, eigenvalues) are
delegated to scipy.

```python
from hilbert_geometry.linalg import Matrix, Vector

rot = Matrix([[0., -1., 0.],
              [1.,  0., 0.],
              [0.,  0., 1.]])
rot.multiply(Vector.from_list(1., 0., 1.))
```
"""

import cmath

import numpy as np
import scipy.linalg

from hilbert_geometry.base import DimensionMismatch

#coordinates smaller than this are treated as zero when homogenizing
HOMOGENIZE_EPSILON = 1e-10

#decimal places kept when building approximate dedup keys
KEY_DECIMALS = 6


class Matrix:
    """A dense real matrix with value semantics.

    Every operation returns a new object; the underlying array is
    marked read-only.
    """

    @staticmethod
    def identity(n):
        return Matrix(np.identity(n))

    @staticmethod
    def zeros(rows, columns):
        return Matrix(np.zeros((rows, columns)))

    def __init__(self, mat):
        """
        Parameters
        ----------
        mat : ndarray or nested sequence or Matrix
            entries of the matrix, row by row.

        Raises
        ------
        DimensionMismatch
            Raised if the data is not two-dimensional.

        """
        if isinstance(mat, Matrix):
            mat = mat.mat

        array = np.array(mat, dtype=float)
        if array.ndim != 2:
            raise DimensionMismatch(
                "Matrix data must be two-dimensional, got shape {}".format(
                    array.shape)
            )
        array.flags.writeable = False
        self.mat = array

    @property
    def rows(self):
        return self.mat.shape[0]

    @property
    def columns(self):
        return self.mat.shape[1]

    @property
    def shape(self):
        return self.mat.shape

    def at(self, row, col):
        return float(self.mat[row, col])

    def cofactor(self, row, col):
        """Get the minor obtained by deleting a row and a column.

        Returns
        -------
        Matrix
            the (rows - 1) x (columns - 1) submatrix
        """
        minor = np.delete(np.delete(self.mat, row, axis=0), col, axis=1)
        return Matrix(minor)

    def determinant(self):
        """Compute the determinant by cofactor expansion along the first row.

        This is only meant for the small matrices used in this package.

        Raises
        ------
        DimensionMismatch
            Raised if the matrix is not square.
        """
        if self.rows != self.columns:
            raise DimensionMismatch(
                "Determinant is only defined for square matrices, got shape {}".format(
                    self.shape)
            )

        if self.rows == 1:
            return self.at(0, 0)
        if self.rows == 2:
            return self.at(0, 0) * self.at(1, 1) - self.at(1, 0) * self.at(0, 1)

        det = 0.
        sign = 1.
        for i in range(self.columns):
            det += sign * self.at(0, i) * self.cofactor(0, i).determinant()
            sign = -sign
        return det

    def transpose(self):
        return Matrix(self.mat.T)

    def inverse(self):
        return self.__class__(scipy.linalg.inv(self.mat))

    def multiply(self, other):
        """Multiply this matrix by another on the right.

        Raises
        ------
        DimensionMismatch
            Raised if `self.columns != other.rows`.
        """
        if self.columns != other.rows:
            raise DimensionMismatch(
                "Cannot multiply matrices of shapes {} and {}".format(
                    self.shape, other.shape)
            )

        product = self.mat @ other.mat
        if isinstance(other, Vector):
            return Vector(product[:, 0])
        return Matrix(product)

    def __matmul__(self, other):
        return self.multiply(other)

    def scale(self, c):
        return self.__class__(self.mat * c)

    def add(self, other):
        if self.shape != other.shape:
            raise DimensionMismatch(
                "Cannot add matrices of shapes {} and {}".format(
                    self.shape, other.shape)
            )
        return self.__class__(self.mat + other.mat)

    def equals(self, other, tolerance=0.):
        """Compare entries of two matrices.

        Parameters
        ----------
        other : Matrix
        tolerance : float
            maximum allowed absolute difference between entries. The
            default is exact equality; geometric deduplication should
            pass something like 1e-4.

        """
        if self.shape != other.shape:
            return False
        return bool(np.all(np.abs(self.mat - other.mat) <= tolerance))

    def eigs(self):
        """Compute eigenvalues and eigenvectors.

        Returns
        -------
        tuple
            `(values, vectors)`, where `values` is an ndarray of
            eigenvalues (real parts) and `vectors` is a list of unit
            `Vector` objects (real parts), one per eigenvalue.

        """
        values, vectors = scipy.linalg.eig(self.mat)
        return (np.real(values),
                [Vector(np.real(vectors[:, i])) for i in range(vectors.shape[1])])

    def canonical_key(self, decimals=KEY_DECIMALS):
        """Get a hashable key identifying this matrix up to projective
        scaling and rounding.

        The matrix is scaled so its largest-magnitude entry is
        positive and equal to 1, then rounded.
        """
        flat = self.mat.flatten()
        pivot = flat[np.argmax(np.abs(flat))]
        if pivot == 0:
            return tuple(flat)

        # adding 0. turns -0.0 into 0.0
        return tuple(np.round(flat / pivot, decimals) + 0.)

    def __repr__(self):
        return "{}({})".format(self.__class__.__name__, self.mat.tolist())

    def __str__(self):
        return "{} with data:\n{}".format(
            self.__class__.__name__, self.mat.__str__()
        )


class Vector(Matrix):
    """A column vector. Model points are vectors whose last coordinate
    is a homogeneous coordinate.
    """

    @staticmethod
    def from_list(*coords):
        return Vector(coords)

    @staticmethod
    def zeros(n):
        return Vector(np.zeros(n))

    @staticmethod
    def e(i, n):
        """The i-th standard basis vector of R^n."""
        coords = np.zeros(n)
        coords[i] = 1.
        return Vector(coords)

    def __init__(self, coords):
        if isinstance(coords, Matrix):
            coords = coords.mat

        array = np.array(coords, dtype=float)
        if array.ndim == 2 and array.shape[1] == 1:
            array = array[:, 0]

        if array.ndim != 1:
            raise DimensionMismatch(
                "Vector data must be one-dimensional, got shape {}".format(
                    array.shape)
            )

        Matrix.__init__(self, array.reshape((-1, 1)))

    @property
    def dimension(self):
        return self.rows

    @property
    def coords(self):
        """Copy of the coordinates as a flat ndarray."""
        return self.mat[:, 0].copy()

    def at(self, i):
        return float(self.mat[i, 0])

    def _check_dimension(self, other):
        if other.rows != self.rows or other.columns != 1:
            raise DimensionMismatch(
                "Dimension mismatch: {} and {}".format(self.rows, other.rows)
            )

    def add(self, other):
        self._check_dimension(other)
        return Vector(self.mat[:, 0] + other.mat[:, 0])

    def subtract(self, other):
        self._check_dimension(other)
        return Vector(self.mat[:, 0] - other.mat[:, 0])

    def scale(self, c):
        return Vector(self.mat[:, 0] * c)

    def dot(self, other):
        self._check_dimension(other)
        return float(self.mat[:, 0] @ other.mat[:, 0])

    def cross(self, other):
        """Cross product of 3-vectors. In homogeneous coordinates this
        is the line through two points, or the intersection of two
        lines.
        """
        self._check_dimension(other)
        if self.rows != 3:
            raise DimensionMismatch(
                "Cross product needs 3-vectors, got dimension {}".format(self.rows)
            )
        return Vector(np.cross(self.mat[:, 0], other.mat[:, 0]))

    def norm_squared(self):
        return self.dot(self)

    def norm(self):
        return float(np.sqrt(self.norm_squared()))

    def homogenize(self, idx=-1, epsilon=HOMOGENIZE_EPSILON):
        """Divide by the coordinate at `idx` to land in an affine chart.

        If that coordinate is (numerically) zero, the vector represents
        a point at infinity. In that case the coordinate is set to
        zero and the remaining coordinates are normalized to unit
        length instead.

        Parameters
        ----------
        idx : int
            index of the pivot coordinate. Defaults to the last one.
        epsilon : float
            pivot magnitudes below this are treated as zero.

        """
        coords = self.coords
        pivot = coords[idx]

        if abs(pivot) < epsilon:
            coords[idx] = 0.
            length = np.linalg.norm(coords)
            if length == 0:
                return Vector(coords)
            return Vector(coords / length)

        return Vector(coords / pivot)

    def key(self, decimals=KEY_DECIMALS):
        return tuple(np.round(self.mat[:, 0], decimals) + 0.)

    def __add__(self, other):
        return self.add(other)

    def __sub__(self, other):
        return self.subtract(other)

    def __mul__(self, c):
        return self.scale(c)

    __rmul__ = __mul__

    def __neg__(self):
        return self.scale(-1.)

    def __iter__(self):
        return iter(self.mat[:, 0].tolist())

    def __len__(self):
        return self.rows


def to_complex(v):
    """Read the first two coordinates of a vector as a complex number."""
    return complex(v.at(0), v.at(1))

def from_complex(z, dimension=3):
    """Turn a complex number into a vector (x, y) or (x, y, 1)."""
    if dimension == 2:
        return Vector.from_list(z.real, z.imag)
    return Vector.from_list(z.real, z.imag, 1.)


class Transformation:
    """Something acting on vectors which composes with other
    transformations of the same kind.

    Subclasses implement `apply`, `compose`, `inverse` and `clone`.
    """

    def apply(self, v):
        raise NotImplementedError

    def compose(self, other):
        raise NotImplementedError

    def inverse(self):
        raise NotImplementedError

    def clone(self):
        raise NotImplementedError

    def __matmul__(self, other):
        if isinstance(other, Transformation):
            return self.compose(other)
        return self.apply(other)


class LinearTransformation(Transformation):
    """A linear (projective, for 3x3 matrices) map acting on column
    vectors on the left."""

    @staticmethod
    def identity(n):
        return LinearTransformation(Matrix.identity(n))

    def __init__(self, mat):
        self.mat = Matrix(mat)

    @property
    def matrix(self):
        return self.mat

    def apply(self, v):
        return self.mat.multiply(v)

    def compose(self, other):
        return LinearTransformation(self.mat.multiply(other.mat))

    def inverse(self):
        return LinearTransformation(self.mat.inverse())

    def clone(self):
        return LinearTransformation(self.mat)

    def __repr__(self):
        return "LinearTransformation({})".format(self.mat.mat.tolist())


class MobiusTransformation(Transformation):
    """A fractional linear map z -> (az + b) / (cz + d) on the complex
    plane. Isometries of the Poincare disk have this form.
    """

    @staticmethod
    def identity():
        return MobiusTransformation(1., 0., 0., 1.)

    @staticmethod
    def disk_automorphism(theta, a):
        """The disk isometry z -> e^(i theta) (z - a) / (1 - conj(a) z)."""
        a = complex(a)
        rot = cmath.exp(1j * theta)
        return MobiusTransformation(rot, -rot * a, -a.conjugate(), 1.)

    def __init__(self, a, b, c, d):
        self.a = complex(a)
        self.b = complex(b)
        self.c = complex(c)
        self.d = complex(d)

    def apply_complex(self, z):
        return (self.a * z + self.b) / (self.c * z + self.d)

    def apply(self, v):
        """Apply to a vector (x, y) or (x, y, 1), read as x + iy."""
        w = self.apply_complex(to_complex(v))
        return from_complex(w, dimension=v.dimension)

    def compose(self, other):
        return MobiusTransformation(
            self.a * other.a + self.b * other.c,
            self.a * other.b + self.b * other.d,
            self.c * other.a + self.d * other.c,
            self.c * other.b + self.d * other.d
        )

    def inverse(self):
        return MobiusTransformation(self.d, -self.b, -self.c, self.a)

    def clone(self):
        return MobiusTransformation(self.a, self.b, self.c, self.d)

    def __repr__(self):
        return "MobiusTransformation({}, {}, {}, {})".format(
            self.a, self.b, self.c, self.d)


class TransformationStack:
    """An arena of cumulative transformations.

    Frame 0 is the base transformation. `push` appends a new frame
    equal to the current top composed with the given transformation
    and returns its index; `pop` truncates the arena by one frame.
    Frames are independent clones, so modifying one never affects
    another.
    """

    def __init__(self, base):
        self.frames = [base.clone()]

    def __len__(self):
        return len(self.frames)

    @property
    def top(self):
        return self.frames[-1]

    def frame(self, index):
        return self.frames[index]

    def push(self, transformation):
        self.frames.append(self.top.compose(transformation).clone())
        return len(self.frames) - 1

    def pop(self):
        if len(self.frames) == 1:
            raise IndexError("cannot pop the base frame")
        return self.frames.pop()

    def truncate(self, index):
        """Drop every frame after `index`."""
        if index < 0 or index >= len(self.frames):
            raise IndexError("no frame with index {}".format(index))
        del self.frames[index + 1:]

    def apply(self, v):
        return self.top.apply(v)

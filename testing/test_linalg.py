import pytest
import numpy as np

from hilbert_geometry.linalg import (Matrix, Vector, LinearTransformation,
                                     MobiusTransformation, TransformationStack,
                                     to_complex, from_complex)
from hilbert_geometry import DimensionMismatch, GeometryError


@pytest.fixture
def matrix():
    return Matrix([[2., 0., 1.],
                   [1., 3., 2.],
                   [1., 1., 2.]])

@pytest.fixture
def vector():
    return Vector.from_list(1., -2., 4.)

@pytest.fixture
def mobius():
    return MobiusTransformation.disk_automorphism(0.3, 0.2 + 0.1j)

@pytest.fixture
def translation():
    return MobiusTransformation(1., 0.5, 0., 1.)

def test_matrix_shape(matrix):
    assert matrix.shape == (3, 3)
    assert matrix.rows == 3 and matrix.columns == 3
    assert matrix.at(1, 2) == 2.

def test_matrix_is_immutable(matrix):
    with pytest.raises(ValueError):
        matrix.mat[0, 0] = 5.

def test_non_2d_matrix():
    with pytest.raises(DimensionMismatch):
        Matrix([1., 2., 3.])

def test_multiply_dimension_mismatch(matrix):
    with pytest.raises(DimensionMismatch):
        matrix.multiply(Matrix.identity(2))

def test_dimension_mismatch_is_value_error(matrix):
    with pytest.raises(ValueError):
        matrix.multiply(Vector.from_list(1., 2.))
    with pytest.raises(GeometryError):
        matrix.multiply(Vector.from_list(1., 2.))

def test_multiply_vector(matrix, vector):
    product = matrix.multiply(vector)
    assert isinstance(product, Vector)
    assert np.allclose(product.coords, matrix.mat @ vector.coords)

def test_determinant(matrix):
    assert np.isclose(matrix.determinant(), 6.)
    assert np.isclose(matrix.determinant(), np.linalg.det(matrix.mat))

def test_determinant_small():
    assert Matrix([[3.]]).determinant() == 3.
    assert Matrix([[1., 2.], [3., 4.]]).determinant() == -2.

def test_determinant_4x4(rng):
    data = rng.random((4, 4))
    assert np.isclose(Matrix(data).determinant(), np.linalg.det(data))

def test_determinant_not_square():
    with pytest.raises(DimensionMismatch):
        Matrix([[1., 2., 3.], [4., 5., 6.]]).determinant()

def test_cofactor(matrix):
    assert np.allclose(matrix.cofactor(0, 1).mat, [[1., 2.], [1., 2.]])

def test_inverse(matrix):
    product = matrix.multiply(matrix.inverse())
    assert product.equals(Matrix.identity(3), tolerance=1e-12)

def test_transpose(matrix):
    assert np.allclose(matrix.transpose().mat, matrix.mat.T)

def test_equals_tolerance():
    m1 = Matrix([[1., 0.], [0., 1.]])
    m2 = Matrix([[1.00001, 0.], [0., 1.]])
    assert not m1.equals(m2)
    assert m1.equals(m2, tolerance=1e-4)
    assert not m1.equals(Matrix.identity(3))

def test_identity_eigs():
    values, vectors = Matrix.identity(3).eigs()
    assert np.allclose(values, [1., 1., 1.])
    for v in vectors:
        assert np.isclose(v.norm(), 1.)

def test_eigs(matrix):
    # eigenvalues are 2 and (5 +- sqrt(13)) / 2
    values, vectors = matrix.eigs()
    assert np.allclose(np.sort(values),
                       np.sort([2., (5 + np.sqrt(13)) / 2, (5 - np.sqrt(13)) / 2]))
    for value, v in zip(values, vectors):
        assert np.allclose(matrix.multiply(v).coords, value * v.coords)

def test_canonical_key_projective(matrix):
    assert matrix.canonical_key() == matrix.scale(-2.5).canonical_key()
    assert matrix.canonical_key() != Matrix.identity(3).canonical_key()

def test_vector_dimension_mismatch(vector):
    other = Vector.from_list(1., 2.)
    with pytest.raises(DimensionMismatch):
        vector.add(other)
    with pytest.raises(DimensionMismatch):
        vector.subtract(other)
    with pytest.raises(DimensionMismatch):
        vector.dot(other)
    with pytest.raises(DimensionMismatch):
        vector.cross(other)

def test_vector_arithmetic(vector):
    other = Vector.from_list(0., 1., 1.)
    assert np.allclose(vector.add(other).coords, [1., -1., 5.])
    assert np.allclose((vector - other).coords, [1., -3., 3.])
    assert np.allclose((2 * vector).coords, [2., -4., 8.])
    assert vector.dot(other) == 2.

def test_vector_is_immutable(vector):
    vector.add(vector)
    assert np.allclose(vector.coords, [1., -2., 4.])

def test_cross_product():
    e0, e1, e2 = [Vector.e(i, 3) for i in range(3)]
    assert e0.cross(e1).equals(e2)
    assert e1.cross(e0).equals(-e2)

def test_homogenize(vector):
    assert np.allclose(vector.homogenize().coords, [0.25, -0.5, 1.])

def test_homogenize_idempotent(rng):
    for coords in rng.normal(size=(10, 3)):
        v = Vector(coords).homogenize()
        assert v.homogenize().equals(v, tolerance=1e-12)

def test_homogenize_at_infinity():
    v = Vector.from_list(3., 4., 1e-14).homogenize()
    assert np.allclose(v.coords, [0.6, 0.8, 0.])

def test_homogenize_other_index():
    v = Vector.from_list(2., 4., 8.).homogenize(idx=0)
    assert np.allclose(v.coords, [1., 2., 4.])

def test_complex_conversion():
    v = from_complex(0.5 - 0.25j)
    assert np.allclose(v.coords, [0.5, -0.25, 1.])
    assert to_complex(v) == 0.5 - 0.25j
    assert from_complex(1j, dimension=2).dimension == 2

def test_linear_transformation(matrix, vector):
    transform = LinearTransformation(matrix)
    assert transform.apply(vector).equals(matrix.multiply(vector))
    composed = transform.compose(transform.inverse())
    assert composed.matrix.equals(Matrix.identity(3), tolerance=1e-12)

def test_mobius_composition(mobius, translation):
    z = 0.1 - 0.3j
    composed = mobius.compose(translation)
    assert np.isclose(composed.apply_complex(z),
                      mobius.apply_complex(translation.apply_complex(z)))

def test_mobius_inverse(mobius):
    z = 0.4 + 0.2j
    assert np.isclose(mobius.inverse().apply_complex(mobius.apply_complex(z)), z)

def test_mobius_matmul(mobius, translation):
    v = Vector.from_list(0.1, 0.1, 1.)
    assert (mobius @ translation @ v).equals(
        mobius.apply(translation.apply(v)), tolerance=1e-12
    )

def test_disk_automorphism_preserves_disk(mobius, rng):
    for _ in range(10):
        z = 0.9 * rng.random() * np.exp(2j * np.pi * rng.random())
        assert abs(mobius.apply_complex(z)) < 1
    assert np.isclose(abs(mobius.apply_complex(np.exp(0.7j))), 1.)

def test_stack_push_pop(translation):
    stack = TransformationStack(MobiusTransformation.identity())
    assert len(stack) == 1

    index = stack.push(translation)
    assert index == 1
    index = stack.push(translation)
    assert index == 2
    assert np.isclose(stack.top.apply_complex(0.), 1.)

    stack.pop()
    assert len(stack) == 2
    assert np.isclose(stack.top.apply_complex(0.), 0.5)

def test_stack_frames_independent(matrix):
    stack = TransformationStack(LinearTransformation.identity(3))
    stack.push(LinearTransformation(matrix))
    stack.push(LinearTransformation(matrix))

    assert stack.frame(0).matrix.equals(Matrix.identity(3))
    assert stack.frame(1).matrix.equals(matrix)
    assert stack.frame(2).matrix.equals(matrix.multiply(matrix))
    assert stack.frame(1) is not stack.frame(2)

def test_stack_truncate(translation):
    stack = TransformationStack(MobiusTransformation.identity())
    for _ in range(4):
        stack.push(translation)
    stack.truncate(1)
    assert len(stack) == 2
    assert np.isclose(stack.apply(Vector.from_list(0., 0., 1.)).at(0), 0.5)

    with pytest.raises(IndexError):
        stack.truncate(5)

def test_stack_pop_base():
    stack = TransformationStack(LinearTransformation.identity(3))
    with pytest.raises(IndexError):
        stack.pop()

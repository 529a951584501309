import pytest
import numpy as np

from hilbert_geometry import coxeter, GeometryError
from hilbert_geometry.linalg import Matrix


@pytest.fixture(params=[0.2, 0.5, 1.0, 3.0])
def bulge(request):
    return request.param

@pytest.fixture
def triangle():
    return coxeter.reference_triangle()

def test_reference_triangle(triangle):
    assert np.allclose(triangle[:, 2], 1.)
    assert np.allclose(np.linalg.norm(triangle[:, :2], axis=-1), 1.)
    assert np.allclose(triangle[0], [0., 1., 1.])

def test_cartan_matrix(bulge):
    cartan = coxeter.bulge_cartan_matrix(bulge)
    c = -(bulge + 1 / bulge)

    assert np.allclose(np.diag(cartan), 2.)
    assert np.isclose(cartan[0, 1] * cartan[1, 0], c * c)
    assert np.isclose(cartan[0, 2], c) and np.isclose(cartan[2, 1], c)

def test_hyperbolic_cartan_matrix():
    assert np.allclose(coxeter.bulge_cartan_matrix(1.),
                       [[2., -2., -2.], [-2., 2., -2.], [-2., -2., 2.]])

def test_invalid_bulge():
    with pytest.raises(ValueError):
        coxeter.bulge_cartan_matrix(0.)
    with pytest.raises(ValueError):
        coxeter.bulge_cartan_matrix(-1.)

def test_barycentric_functionals(triangle):
    functionals = coxeter.barycentric_functionals(triangle)
    assert np.allclose(functionals @ triangle.T, np.identity(3))

def test_reflections_are_involutions(bulge):
    for reflection in coxeter.bulge_reflections(bulge):
        assert reflection.multiply(reflection).equals(Matrix.identity(3),
                                                      tolerance=1e-9)

def test_reflections_fix_mirror(bulge, triangle):
    for j, reflection in enumerate(coxeter.bulge_reflections(bulge)):
        for i in range(3):
            if i != j:
                assert np.allclose(reflection.mat @ triangle[i], triangle[i])

def test_reflection_eigenvalues(bulge):
    for reflection in coxeter.bulge_reflections(bulge):
        values, _ = reflection.eigs()
        assert np.allclose(np.sort(values), [-1., 1., 1.])

def test_check_reflection_rejects():
    with pytest.raises(GeometryError):
        coxeter.check_reflection(Matrix.identity(3))

def test_ideal_triangle_reflection(triangle):
    # at t = 1 the first generator takes the top vertex to the bottom
    # of the unit circle
    r1 = coxeter.bulge_reflections(1.)[0]
    image = r1.mat @ triangle[0]
    assert np.allclose(image[:2] / image[2], [0., -1.])

def test_reduced_words():
    for length in range(1, 6):
        words = list(coxeter.reduced_words(3, length))
        assert len(words) == 3 * 2**(length - 1)
        for word in words:
            assert all(a != b for a, b in zip(word, word[1:]))
    assert list(coxeter.reduced_words(3, 0)) == [()]

def test_bounded_group_elements(bulge):
    generators = coxeter.bulge_reflections(bulge)
    elements, words = coxeter.bounded_group_elements(generators, 4,
                                                     with_words=True)

    # the group is a free product of three copies of Z/2
    assert len(elements) == 1 + 3 + 6 + 12 + 24
    assert words[0] == ()
    assert elements[0].equals(Matrix.identity(3))
    assert sorted(len(w) for w in words) == [len(w) for w in words]

    keys = {element.canonical_key() for element in elements}
    assert len(keys) == len(elements)

def test_group_elements_match_words(triangle):
    generators = coxeter.bulge_reflections(0.5)
    elements, words = coxeter.bounded_group_elements(generators, 3,
                                                     with_words=True)
    for element, word in zip(elements, words):
        product = Matrix.identity(3)
        for letter in word:
            product = product.multiply(generators[letter])
        assert element.equals(product, tolerance=1e-9)

def test_keep_prunes_words():
    generators = coxeter.bulge_reflections(1.)
    elements, words = coxeter.bounded_group_elements(
        generators, 4, keep=lambda m: not m.equals(generators[0]),
        with_words=True
    )
    assert all(len(word) == 0 or word[0] != 0 for word in words)
    assert len(elements) == 1 + 2 + 4 + 8 + 16

def test_tiles(triangle):
    identity = Matrix.identity(3)
    assert np.allclose(coxeter.tile_coords(identity, triangle), triangle[:, :2])
    assert np.isclose(coxeter.triangle_area(triangle[:, :2]),
                      3 * np.sqrt(3) / 4)
    assert coxeter.nondegenerate_tile(identity, triangle)

def test_degenerate_tile(triangle):
    squash = Matrix([[1., 0., 0.], [0., 1e-12, 0.], [0., 0., 1.]])
    assert not coxeter.nondegenerate_tile(squash, triangle)

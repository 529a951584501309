import pytest
import numpy as np
from matplotlib.collections import LineCollection
from matplotlib.patches import Arc

from hilbert_geometry import model, drawtools, DegenerateGeometry
from hilbert_geometry.geometry import Point
from hilbert_geometry.hilbert import ConvexProjectiveModel
from hilbert_geometry.linalg import Vector, MobiusTransformation


@pytest.fixture
def poincare():
    return model.PoincareModel((205, 205), 200)

@pytest.fixture
def klein():
    return model.KleinModel((205, 205), 200)

@pytest.fixture(params=["poincare", "klein"])
def disk_model(request):
    return model.get_model(request.param, (205, 205), 200)

@pytest.fixture
def canvas():
    canvas = drawtools.Canvas(410, 410)
    yield canvas
    canvas.close()

@pytest.fixture
def origin():
    return Vector.from_list(0., 0., 1.)

def test_frame_round_trip(disk_model):
    pixel = Point(317.5, 12.25)
    v = disk_model.canvas_to_model(pixel)
    assert disk_model.model_to_canvas(v).equals(pixel, tolerance=1e-9)

    w = Vector.from_list(0.3, -0.6, 1.)
    assert disk_model.canvas_to_model(disk_model.model_to_canvas(w)).equals(
        w, tolerance=1e-12
    )

def test_frame_orientation(poincare):
    # up on the canvas is up in the model
    v = poincare.canvas_to_model(Point(205, 5))
    assert np.allclose(v.coords, [0., 1., 1.])

def test_frame_vectorized(poincare):
    pixels = np.array([[0., 0.], [410., 205.], [205., 105.]])
    coords = poincare.frame.to_model_coords(pixels)
    assert np.allclose(coords, [[-1.025, 1.025], [1.025, 0.], [0., 0.5]])
    assert np.allclose(poincare.frame.to_canvas_coords(coords), pixels)

def test_poincare_distance(poincare, origin):
    q = Vector.from_list(0.5, 0., 1.)
    assert np.isclose(poincare.d(origin, q), np.arccosh(1 + 2 / 3))

def test_klein_distance(klein, origin):
    q = Vector.from_list(0.5, 0., 1.)
    assert np.isclose(klein.d(origin, q), np.arctanh(0.5))
    assert np.isclose(klein.cross_ratio(origin, q), 3.)

def test_models_agree(poincare, klein, origin):
    # a point at euclidean radius r in the Poincare disk sits at
    # radius 2r / (1 + r^2) in the Klein disk
    r = 0.4
    p = Vector.from_list(0., r, 1.)
    k = Vector.from_list(0., 2 * r / (1 + r * r), 1.)
    assert np.isclose(poincare.d(origin, p), klein.d(origin, k))

def test_metric_identity(disk_model, disk_points):
    for p in disk_points:
        assert disk_model.d(p, p) == 0.

def test_metric_symmetry_positivity(disk_model, disk_points):
    for i, p in enumerate(disk_points):
        for q in disk_points[i + 1:]:
            assert disk_model.d(p, q) > 0
            assert np.isclose(disk_model.d(p, q), disk_model.d(q, p))

def test_triangle_inequality(disk_model, disk_points):
    for p in disk_points:
        for q in disk_points:
            for r in disk_points:
                assert (disk_model.d(p, r) <=
                        disk_model.d(p, q) + disk_model.d(q, r) + 1e-9)

def test_vectorized_distances(disk_model, disk_points, origin):
    coords = np.array([p.coords[:2] for p in disk_points])
    dists = disk_model.distances(coords, origin)
    assert np.allclose(dists, [disk_model.d(p, origin) for p in disk_points])

def test_distance_outside_is_nan(poincare, origin):
    outside = Vector.from_list(1.5, 0., 1.)
    assert np.isnan(poincare.d(origin, outside))

def test_contains(disk_model):
    assert disk_model.contains(Vector.from_list(0.5, 0.5, 1.))
    assert not disk_model.contains(Vector.from_list(0.8, 0.8, 1.))
    inside = disk_model.contains_coords(np.array([[0., 0.], [2., 0.]]))
    assert list(inside) == [True, False]

def test_mobius_isometry(poincare, disk_points):
    mobius = MobiusTransformation.disk_automorphism(1.1, 0.3 - 0.2j)
    p, q = disk_points[0], disk_points[1]
    assert np.isclose(poincare.d(mobius.apply(p), mobius.apply(q)),
                      poincare.d(p, q))

def test_geodesic_circle_orthogonal(poincare):
    p = Vector.from_list(0.2, 0.5, 1.)
    q = Vector.from_list(-0.4, 0.1, 1.)
    center, radius = poincare.geodesic_circle(p, q)

    assert np.isclose(np.sum(center * center), radius * radius + 1)
    for v in (p, q):
        assert np.isclose(np.linalg.norm(v.coords[:2] - center), radius)

def test_geodesic_collinear(poincare, origin, canvas):
    p = Vector.from_list(0.2, 0.2, 1.)
    q = Vector.from_list(-0.4, -0.4, 1.)
    with pytest.raises(DegenerateGeometry):
        poincare.geodesic_circle(p, q)
    with pytest.raises(DegenerateGeometry):
        poincare.geodesic_circle(origin, q)

    assert isinstance(poincare.draw_geodesic(canvas, p, q), LineCollection)

def test_geodesic_short_arc(poincare, canvas):
    p = Vector.from_list(0.5, 0.1, 1.)
    q = Vector.from_list(0.1, 0.5, 1.)
    arc = poincare.draw_geodesic(canvas, p, q)

    assert isinstance(arc, Arc)
    span = (arc.theta2 - arc.theta1) % 360
    assert span < 180

def test_klein_chord(klein):
    p = Vector.from_list(0.1, 0.2, 1.)
    q = Vector.from_list(-0.3, 0.4, 1.)
    a, b = klein.chord(p, q)
    assert np.isclose(np.linalg.norm(a.coords[:2]), 1.)
    assert np.isclose(np.linalg.norm(b.coords[:2]), 1.)
    # a is on the side of p
    assert (np.linalg.norm(a.coords - p.coords) <
            np.linalg.norm(a.coords - q.coords))

def test_klein_chord_degenerate(klein, origin):
    with pytest.raises(DegenerateGeometry):
        klein.chord(origin, origin)

def test_draw_point_uses_transformation(poincare, origin, canvas):
    poincare.push(MobiusTransformation(1., 0.5, 0., 1.))
    line, = poincare.draw_point(canvas, origin)
    assert np.allclose(line.get_xydata(), [[305., 205.]])

    poincare.pop()
    line, = poincare.draw_point(canvas, origin)
    assert np.allclose(line.get_xydata(), [[205., 205.]])

def test_get_model():
    assert isinstance(model.get_model("Poincare", (0, 0), 1), model.PoincareModel)
    assert isinstance(model.get_model("klein", (0, 0), 1), model.KleinModel)
    assert isinstance(model.get_model("hilbert", (0, 0), 1, max_length=2),
                      ConvexProjectiveModel)

def test_get_model_unknown():
    with pytest.raises(ValueError):
        model.get_model("halfplane", (0, 0), 1)

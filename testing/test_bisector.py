import logging

import pytest
import numpy as np

from hilbert_geometry import model, drawtools, bisector
from hilbert_geometry.bisector import BisectorDrawOption, trace_bisector
from hilbert_geometry.hilbert import ConvexProjectiveModel
from hilbert_geometry.linalg import Vector


@pytest.fixture
def poincare():
    return model.PoincareModel((205, 205), 200)

@pytest.fixture
def domain():
    return ConvexProjectiveModel((200, 200), 100, bulge=0.5, max_length=4)

@pytest.fixture
def canvas():
    canvas = drawtools.Canvas(410, 410)
    yield canvas
    canvas.close()

@pytest.fixture
def symmetric_pair():
    return Vector.from_list(-0.3, 0., 1.), Vector.from_list(0.3, 0., 1.)

def _pixel_errors(model, trace, p, q):
    coords = model.frame.to_model_coords(trace.coords())
    return np.abs(model.distances(coords, p) - model.distances(coords, q))

def test_symmetric_bisector(poincare, symmetric_pair):
    p, q = symmetric_pair
    trace = trace_bisector(poincare, p, q, max_steps=30)

    # the bisector of two points symmetric about the y-axis is the y-axis
    coords = trace.coords()
    assert len(trace) > 20
    assert np.all(np.abs(coords[:, 0] - 205) <= 6)

    # the walks go in opposite directions from the seed
    ys = coords[:, 1]
    assert ys.min() < trace.seed.y < ys.max()

def test_trace_within_tolerance(poincare, symmetric_pair):
    p, q = symmetric_pair
    trace = trace_bisector(poincare, p, q, epsilon=0.05, max_steps=100)
    assert np.all(_pixel_errors(poincare, trace, p, q) < 0.05)

def test_trace_stays_inside(poincare):
    p = Vector.from_list(0.1, 0.2, 1.)
    q = Vector.from_list(-0.2, 0.4, 1.)
    trace = trace_bisector(poincare, p, q)

    coords = poincare.frame.to_model_coords(trace.coords())
    assert np.all(poincare.contains_coords(coords))

def test_trace_is_ordered(poincare, symmetric_pair):
    p, q = symmetric_pair
    trace = trace_bisector(poincare, p, q, max_steps=50)
    coords = trace.coords()

    # consecutive points are neighbours in the scanned box
    steps = np.abs(np.diff(coords, axis=0))
    assert np.all(steps <= bisector.BOX_RADIUS)

def test_max_steps(poincare, symmetric_pair):
    p, q = symmetric_pair
    trace = trace_bisector(poincare, p, q, max_steps=5)
    assert len(trace) <= 11

def test_hilbert_bisector(domain):
    p = Vector.from_list(0., 0., 1.)
    q = Vector.from_list(0.1, 0.5, 1.)
    trace = trace_bisector(domain, p, q, max_steps=100)

    assert len(trace) > 10
    assert np.all(_pixel_errors(domain, trace, p, q) < bisector.DEFAULT_EPSILON)

def test_gradient_samples(poincare, symmetric_pair):
    p, q = symmetric_pair
    trace = trace_bisector(poincare, p, q, option=BisectorDrawOption.GRADIENT,
                           max_steps=20)
    assert trace.samples is not None
    assert trace.samples.shape[1] == 3
    assert len(trace.samples) > len(trace)
    assert np.all(trace.samples[:, 2] >= 0)

def test_epsilon_mode_has_no_samples(poincare, symmetric_pair):
    p, q = symmetric_pair
    trace = trace_bisector(poincare, p, q, max_steps=5)
    assert trace.samples is None

def test_no_seed(poincare, symmetric_pair, caplog):
    p, q = symmetric_pair
    with caplog.at_level(logging.WARNING, logger="hilbert_geometry"):
        trace = trace_bisector(poincare, p, q, epsilon=0.)
    assert len(trace) == 0
    assert trace.seed is None
    assert "no bisector seed" in caplog.text

def test_find_seed_halves_step(poincare, symmetric_pair):
    p, q = symmetric_pair
    error = bisector._BisectorError(poincare, p, q)
    p_px = poincare.model_to_canvas(p).to_array()
    q_px = poincare.model_to_canvas(q).to_array()

    # the scan step is halved until a point is found
    seed = bisector.find_seed(error, p_px, q_px, 0.01, seed_step=500)
    assert seed is not None
    assert error(seed[np.newaxis])[0] < 0.01

def test_draw_bisector(poincare, symmetric_pair, canvas):
    p, q = symmetric_pair
    trace = poincare.draw_bisector(canvas, p, q, max_steps=20)
    assert len(canvas.ax.lines) == 1
    assert len(trace) > 0

def test_draw_gradient(poincare, symmetric_pair, canvas):
    p, q = symmetric_pair
    poincare.draw_bisector(canvas, p, q, option=BisectorDrawOption.GRADIENT,
                           max_steps=20)
    assert np.any(canvas.pixels[..., 3] > 0)

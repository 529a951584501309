"""Trace metric bisectors by walking across the canvas.

The bisector of p and q is the set of z with d(p, z) = d(z, q). It is
traced numerically, one pixel at a time: find a seed pixel where
|d(p, z) - d(z, q)| < epsilon, then walk away from it in both
directions along the bisector. Each step looks at a small box of
pixels around the current one and moves to the tolerance-satisfying
pixel that gets furthest along the co-orientation (q - p rotated by a
right angle, or its negative for the second walk). The tolerance is
tightened as more satisfying pixels are found.

This works for any model with a `distances` method, so the same code
draws hyperbolic and Hilbert bisectors.

"""

from enum import Enum

import numpy as np

import matplotlib

from hilbert_geometry import utils
from hilbert_geometry.drawtools import DEFAULT_GRADIENT_CMAP
from hilbert_geometry.geometry import Point
from hilbert_geometry.logging_utils import get_logger

logger = get_logger(__name__)

#initial tolerance on |d(p, z) - d(z, q)|
DEFAULT_EPSILON = 0.05

#pixel spacing of the first seed scan
SEED_STEP = 8

#extra pixels added around the bounding box of p and q for the seed scan
SEED_PADDING = 10

#half-width, in pixels, of the box scanned at each step of a walk
BOX_RADIUS = 3

#maximum number of steps in each direction
MAX_STEPS = 1000


class BisectorDrawOption(Enum):
    EPSILON = "epsilon"
    GRADIENT = "gradient"


class BisectorTrace:
    """The output of `trace_bisector`.

    Attributes
    ----------
    points : list of Point
        canvas points along the bisector, in order from one end to
        the other. Empty if no seed was found.
    seed : Point or None
    samples : ndarray of shape (k, 3) or None
        every scanned inside pixel as rows (x, y, error), when traced
        in GRADIENT mode
    epsilon : float
        the initial tolerance

    """

    def __init__(self, points, seed=None, samples=None, epsilon=DEFAULT_EPSILON):
        self.points = points
        self.seed = seed
        self.samples = samples
        self.epsilon = epsilon

    def __len__(self):
        return len(self.points)

    def coords(self):
        """The points as an ndarray of shape (k, 2)."""
        return np.array([tuple(p) for p in self.points]).reshape((-1, 2))


class _BisectorError:
    """Evaluates |d(p, z) - d(z, q)| at canvas pixels, recording the
    samples when asked to."""

    def __init__(self, model, p, q, record=False):
        self.model = model
        self.p = p
        self.q = q
        self.record = record
        self.samples = []

    def __call__(self, pixels):
        pixels = np.asarray(pixels, dtype=float)
        coords = self.model.frame.to_model_coords(pixels)
        inside = self.model.contains_coords(coords)

        errors = np.full(len(pixels), np.inf)
        if np.any(inside):
            errors[inside] = np.abs(
                self.model.distances(coords[inside], self.p) -
                self.model.distances(coords[inside], self.q)
            )
            errors[np.isnan(errors)] = np.inf

        if self.record:
            good = np.isfinite(errors)
            self.samples.append(np.column_stack([pixels[good], errors[good]]))

        return errors


def _grid(xmin, xmax, ymin, ymax, step):
    xs = np.arange(xmin, xmax + 1, step)
    ys = np.arange(ymin, ymax + 1, step)
    gx, gy = np.meshgrid(xs, ys)
    return np.column_stack([gx.flatten(), gy.flatten()])

def find_seed(error, p_px, q_px, epsilon, seed_step=SEED_STEP,
              padding=SEED_PADDING):
    """Scan the padded bounding box of two pixels for a point where
    `error` is below epsilon.

    The box is scanned row by row at spacing `seed_step`; if nothing is
    found the spacing is halved, down to one pixel.

    Returns
    -------
    ndarray of shape (2,) or None

    """
    xmin = int(np.floor(min(p_px[0], q_px[0]))) - padding
    xmax = int(np.ceil(max(p_px[0], q_px[0]))) + padding
    ymin = int(np.floor(min(p_px[1], q_px[1]))) - padding
    ymax = int(np.ceil(max(p_px[1], q_px[1]))) + padding

    step = max(int(seed_step), 1)
    while True:
        pixels = _grid(xmin, xmax, ymin, ymax, step)
        errors = error(pixels)
        good = np.flatnonzero(errors < epsilon)
        if len(good) > 0:
            return pixels[good[0]]

        if step == 1:
            return None
        step = max(step // 2, 1)

def _walk(error, seed, normal, sign, epsilon, box_radius, max_steps):
    offsets = _grid(-box_radius, box_radius, -box_radius, box_radius, 1)
    offsets = offsets[np.any(offsets != 0, axis=-1)]

    current = np.asarray(seed, dtype=float)
    found = 1
    path = []
    for _ in range(max_steps):
        candidates = current + offsets
        errors = error(candidates)
        satisfying = errors < epsilon
        displacement = sign * (offsets @ normal)

        good = satisfying & (displacement > 0)
        if not np.any(good):
            break

        found += np.count_nonzero(satisfying)
        best = np.flatnonzero(good)[np.argmax(displacement[good])]
        current = candidates[best]
        path.append(current)

        epsilon -= epsilon / found

    return path

def trace_bisector(model, p, q, epsilon=DEFAULT_EPSILON,
                   option=BisectorDrawOption.EPSILON,
                   seed_step=SEED_STEP,
                   box_radius=BOX_RADIUS,
                   max_steps=MAX_STEPS):
    """Trace the bisector of two model points.

    Parameters
    ----------
    model : Model
        any model providing `frame`, `contains_coords` and `distances`
    p, q : Vector
        model points
    epsilon : float
        initial tolerance on |d(p, z) - d(z, q)|. Each walk shrinks its
        own copy of it by epsilon / found after every step, where
        found counts the satisfying pixels seen so far on that walk
        (the seed included).
    option : BisectorDrawOption
        in GRADIENT mode, every scanned pixel is kept in the trace's
        `samples`
    seed_step : int
        pixel spacing of the first seed scan
    box_radius : int
        half-width of the box scanned at each step
    max_steps : int
        maximum number of steps in each direction

    Returns
    -------
    BisectorTrace

    """
    p_px = model.model_to_canvas(p).to_array()
    q_px = model.model_to_canvas(q).to_array()

    error = _BisectorError(model, p, q,
                           record=(option == BisectorDrawOption.GRADIENT))

    seed = find_seed(error, p_px, q_px, epsilon, seed_step=seed_step)
    if seed is None:
        logger.warning("no bisector seed within %s of the points %s and %s",
                       epsilon, p_px, q_px)
        return BisectorTrace([], epsilon=epsilon,
                             samples=_stack_samples(error))

    normal = utils.perpendicular(q_px - p_px)
    normal = normal / np.linalg.norm(normal)

    forward = _walk(error, seed, normal, 1, epsilon, box_radius, max_steps)
    backward = _walk(error, seed, normal, -1, epsilon, box_radius, max_steps)

    logger.debug("bisector walks: %d steps forward, %d steps backward",
                 len(forward), len(backward))

    coords = list(reversed(backward)) + [seed] + forward
    return BisectorTrace([Point(x, y) for x, y in coords],
                         seed=Point(*seed),
                         samples=_stack_samples(error),
                         epsilon=epsilon)

def _stack_samples(error):
    if not error.record:
        return None
    if len(error.samples) == 0:
        return np.zeros((0, 3))
    return np.concatenate(error.samples)

def draw_trace(canvas, trace, option=BisectorDrawOption.EPSILON,
               cmap=DEFAULT_GRADIENT_CMAP, **kwargs):
    """Draw a bisector trace on a canvas.

    In EPSILON mode the trace is drawn as a polyline. In GRADIENT mode
    each sampled pixel is painted with a colour depending on its error,
    relative to the trace's tolerance.
    """
    if option == BisectorDrawOption.GRADIENT and trace.samples is not None:
        samples = trace.samples
        colormap = matplotlib.colormaps[cmap]
        colors = colormap(np.clip(samples[:, 2] / (2 * trace.epsilon), 0., 1.))
        canvas.paint_pixels(np.round(samples[:, 0]).astype(int),
                            np.round(samples[:, 1]).astype(int),
                            colors)

    if len(trace.points) > 0:
        default_kwargs = {
            "color": "red",
            "linewidth": 1
        }
        for key, value in kwargs.items():
            default_kwargs[key] = value
        canvas.draw_polyline(trace.points, **default_kwargs)

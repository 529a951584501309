import matplotlib

matplotlib.use("Agg")

import pytest
import numpy as np

from hilbert_geometry.linalg import Vector


@pytest.fixture
def rng():
    return np.random.default_rng(12345)

@pytest.fixture
def disk_points(rng):
    """Random points in the disk of radius 0.8."""
    radii = 0.8 * np.sqrt(rng.random(8))
    angles = 2 * np.pi * rng.random(8)
    return [Vector.from_list(r * np.cos(a), r * np.sin(a), 1.)
            for r, a in zip(radii, angles)]

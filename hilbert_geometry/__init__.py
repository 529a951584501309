r"""
hilbert_geometry
================

`hilbert_geometry` is a small Python package for experimenting with metrics on convex domains in the projective plane: the Poincare and Klein models of the hyperbolic plane, and properly convex polygons carrying their Hilbert metric.

The package is built on top of [numpy](https://numpy.org), [scipy](https://scipy.org) and [matplotlib](https://matplotlib.org), and provides modules to:

- compute distances, chords and cross ratios in the Poincare disk, the Klein disk, and in convex domains obtained by deforming the ideal triangle reflection group ("bulging")

- trace metric bisectors of pairs of points by walking over a pixel grid

- compute Delaunay triangulations for an arbitrary metric, and colour Voronoi cells of orbits of points

- draw all of the above with matplotlib

## Example usage

To draw the bisector of two points in a bulged convex domain:

```python
from hilbert_geometry import hilbert, drawtools
from hilbert_geometry.linalg import Vector

domain = hilbert.ConvexProjectiveModel((400, 400), 100, bulge=0.5)
canvas = drawtools.Canvas(800, 800)

p = Vector.from_list(0., 0., 1.)
q = Vector.from_list(0.1, 0.5, 1.)

domain.draw(canvas)
domain.draw_chord(canvas, p, q)
domain.draw_bisector(canvas, p, q)

canvas.show()
```

Messages are logged under the `hilbert_geometry` logger; call `hilbert_geometry.logging_utils.configure_logging()` to see them.
"""

import logging

from hilbert_geometry.base import GeometryError, DimensionMismatch, DegenerateGeometry
from hilbert_geometry.logging_utils import ROOT_LOGGER_NAME

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())

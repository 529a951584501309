import numpy as np

from hilbert_geometry import model, drawtools
from hilbert_geometry.linalg import Vector, MobiusTransformation

canvas = drawtools.Canvas(820, 410)
poincare = model.get_model("poincare", (205, 205), 200)
klein = model.get_model("klein", (615, 205), 200)

points = [Vector.from_list(0.6 * np.cos(theta), 0.6 * np.sin(theta), 1.)
          for theta in np.linspace(0, 2 * np.pi, 7)[:-1]]

for disk in (poincare, klein):
    disk.draw(canvas)
    for i, p in enumerate(points):
        for q in points[i + 1:]:
            disk.draw_geodesic(canvas, p, q)

# an orbit of the origin under a hyperbolic translation and its powers
translation = MobiusTransformation.disk_automorphism(0., -0.3)
origin = Vector.from_list(0., 0., 1.)
for _ in range(6):
    poincare.push(translation)
    poincare.draw_point(canvas, origin, color="red")

canvas.show()

from hilbert_geometry import hilbert, drawtools
from hilbert_geometry.bisector import BisectorDrawOption
from hilbert_geometry.linalg import Vector
from hilbert_geometry.logging_utils import configure_logging

configure_logging("debug")

# a bulged domain, drawn with one model unit = 100 pixels
domain = hilbert.ConvexProjectiveModel((400, 400), 100, bulge=0.5)
canvas = drawtools.Canvas(1000, 800)

p = Vector.from_list(0., 0., 1.)
q = Vector.from_list(0.1, 0.5, 1.)

domain.draw(canvas)
domain.draw_chord(canvas, p, q)
domain.draw_point(canvas, p, color="red")
domain.draw_point(canvas, q, color="red")

# color the pixels scanned by the tracer by how close they are to equidistant
domain.draw_bisector(canvas, p, q, option=BisectorDrawOption.GRADIENT)

# changing the bulge rebuilds the boundary; the chord cache is ours to clear
domain.set_bulge(2.0)
domain.clear_chord_cache()
print("distance after rebuild:", domain.d(p, q))

canvas.show()

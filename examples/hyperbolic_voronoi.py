import numpy as np

from hilbert_geometry import model, delaunay, drawtools
from hilbert_geometry.linalg import MobiusTransformation

canvas = drawtools.Canvas(410, 410)
disk = model.get_model("poincare", (205, 205), 200)

# random sites, plus their images under a rotation of the disk
rng = np.random.default_rng(1)
sites = delaunay.sample_points(disk, 12, rng=rng)
rotation = MobiusTransformation.disk_automorphism(np.pi / 3, 0.)
sites += [rotation.apply(site) for site in sites]

disk.tesselate(canvas, sites, step=2)
disk.draw(canvas)
disk.draw_triangulation(canvas, sites, color="white", linewidth=0.5)
for site in sites:
    disk.draw_point(canvas, site)

canvas.show()

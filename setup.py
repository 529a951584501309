from setuptools import setup, find_packages
from os import path
from io import open

setup_dir = path.abspath(path.dirname(__file__))
with open(path.join(setup_dir, 'README.md'),
          encoding='utf-8') as readme_file:
    long_description = readme_file.read()

setup(
    name="hilbert_geometry",
    version="0.1",
    packages=find_packages(include=["hilbert_geometry", "hilbert_geometry.*"]),
    include_package_data=True,

    install_requires=[
        "numpy>=1.22",
        "matplotlib>=3.5",
        "scipy"
    ],

    extras_require={
        "test": ["pytest"]
    },

    license="MIT",
    description="""Hyperbolic and Hilbert metrics on convex domains in the
    projective plane: chords, bisectors, and Voronoi tessellations""",

    long_description=long_description,
    long_description_content_type="text/markdown"
)

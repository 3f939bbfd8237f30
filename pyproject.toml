[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "polyclean"
version = "0.1.0"
description = "Clean triangle meshes: merge duplicate vertices and export to OBJ or binary PLY"
requires-python = ">=3.10"
dependencies = []
keywords = ["mesh", "stl", "ply", "obj", "triangle", "deduplication", "geometry"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Environment :: Console",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Visualization",
    "Topic :: Multimedia :: Graphics :: 3D Modeling",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
polyclean = "polyclean.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["polyclean"]

[tool.pytest.ini_options]
addopts = "-ra"

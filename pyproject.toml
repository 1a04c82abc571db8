[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hexmesher"
version = "0.1.0"
description = "Hexahedral mesh modelling with an operation graph, undoable actions and surface projection"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["hexahedral", "mesh", "modelling", "dag", "projection", "undo"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Graphics :: 3D Modeling",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["hexmesher"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

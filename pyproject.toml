[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "vitelouvain"
version = "0.1.0"
description = "Louvain community detection over block-partitioned graphs, with early termination and colour-ordered sweeps"
requires-python = ">=3.10"
dependencies = []
keywords = ["louvain", "community detection", "modularity", "graph clustering", "graph coloring"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Information Analysis",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["vitelouvain"]

[tool.pytest.ini_options]
addopts = "-ra"

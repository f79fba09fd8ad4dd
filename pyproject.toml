[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "volstudio"
version = "0.1.0"
description = "Read classic game volume archives (VOL, RMF, DYN, RBX, TBV), palettes and MDL models"
requires-python = ">=3.10"
dependencies = []
keywords = ["vol", "archive", "darkstar", "palette", "mdl", "obj", "game-assets"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Archiving",
    "Topic :: Games/Entertainment",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
mdl-info = "volstudio.mdl:main"

[tool.hatch.build.targets.wheel]
packages = ["volstudio"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mk11unpack"
version = "0.1.0"
description = "Unpack and inspect Mortal Kombat 11 XXX/PSF package archives"
requires-python = ">=3.10"
dependencies = []
keywords = ["mk11", "xxx", "psf", "upk", "unpacker", "game-archive", "zlib"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Archiving :: Packaging",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
mk11unpack = "mk11unpack.extract:main"
mk11dump = "mk11unpack.legacy:main"

[tool.hatch.build.targets.wheel]
packages = ["mk11unpack"]

[tool.pytest.ini_options]
addopts = "-ra"

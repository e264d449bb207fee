[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "invaders8080"
version = "0.1.0"
description = "An Intel 8080 emulator and Midway Space Invaders arcade machine with a pygame front end"
requires-python = ">=3.10"
keywords = ["8080", "emulator", "space invaders", "arcade", "disassembler"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
    "Topic :: Games/Entertainment :: Arcade",
]
dependencies = [
    "pygame",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
invaders8080 = "invaders8080.frontend:main"

[tool.hatch.build.targets.wheel]
packages = ["invaders8080"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "orcslayer"
version = "0.1.0"
description = "A small side-scrolling orc-slaying arcade game with an Aseprite sprite reader and inspector"
requires-python = ">=3.10"
dependencies = [
    "pygame",
]
keywords = ["game", "arcade", "aseprite", "sprites", "pygame"]
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
    "Topic :: Games/Entertainment :: Side-Scrolling/Arcade Games",
    "Topic :: Multimedia :: Graphics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
orcslayer = "orcslayer.app:main"
aseprite-inspector = "orcslayer.inspector:main"

[tool.hatch.build.targets.wheel]
packages = ["orcslayer"]

[tool.pytest.ini_options]
addopts = "-ra"

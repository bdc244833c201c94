[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "poloniusfacts"
version = "0.1.0"
description = "Load, parse, intern and visualize borrow-checker facts: tab-delimited fact files, a small fact-program language, tuple dumps and GraphViz output."
requires-python = ">=3.10"
dependencies = []
keywords = ["borrow checker", "datalog", "facts", "graphviz", "static analysis"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Compilers",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["poloniusfacts"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true

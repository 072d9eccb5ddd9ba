[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lensm"
version = "0.1.0"
description = "Source positions, architecture tables and XCOFF object and archive readers for viewing compiled code"
requires-python = ">=3.10"
dependencies = []
keywords = ["disassembler", "xcoff", "aix", "object-file", "big-archive", "source-position"]
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
    "Topic :: Software Development :: Disassemblers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["lensm"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"

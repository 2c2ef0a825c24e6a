[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "assertcmd"
version = "2.0.16"
description = "Run command-line programs in tests and assert on their exit code, stdout and stderr."
requires-python = ">=3.10"
dependencies = []
keywords = ["cli", "test", "assert", "command", "subprocess"]
classifiers = [
    "Development Status :: 5 - Production/Stable",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Testing",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
assertcmd-fixture = "assertcmd.bin_fixture:main"

[tool.hatch.build.targets.wheel]
packages = ["assertcmd"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

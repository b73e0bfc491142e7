[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "monocommander"
version = "0.1.0"
description = "Node operator library for Monolythium networks: join flow, peers, genesis checks, RPC health, logs and staking transaction commands"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "monolythium",
    "cosmos",
    "cometbft",
    "validator",
    "node-operator",
    "staking",
    "genesis",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["monocommander"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true

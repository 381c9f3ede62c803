[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rvos"
version = "0.1.0"
description = "Sv39 page tables over simulated memory, ELF64 headers, a file-system image builder, a shell command parser and classic command-line tools for a small RISC-V operating system"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "risc-v",
    "sv39",
    "page-table",
    "elf",
    "file-system",
    "mkfs",
    "shell",
    "operating-system",
    "education",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System Kernels",
    "Topic :: Education",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
rvos-mkfs = "rvos.mkfs:main"
rvos-grep = "rvos.grep:main"
rvos-wc = "rvos.wc:main"
rvos-cat = "rvos.cat:main"
rvos-echo = "rvos.echo:main"
rvos-ls = "rvos.ls:main"
rvos-kill = "rvos.kill:main"
rvos-ln = "rvos.ln:main"
rvos-mkdir = "rvos.mkdir:main"
rvos-rm = "rvos.rm:main"

[tool.hatch.build.targets.wheel]
packages = ["rvos"]

[tool.hatch.build.targets.sdist]
include = ["rvos", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true

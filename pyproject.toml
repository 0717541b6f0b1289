[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tinyos"
version = "1.0.1"
description = "Core pieces of a small hobby operating system: bitmaps, kernel string helpers, an ELF loader, a FAT16 file system, a VFS layer, a command shell and a terminal snake game."
requires-python = ">=3.10"
dependencies = []
keywords = ["operating-system", "fat16", "elf", "vfs", "shell", "bitmap", "snake"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System",
    "Topic :: System :: Filesystems",
    "Topic :: Games/Entertainment :: Arcade",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
tinyos-shell = "tinyos.shell:main"
tinyos-echo = "tinyos.echo:main"
tinyos-snake = "tinyos.snake:main"

[tool.hatch.build.targets.wheel]
packages = ["tinyos"]

[tool.pytest.ini_options]
addopts = "-ra"

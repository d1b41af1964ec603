"""elemental: install, build, customize and reset immutable operating systems."""

__version__ = "0.1.0"

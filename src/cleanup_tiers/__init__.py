"""Dependency tiering for trees of build-unit project files."""

__version__ = "0.1.0"

"""Dependency graph closure and topological ordering."""

from .ordering import DependencyGraph

__all__ = ["DependencyGraph"]

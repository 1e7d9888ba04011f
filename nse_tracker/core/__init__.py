"""Core primitives shared across all subsystems.

Error classes and type aliases live here so that the data feed, broadcaster
and interfaces can import them without introducing circular dependencies.
"""

from . import errors, types

__all__ = ["errors", "types"]

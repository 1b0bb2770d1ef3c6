"""Example rigs and components for rigpreview.

This package demonstrates library usage but is not part of the core API.
"""

from .components import EarSway, build_fox

__all__ = [
    "EarSway",
    "build_fox",
]

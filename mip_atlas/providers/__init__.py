"""
Placement providers that assign pages and positions to atlas rectangles.
"""

from .base import PlacementProvider, PackRequest, PackedPlacement, PackingError
from .rectpack_provider import RectpackProvider

__all__ = [
    "PlacementProvider",
    "PackRequest",
    "PackedPlacement",
    "PackingError",
    "RectpackProvider",
]

"""
Utility modules for pixel dilation, resampling and compositing.
"""

from .image import ImageUtils, WrapMode, MipFilter, SUPPORTED_MODES

__all__ = [
    "ImageUtils",
    "WrapMode",
    "MipFilter",
    "SUPPORTED_MODES",
]

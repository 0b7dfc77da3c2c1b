"""
mip-atlas: texture atlas baker with mip map support.

Packs independently sized textures onto a small number of square pages, pads
each entry according to its wrap mode, and synthesizes mip levels either per
page or per entry so that low mip levels never bleed between entries.
"""

__version__ = "0.1.0"

from .config import AtlasBuildConfig
from .utils.image import ImageUtils, WrapMode, MipFilter
from .providers.base import PlacementProvider, PackRequest, PackedPlacement, PackingError
from .providers.rectpack_provider import RectpackProvider
from .processing.options import NoMip, NoMipWithPadding, Mip, MipWithPadding, MipWithBlock, parse_mip_option
from .processing.layout import Texcoord, Texcoord32, Texcoord64
from .processing.mipmap import Texture
from .processing.atlas import (
    Atlas,
    AtlasDescriptor,
    AtlasEntry,
    AtlasError,
    AtlasErrorKind,
    AtlasGenerator,
    create_atlas,
)
from .processing.validator import AtlasValidator

__all__ = [
    "AtlasBuildConfig",
    "ImageUtils",
    "WrapMode",
    "MipFilter",
    "PlacementProvider",
    "PackRequest",
    "PackedPlacement",
    "PackingError",
    "RectpackProvider",
    "NoMip",
    "NoMipWithPadding",
    "Mip",
    "MipWithPadding",
    "MipWithBlock",
    "parse_mip_option",
    "Texcoord",
    "Texcoord32",
    "Texcoord64",
    "Texture",
    "Atlas",
    "AtlasDescriptor",
    "AtlasEntry",
    "AtlasError",
    "AtlasErrorKind",
    "AtlasGenerator",
    "create_atlas",
    "AtlasValidator",
]

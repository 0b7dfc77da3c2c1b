"""
Atlas processing modules for layout, mip generation, validation and export.
"""

from .options import (
    NoMip,
    NoMipWithPadding,
    Mip,
    MipWithPadding,
    MipWithBlock,
    MipOption,
    MIP_METHODS,
    parse_mip_option,
    is_power_of_two,
)
from .layout import AtlasLayoutEngine, Texcoord, Texcoord32, Texcoord64
from .mipmap import MipPyramidBuilder, Texture
from .atlas import (
    Atlas,
    AtlasDescriptor,
    AtlasEntry,
    AtlasError,
    AtlasErrorKind,
    AtlasGenerator,
    create_atlas,
)
from .validator import AtlasValidator
from .export import save_pages, build_manifest, save_manifest, page_filename, MANIFEST_FORMATS

__all__ = [
    "NoMip",
    "NoMipWithPadding",
    "Mip",
    "MipWithPadding",
    "MipWithBlock",
    "MipOption",
    "MIP_METHODS",
    "parse_mip_option",
    "is_power_of_two",
    "AtlasLayoutEngine",
    "Texcoord",
    "Texcoord32",
    "Texcoord64",
    "MipPyramidBuilder",
    "Texture",
    "Atlas",
    "AtlasDescriptor",
    "AtlasEntry",
    "AtlasError",
    "AtlasErrorKind",
    "AtlasGenerator",
    "create_atlas",
    "AtlasValidator",
    "save_pages",
    "build_manifest",
    "save_manifest",
    "page_filename",
    "MANIFEST_FORMATS",
]

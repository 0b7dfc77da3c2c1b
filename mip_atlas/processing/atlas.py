"""
Texture atlas generation with optional mip maps.

Entries are packed onto a small number of square pages, padded according to
their wrap mode, and mip levels are synthesized either per page or per entry.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Hashable, List, Optional, Sequence, Union

from PIL import Image

from ..providers.base import PlacementProvider, PackedPlacement, PackingError
from ..providers.rectpack_provider import RectpackProvider
from ..utils.image import ImageUtils, WrapMode
from .layout import AtlasLayoutEngine, Texcoord
from .mipmap import MipPyramidBuilder, Texture
from .options import MipOption, MipWithBlock, NoMip, is_power_of_two

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class AtlasEntry:
    """A source image with its wrap mode and an optional lookup key."""
    texture: Image.Image
    wrap: WrapMode = WrapMode.CLAMP
    key: Optional[Hashable] = None

    def __post_init__(self):
        object.__setattr__(self, 'wrap', WrapMode(self.wrap))


@dataclass
class AtlasDescriptor:
    """Parameters of one atlas generation."""
    max_page_count: int
    size: int
    mip: MipOption = field(default_factory=NoMip)
    entries: Sequence[AtlasEntry] = ()


@dataclass
class Atlas:
    """
    Result of atlas generation.

    ``texcoords`` is a list aligned with the input entries, or a dict keyed by
    entry key when every entry carries one. ``placements`` is always positional.
    """
    page_count: int
    size: int
    mip_level_count: int
    textures: List[Texture]
    texcoords: Union[List[Texcoord], Dict[Hashable, Texcoord]]
    placements: List[PackedPlacement] = field(default_factory=list)

    @property
    def mode(self) -> str:
        """Pixel mode shared by every page and mip level."""
        return self.textures[0].mode

    @property
    def keyed(self) -> bool:
        return isinstance(self.texcoords, dict)

    def texcoord_for(self, index_or_key: Hashable) -> Texcoord:
        """Look up a texcoord by entry position or by entry key."""
        return self.texcoords[index_or_key]

    def page_image(self, page: int, level: int = 0) -> Image.Image:
        return self.textures[page].mip_maps[level]


class AtlasErrorKind(str, Enum):
    """Tag identifying why atlas generation failed."""
    ZERO_MAX_PAGE_COUNT = "zero_max_page_count"
    INVALID_SIZE = "invalid_size"
    INVALID_BLOCK_SIZE = "invalid_block_size"
    ZERO_ENTRY = "zero_entry"
    PACKING = "packing"
    INVALID_PLACEMENT = "invalid_placement"
    MIXED_KEYS = "mixed_keys"
    DUPLICATE_KEY = "duplicate_key"


class AtlasError(Exception):
    """
    Exception raised when atlas generation fails.

    Attributes:
        kind: Failure tag
        value: Offending size, block size or key, or the list of placement violations
        inner: Placement provider error for ``AtlasErrorKind.PACKING``
    """

    def __init__(self, kind: AtlasErrorKind, value: Any = None, inner: Optional[Exception] = None):
        self.kind = kind
        self.value = value
        self.inner = inner
        super().__init__(self._describe())

    def _describe(self) -> str:
        if self.kind is AtlasErrorKind.ZERO_MAX_PAGE_COUNT:
            return "max page count is zero."
        if self.kind is AtlasErrorKind.INVALID_SIZE:
            return f"size is not power of two: {self.value}."
        if self.kind is AtlasErrorKind.INVALID_BLOCK_SIZE:
            return f"block size is not power of two: {self.value}."
        if self.kind is AtlasErrorKind.ZERO_ENTRY:
            return "entry is empty."
        if self.kind is AtlasErrorKind.MIXED_KEYS:
            return "either every entry or no entry must carry a key."
        if self.kind is AtlasErrorKind.DUPLICATE_KEY:
            return f"duplicate entry key: {self.value!r}."
        if self.kind is AtlasErrorKind.INVALID_PLACEMENT:
            return f"placement service returned an invalid result: {'; '.join(self.value)}."
        return str(self.inner)


class AtlasGenerator:
    """Drives sizing, placement, dilation, mip synthesis and texcoord computation."""

    def __init__(self, provider: Optional[PlacementProvider] = None):
        """
        Initialize atlas generator.

        Args:
            provider: Placement service, defaults to :class:`RectpackProvider`
        """
        self.provider = provider or RectpackProvider()

    def create_atlas(self, descriptor: AtlasDescriptor) -> Atlas:
        """
        Create a texture atlas.

        Args:
            descriptor: Page budget, page size, mip option and entries

        Returns:
            Atlas with one texture per page and one texcoord per entry

        Raises:
            AtlasError: If validation or placement fails; nothing is returned
        """
        self.validate_descriptor(descriptor)

        mip = descriptor.mip
        size = descriptor.size
        entries = list(descriptor.entries)

        mode = ImageUtils.normalize_mode(entries[0].texture).mode
        sources = [ImageUtils.normalize_mode(entry.texture, mode) for entry in entries]

        layout = AtlasLayoutEngine(mip, size)
        requests = [
            layout.pack_request(index, source.width, source.height)
            for index, source in enumerate(sources)
        ]

        try:
            located = self.provider.place(
                requests, layout.bin_size, layout.bin_size, descriptor.max_page_count
            )
        except PackingError as e:
            raise AtlasError(AtlasErrorKind.PACKING, inner=e) from e

        violations = self.provider.validate_placements(
            requests, located, layout.bin_size, layout.bin_size, descriptor.max_page_count
        )
        if violations:
            raise AtlasError(AtlasErrorKind.INVALID_PLACEMENT, violations)

        placements = [located[index] for index in range(len(entries))]
        page_count = max(placement.page for placement in placements) + 1

        texcoords = [
            layout.texcoord(placement, source.width, source.height)
            for placement, source in zip(placements, sources)
        ]

        builder = MipPyramidBuilder(mip, size)
        textures = builder.allocate_pages(page_count, mode)

        for index, (entry, source, placement) in enumerate(zip(entries, sources, placements)):
            _, _, width, height = layout.pixel_rect(placement)
            dilated = ImageUtils.dilate(source, entry.wrap, layout.padding, layout.padding, width, height)
            builder.write_entry(textures[placement.page], dilated, placement)
            logger.debug(
                f"Placed entry {index} ({source.width}x{source.height}, {entry.wrap.value}) "
                f"on page {placement.page} at ({placement.x}, {placement.y})"
            )

        builder.finish_pages(textures)

        logger.info(
            f"Created atlas: {len(entries)} entries on {page_count} page(s) of {size}x{size}, "
            f"{builder.mip_level_count} mip level(s)"
        )

        return Atlas(
            page_count=page_count,
            size=size,
            mip_level_count=builder.mip_level_count,
            textures=textures,
            texcoords=self._index_texcoords(entries, texcoords),
            placements=placements,
        )

    def validate_descriptor(self, descriptor: AtlasDescriptor) -> None:
        """
        Validate a descriptor before any packing work starts.

        Raises:
            AtlasError: For the first failing check
        """
        mip = descriptor.mip

        if descriptor.max_page_count == 0:
            raise AtlasError(AtlasErrorKind.ZERO_MAX_PAGE_COUNT)

        if mip.generates_mips and not is_power_of_two(descriptor.size):
            raise AtlasError(AtlasErrorKind.INVALID_SIZE, descriptor.size)

        if isinstance(mip, MipWithBlock) and not is_power_of_two(mip.block_size):
            raise AtlasError(AtlasErrorKind.INVALID_BLOCK_SIZE, mip.block_size)

        if not descriptor.entries:
            raise AtlasError(AtlasErrorKind.ZERO_ENTRY)

        keys = [entry.key for entry in descriptor.entries if entry.key is not None]
        if keys and len(keys) != len(descriptor.entries):
            raise AtlasError(AtlasErrorKind.MIXED_KEYS)

        seen = set()
        for key in keys:
            if key in seen:
                raise AtlasError(AtlasErrorKind.DUPLICATE_KEY, key)
            seen.add(key)

    def _index_texcoords(self, entries: List[AtlasEntry],
                         texcoords: List[Texcoord]) -> Union[List[Texcoord], Dict[Hashable, Texcoord]]:
        if entries[0].key is None:
            return texcoords
        return {entry.key: texcoord for entry, texcoord in zip(entries, texcoords)}


def create_atlas(descriptor: AtlasDescriptor, provider: Optional[PlacementProvider] = None) -> Atlas:
    """
    Create a new texture atlas.

    Example:
        atlas = create_atlas(AtlasDescriptor(
            max_page_count=8,
            size=2048,
            mip=MipWithBlock(MipFilter.LANCZOS3, 32),
            entries=[AtlasEntry(Image.new('RGB', (512, 512)))],
        ))
        texcoord = atlas.texcoords[0]
        texture = atlas.textures[texcoord.page].mip_maps[0]
    """
    return AtlasGenerator(provider).create_atlas(descriptor)

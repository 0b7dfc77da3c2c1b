"""
Mip map options controlling padding, mip level count and mip generation strategy.
"""

from dataclasses import dataclass
from typing import Optional, Union

from ..utils.image import MipFilter


MIP_METHODS = ("no_mip", "no_mip_with_padding", "mip", "mip_with_padding", "mip_with_block")


def is_power_of_two(n: int) -> bool:
    """Check if number is a power of two."""
    return n > 0 and (n & (n - 1)) == 0


def _check_padding(padding: int) -> None:
    if padding < 0:
        raise ValueError(f"padding cannot be negative, got {padding}")


@dataclass(frozen=True)
class NoMip:
    """Layout with no padding and no mip map."""

    padding = 0
    filter = None
    generates_mips = False
    block_confined = False

    def mip_level_count(self, size: int) -> int:
        return 1


@dataclass(frozen=True)
class NoMipWithPadding:
    """Layout with padding and no mip map."""
    padding: int

    filter = None
    generates_mips = False
    block_confined = False

    def __post_init__(self):
        _check_padding(self.padding)

    def mip_level_count(self, size: int) -> int:
        return 1


@dataclass(frozen=True)
class Mip:
    """Layout with no padding; mip levels are downsampled from whole pages."""
    filter: MipFilter = MipFilter.NEAREST

    padding = 0
    generates_mips = True
    block_confined = False

    def __post_init__(self):
        object.__setattr__(self, 'filter', MipFilter(self.filter))

    def mip_level_count(self, size: int) -> int:
        return size.bit_length()


@dataclass(frozen=True)
class MipWithPadding:
    """Layout with padding; mip levels are downsampled from whole pages."""
    filter: MipFilter
    padding: int

    generates_mips = True
    block_confined = False

    def __post_init__(self):
        object.__setattr__(self, 'filter', MipFilter(self.filter))
        _check_padding(self.padding)

    def mip_level_count(self, size: int) -> int:
        return size.bit_length()


@dataclass(frozen=True)
class MipWithBlock:
    """
    Layout on a grid of blocks with half a block of padding around each entry.

    Every entry gets its own mip chain built from its padded source, so low
    mip levels never mix pixels of unrelated entries.
    """
    filter: MipFilter
    block_size: int

    generates_mips = True
    block_confined = True

    def __post_init__(self):
        object.__setattr__(self, 'filter', MipFilter(self.filter))

    @property
    def padding(self) -> int:
        return self.block_size >> 1

    def mip_level_count(self, size: int) -> int:
        return self.block_size.bit_length()


MipOption = Union[NoMip, NoMipWithPadding, Mip, MipWithPadding, MipWithBlock]


def parse_mip_option(method: str, filter: Optional[str] = None, padding: int = 0,
                     block_size: int = 32) -> MipOption:
    """
    Build a mip option from configuration values.

    Args:
        method: One of ``MIP_METHODS``
        filter: Filter name, used by the mip generating methods
        padding: Padding in pixels for the ``*_with_padding`` methods
        block_size: Block edge length for ``mip_with_block``

    Raises:
        ValueError: If the method or filter name is unknown
    """
    method = method.lower()
    mip_filter = MipFilter((filter or MipFilter.NEAREST.value).lower())

    if method == "no_mip":
        return NoMip()
    elif method == "no_mip_with_padding":
        return NoMipWithPadding(padding)
    elif method == "mip":
        return Mip(mip_filter)
    elif method == "mip_with_padding":
        return MipWithPadding(mip_filter, padding)
    elif method == "mip_with_block":
        return MipWithBlock(mip_filter, block_size)
    else:
        raise ValueError(f"Unknown mip method: {method} (expected one of {', '.join(MIP_METHODS)})")

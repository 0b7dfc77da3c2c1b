"""
Consistency checks for generated atlases.
"""

from typing import List

from .atlas import Atlas
from .layout import Texcoord


class AtlasValidator:
    """Validator for atlas generation results and consistency checks."""

    def validate(self, atlas: Atlas) -> List[str]:
        """
        Perform complete validation of an atlas.

        Returns:
            List of all validation error messages
        """
        all_errors = []
        all_errors.extend(self.validate_textures(atlas))
        all_errors.extend(self.validate_texcoords(atlas))
        all_errors.extend(self.validate_overlaps(atlas))
        return all_errors

    def validate_textures(self, atlas: Atlas) -> List[str]:
        """Check page count and the dimensions of every mip level."""
        errors = []

        if len(atlas.textures) != atlas.page_count:
            errors.append(f"Atlas has {len(atlas.textures)} textures, expected {atlas.page_count}")

        for page, texture in enumerate(atlas.textures):
            if len(texture.mip_maps) != atlas.mip_level_count:
                errors.append(
                    f"Page {page} has {len(texture.mip_maps)} mip levels, expected {atlas.mip_level_count}"
                )

            for level, mip_map in enumerate(texture.mip_maps):
                expected = atlas.size >> level
                if mip_map.size != (expected, expected):
                    errors.append(
                        f"Page {page} mip {level} is {mip_map.width}x{mip_map.height}, "
                        f"expected {expected}x{expected}"
                    )

                if mip_map.mode != texture.mip_maps[0].mode:
                    errors.append(f"Page {page} mip {level} mode {mip_map.mode} differs from level 0")

        return errors

    def validate_texcoords(self, atlas: Atlas) -> List[str]:
        """Check that every texcoord is well formed and lies inside its page."""
        errors = []

        for name, texcoord in self._named_texcoords(atlas):
            if texcoord.size != atlas.size:
                errors.append(f"Texcoord {name!r} is relative to size {texcoord.size}, expected {atlas.size}")

            if not 0 <= texcoord.page < atlas.page_count:
                errors.append(f"Texcoord {name!r} references missing page {texcoord.page}")

            if texcoord.min_x > texcoord.max_x or texcoord.min_y > texcoord.max_y:
                errors.append(f"Texcoord {name!r} has inverted bounds")

            if texcoord.min_x < 0 or texcoord.min_y < 0:
                errors.append(f"Texcoord {name!r} has negative coordinates: ({texcoord.min_x}, {texcoord.min_y})")

            if texcoord.max_x > atlas.size or texcoord.max_y > atlas.size:
                errors.append(
                    f"Texcoord {name!r} extends beyond page: ({texcoord.max_x}, {texcoord.max_y}) > {atlas.size}"
                )

        return errors

    def validate_overlaps(self, atlas: Atlas) -> List[str]:
        """Check that no two live regions on the same page overlap."""
        errors = []
        named = [(name, t) for name, t in self._named_texcoords(atlas) if t.width > 0 and t.height > 0]

        for i, (first_name, first) in enumerate(named):
            for second_name, second in named[i + 1:]:
                if first.page == second.page and self._intersects(first, second):
                    errors.append(f"Texcoords {first_name!r} and {second_name!r} overlap on page {first.page}")

        return errors

    def _named_texcoords(self, atlas: Atlas):
        if isinstance(atlas.texcoords, dict):
            return list(atlas.texcoords.items())
        return list(enumerate(atlas.texcoords))

    def _intersects(self, first: Texcoord, second: Texcoord) -> bool:
        return not (first.max_x <= second.min_x or second.max_x <= first.min_x or
                    first.max_y <= second.min_y or second.max_y <= first.min_y)

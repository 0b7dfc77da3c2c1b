"""
Writing atlas pages and manifest files.
"""

import json
from pathlib import Path
from typing import Any, Dict, Hashable, List, Optional, Sequence, Union

import toml

from ..utils.image import ImageUtils
from .atlas import Atlas

MANIFEST_FORMATS = ("json", "toml")

_EXTENSIONS = {
    "PNG": "png",
    "TGA": "tga",
    "TIFF": "tiff",
    "WEBP": "webp",
    "BMP": "bmp",
}


def page_filename(name: str, page: int, level: int, format: str = "PNG") -> str:
    """File name of one page mip level, e.g. ``atlas_0.png`` or ``atlas_0_mip2.png``."""
    extension = _EXTENSIONS.get(format.upper(), format.lower())
    if level == 0:
        return f"{name}_{page}.{extension}"
    return f"{name}_{page}_mip{level}.{extension}"


def save_pages(atlas: Atlas, output_dir: Union[str, Path], name: str = "atlas",
               format: str = "PNG", save_mip_maps: bool = True,
               compression_level: int = 6) -> List[List[Path]]:
    """
    Save every page (and optionally every mip level) of an atlas.

    Returns:
        Per page, the written file paths ordered by mip level
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for page, texture in enumerate(atlas.textures):
        levels = texture.mip_maps if save_mip_maps else texture.mip_maps[:1]
        page_files = []
        for level, mip_map in enumerate(levels):
            path = output_dir / page_filename(name, page, level, format)
            if format.upper() == "PNG":
                ImageUtils.save_image(mip_map, path, format, compress_level=compression_level)
            else:
                ImageUtils.save_image(mip_map, path, format)
            page_files.append(path)
        written.append(page_files)

    return written


def build_manifest(atlas: Atlas, names: Optional[Sequence[Hashable]] = None,
                   page_files: Optional[List[List[Path]]] = None) -> Dict[str, Any]:
    """
    Describe an atlas as plain data.

    Args:
        atlas: Generated atlas
        names: Entry names for positional atlases; keyed atlases use their keys
        page_files: Files written by :func:`save_pages`, recorded by file name

    Returns:
        Dictionary with ``meta``, ``pages`` and ``entries`` sections
    """
    if isinstance(atlas.texcoords, dict):
        named = list(atlas.texcoords.items())
    else:
        names = names if names is not None else range(len(atlas.texcoords))
        named = list(zip(names, atlas.texcoords))

    entries = {}
    for name, texcoord in named:
        uv = texcoord.to_f64()
        entries[str(name)] = {
            "page": texcoord.page,
            "x": texcoord.min_x,
            "y": texcoord.min_y,
            "w": texcoord.width,
            "h": texcoord.height,
            "uv": [uv.min_x, uv.min_y, uv.max_x, uv.max_y],
        }

    pages = []
    for page in range(atlas.page_count):
        files = [path.name for path in page_files[page]] if page_files else []
        pages.append({"index": page, "files": files})

    return {
        "meta": {
            "size": atlas.size,
            "page_count": atlas.page_count,
            "mip_level_count": atlas.mip_level_count,
            "mode": atlas.mode,
        },
        "pages": pages,
        "entries": entries,
    }


def save_manifest(manifest: Dict[str, Any], path: Union[str, Path], format: str = "json") -> Path:
    """Save a manifest as JSON or TOML."""
    path = Path(path)
    format = format.lower()

    if format == "toml":
        with open(path, 'w') as f:
            toml.dump(manifest, f)
    elif format == "json":
        with open(path, 'w') as f:
            json.dump(manifest, f, indent=2)
    else:
        raise ValueError(f"Unsupported manifest format: {format}")

    return path

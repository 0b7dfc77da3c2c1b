"""
Tests for writing atlas pages and manifests.
"""

import json
import shutil
import tempfile
import unittest
from pathlib import Path

import toml
from PIL import Image

from ..processing.atlas import AtlasDescriptor, AtlasEntry, create_atlas
from ..processing.export import build_manifest, page_filename, save_manifest, save_pages
from ..processing.options import Mip, NoMipWithPadding
from ..utils.image import MipFilter


class TestPageFiles(unittest.TestCase):
    """Test writing page images."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = Path(tempfile.mkdtemp())
        entries = [
            AtlasEntry(Image.new('RGBA', (16, 16), (255, 0, 0, 255))),
            AtlasEntry(Image.new('RGBA', (8, 24), (0, 255, 0, 255))),
        ]
        self.atlas = create_atlas(AtlasDescriptor(1, 32, Mip(MipFilter.LINEAR), entries))

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir)

    def test_page_filename(self):
        """Test level 0 and mip file names."""
        self.assertEqual(page_filename("atlas", 0, 0), "atlas_0.png")
        self.assertEqual(page_filename("atlas", 1, 3), "atlas_1_mip3.png")
        self.assertEqual(page_filename("tiles", 0, 0, "TGA"), "tiles_0.tga")

    def test_save_all_levels(self):
        """Test every mip level is written."""
        written = save_pages(self.atlas, self.temp_dir / "out")

        self.assertEqual(len(written), 1)
        self.assertEqual(len(written[0]), 6)
        for level, path in enumerate(written[0]):
            self.assertTrue(path.exists())
            with Image.open(path) as image:
                self.assertEqual(image.size, (32 >> level, 32 >> level))

    def test_save_level_zero_only(self):
        """Test mip levels can be skipped."""
        written = save_pages(self.atlas, self.temp_dir, name="tiles", save_mip_maps=False)

        self.assertEqual([path.name for path in written[0]], ["tiles_0.png"])

    def test_saved_pixels_match(self):
        """Test saved pages round trip losslessly."""
        written = save_pages(self.atlas, self.temp_dir, compression_level=9)

        with Image.open(written[0][0]) as image:
            self.assertEqual(image.tobytes(), self.atlas.page_image(0).tobytes())


class TestManifest(unittest.TestCase):
    """Test manifest construction and serialization."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir)

    def test_keyed_manifest(self):
        """Test keyed atlases are described by key."""
        entries = [
            AtlasEntry(Image.new('RGB', (10, 6)), key="grass"),
            AtlasEntry(Image.new('RGB', (4, 4)), key="stone"),
        ]
        atlas = create_atlas(AtlasDescriptor(1, 64, NoMipWithPadding(2), entries))

        manifest = build_manifest(atlas)

        self.assertEqual(manifest["meta"], {"size": 64, "page_count": 1, "mip_level_count": 1, "mode": "RGB"})
        self.assertEqual(set(manifest["entries"]), {"grass", "stone"})
        grass = manifest["entries"]["grass"]
        texcoord = atlas.texcoord_for("grass")
        self.assertEqual((grass["x"], grass["y"], grass["w"], grass["h"]), (texcoord.min_x, texcoord.min_y, 10, 6))
        self.assertEqual(grass["uv"][0], texcoord.min_x / 64)
        self.assertEqual(manifest["pages"], [{"index": 0, "files": []}])

    def test_positional_manifest_names(self):
        """Test names can be supplied for positional atlases."""
        atlas = create_atlas(AtlasDescriptor(1, 32, NoMipWithPadding(1), [AtlasEntry(Image.new('L', (4, 4)))]))

        self.assertEqual(list(build_manifest(atlas)["entries"]), ["0"])
        self.assertEqual(list(build_manifest(atlas, names=["dirt"])["entries"]), ["dirt"])

    def test_manifest_records_page_files(self):
        """Test written file names are listed per page."""
        atlas = create_atlas(AtlasDescriptor(1, 16, Mip(MipFilter.NEAREST), [AtlasEntry(Image.new('L', (4, 4)))]))
        page_files = save_pages(atlas, self.temp_dir)

        manifest = build_manifest(atlas, page_files=page_files)

        self.assertEqual(manifest["pages"][0]["files"][:2], ["atlas_0.png", "atlas_0_mip1.png"])
        self.assertEqual(len(manifest["pages"][0]["files"]), 5)

    def test_save_json_and_toml(self):
        """Test both manifest formats load back to the same data."""
        atlas = create_atlas(AtlasDescriptor(
            1, 32, NoMipWithPadding(1), [AtlasEntry(Image.new('RGB', (4, 4)), key="dirt")]
        ))
        manifest = build_manifest(atlas)

        json_path = save_manifest(manifest, self.temp_dir / "atlas.json", "json")
        toml_path = save_manifest(manifest, self.temp_dir / "atlas.toml", "TOML")

        with open(json_path) as f:
            self.assertEqual(json.load(f), manifest)
        with open(toml_path) as f:
            loaded = toml.load(f)
        self.assertEqual(loaded["meta"], manifest["meta"])
        self.assertEqual(loaded["entries"]["dirt"]["w"], 4)

    def test_unsupported_manifest_format(self):
        """Test unknown formats raise ValueError."""
        with self.assertRaises(ValueError):
            save_manifest({}, self.temp_dir / "atlas.yaml", "yaml")


if __name__ == '__main__':
    unittest.main()

"""
Integration tests for the atlas build pipeline.
"""

import json
import shutil
import tempfile
import unittest
from pathlib import Path

from PIL import Image

from ..config import AtlasBuildConfig
from ..pipeline import AtlasBuildError, AtlasBuildPipeline
from ..utils.image import WrapMode


class TestAtlasBuildPipeline(unittest.TestCase):
    """Test the directory to atlas build."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.input_dir = self.temp_dir / "textures"
        self.output_dir = self.temp_dir / "atlas"
        self.input_dir.mkdir()

        Image.new('RGBA', (64, 64), (255, 0, 0, 255)).save(self.input_dir / "grass.png")
        Image.new('RGBA', (32, 16), (0, 255, 0, 255)).save(self.input_dir / "stone.png")
        Image.new('RGB', (20, 20), (0, 0, 255)).save(self.input_dir / "water.png")
        (self.input_dir / "notes.txt").write_text("not an image")

        self.config = AtlasBuildConfig(
            size=256,
            block_size=16,
            input_dir=str(self.input_dir),
            output_dir=str(self.output_dir),
            wrap_overrides={"water": "repeat"},
        )

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir)

    def test_discover_images(self):
        """Test only image files are picked up, sorted by name."""
        pipeline = AtlasBuildPipeline(self.config)

        paths = pipeline.discover_images()

        self.assertEqual([path.name for path in paths], ["grass.png", "stone.png", "water.png"])

    def test_load_entries(self):
        """Test entries are keyed by file stem with configured wrap modes."""
        pipeline = AtlasBuildPipeline(self.config)

        entries = pipeline.load_entries(pipeline.discover_images())

        self.assertEqual([entry.key for entry in entries], ["grass", "stone", "water"])
        self.assertIs(entries[0].wrap, WrapMode.CLAMP)
        self.assertIs(entries[2].wrap, WrapMode.REPEAT)

    def test_run_writes_pages_and_manifest(self):
        """Test a complete build."""
        result = AtlasBuildPipeline(self.config).run()

        self.assertEqual(result.entry_names, ["grass", "stone", "water"])
        self.assertEqual(result.atlas.page_count, 1)
        self.assertEqual(result.atlas.mip_level_count, 5)
        self.assertEqual(result.validation_errors, [])
        self.assertEqual(len(result.page_files[0]), 5)
        for path in result.page_files[0]:
            self.assertTrue(path.exists())

        self.assertEqual(result.manifest_path, self.output_dir / "atlas.json")
        with open(result.manifest_path) as f:
            manifest = json.load(f)
        self.assertEqual(set(manifest["entries"]), {"grass", "stone", "water"})
        self.assertEqual(manifest["entries"]["stone"]["w"], 32)
        self.assertEqual(manifest["meta"]["mode"], "RGBA")

    def test_run_with_explicit_directories(self):
        """Test directories passed to run override the configuration."""
        config = AtlasBuildConfig(size=256, mip_method="no_mip", manifest_format="toml", atlas_name="tiles")

        result = AtlasBuildPipeline(config).run(self.input_dir, self.output_dir)

        self.assertEqual(result.manifest_path, self.output_dir / "tiles.toml")
        self.assertEqual([path.name for path in result.page_files[0]], ["tiles_0.png"])

    def test_empty_directory(self):
        """Test a build without textures fails."""
        empty = self.temp_dir / "empty"
        empty.mkdir()

        with self.assertRaises(AtlasBuildError):
            AtlasBuildPipeline(self.config).run(empty)

    def test_missing_directory(self):
        """Test a missing input directory fails."""
        with self.assertRaises(AtlasBuildError):
            AtlasBuildPipeline(self.config).run(self.temp_dir / "missing")

    def test_invalid_configuration(self):
        """Test configuration errors stop the build before any work."""
        self.config.size = 300

        with self.assertRaises(AtlasBuildError) as context:
            AtlasBuildPipeline(self.config).run()

        self.assertIn("Invalid configuration", str(context.exception))
        self.assertFalse(self.output_dir.exists())

    def test_packing_failure_wrapped(self):
        """Test atlas errors surface as build errors with the cause attached."""
        self.config.size = 64
        self.config.max_page_count = 1

        with self.assertRaises(AtlasBuildError) as context:
            AtlasBuildPipeline(self.config).run()

        self.assertIsNotNone(context.exception.cause)
        self.assertIn("Atlas generation failed", str(context.exception))


if __name__ == '__main__':
    unittest.main()

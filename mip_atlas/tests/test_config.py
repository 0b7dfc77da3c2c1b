"""
Tests for build configuration loading and validation.
"""

import json
import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from .. import config as config_module
from ..config import AtlasBuildConfig, ENV_VARIABLES
from ..processing import export
from ..processing.options import MipWithBlock, MipWithPadding, NoMip
from ..utils.image import MipFilter, WrapMode


TOML_CONFIG = """
[atlas]
max_page_count = 4
size = 1024
mip_method = "mip_with_padding"
mip_filter = "cubic"
padding = 8

[entries]
default_wrap = "repeat"

[entries.wrap_overrides]
water = "mirror"

[paths]
input_dir = "art/tiles"
output_dir = "build/atlas"

[output]
atlas_name = "tiles"
manifest_format = "toml"
compression_level = 9
save_mip_maps = false
"""


class TestAtlasBuildConfig(unittest.TestCase):
    """Test AtlasBuildConfig class functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir)

    def test_defaults(self):
        """Test default values."""
        config = AtlasBuildConfig()

        self.assertEqual(config.max_page_count, 8)
        self.assertEqual(config.size, 2048)
        self.assertEqual(config.mip_method, "mip_with_block")
        self.assertEqual(config.block_size, 32)
        self.assertEqual(config.validate(), [])
        self.assertEqual(config.to_mip_option(), MipWithBlock(MipFilter.LANCZOS3, 32))

    def test_from_toml(self):
        """Test loading a TOML file."""
        path = self.temp_dir / "mip_atlas.toml"
        path.write_text(TOML_CONFIG)

        config = AtlasBuildConfig.from_file(path)

        self.assertEqual(config.max_page_count, 4)
        self.assertEqual(config.size, 1024)
        self.assertEqual(config.to_mip_option(), MipWithPadding(MipFilter.CUBIC, 8))
        self.assertEqual(config.input_dir, "art/tiles")
        self.assertEqual(config.atlas_name, "tiles")
        self.assertEqual(config.manifest_format, "toml")
        self.assertEqual(config.compression_level, 9)
        self.assertFalse(config.save_mip_maps)
        self.assertIs(config.wrap_for("water"), WrapMode.MIRROR)
        self.assertIs(config.wrap_for("grass"), WrapMode.REPEAT)
        self.assertEqual(config.validate(), [])

    def test_from_json(self):
        """Test loading a JSON file."""
        path = self.temp_dir / "mip_atlas.json"
        path.write_text(json.dumps({"atlas": {"mip_method": "no_mip", "size": 300}}))

        config = AtlasBuildConfig.from_file(path)

        self.assertEqual(config.size, 300)
        self.assertEqual(config.to_mip_option(), NoMip())
        self.assertEqual(config.validate(), [])

    def test_missing_file(self):
        """Test loading a file that does not exist."""
        with self.assertRaises(FileNotFoundError):
            AtlasBuildConfig.from_file(self.temp_dir / "missing.toml")

    def test_unsupported_format(self):
        """Test unknown file extensions."""
        path = self.temp_dir / "config.yaml"
        path.write_text("size: 10")

        with self.assertRaises(ValueError):
            AtlasBuildConfig.from_file(path)

    @patch.dict(os.environ, {
        'MIP_ATLAS_SIZE': '512',
        'MIP_ATLAS_MIP_METHOD': 'mip',
        'MIP_ATLAS_MIP_FILTER': 'gaussian',
        'MIP_ATLAS_SAVE_MIP_MAPS': 'false',
    })
    def test_env_overrides(self):
        """Test environment variables override defaults."""
        config = AtlasBuildConfig.from_env()

        self.assertEqual(config.size, 512)
        self.assertEqual(config.mip_method, "mip")
        self.assertFalse(config.save_mip_maps)
        self.assertEqual(config.to_mip_option().filter, MipFilter.GAUSSIAN)

    @patch.dict(os.environ, {'MIP_ATLAS_MAX_PAGE_COUNT': '2'})
    def test_env_overrides_file_values(self):
        """Test environment variables win over file values."""
        path = self.temp_dir / "mip_atlas.toml"
        path.write_text(TOML_CONFIG)

        config = AtlasBuildConfig._apply_env_overrides(AtlasBuildConfig.from_file(path))

        self.assertEqual(config.max_page_count, 2)
        self.assertEqual(config.size, 1024)

    def test_every_env_variable_maps_to_field(self):
        """Test the environment table only names real settings."""
        config = AtlasBuildConfig()

        for variable, (attribute, _) in ENV_VARIABLES.items():
            self.assertTrue(variable.startswith("MIP_ATLAS_"))
            self.assertTrue(hasattr(config, attribute), attribute)

    def test_validate_errors(self):
        """Test invalid settings are all reported."""
        config = AtlasBuildConfig(
            max_page_count=0,
            size=1000,
            mip_method="trilinear",
            mip_filter="sinc",
            default_wrap="border",
            wrap_overrides={"water": "wave"},
            padding=-1,
            compression_level=12,
            output_format="GIF",
            manifest_format="yaml",
        )

        errors = config.validate()

        self.assertEqual(len(errors), 9)
        self.assertTrue(any("mip_method" in error for error in errors))
        self.assertTrue(any("'water'" in error for error in errors))

    def test_validate_power_of_two(self):
        """Test mip methods require power of two sizes."""
        config = AtlasBuildConfig(size=1000, block_size=24)

        errors = config.validate()

        self.assertIn("size must be a power of two when mip maps are generated", errors)
        self.assertIn("block_size must be a power of two", errors)

    def test_manifest_formats_match_export(self):
        """Test every format the exporter writes is accepted by validation."""
        self.assertIs(config_module.MANIFEST_FORMATS, export.MANIFEST_FORMATS)
        for manifest_format in export.MANIFEST_FORMATS:
            self.assertEqual(AtlasBuildConfig(manifest_format=manifest_format).validate(), [])

    def test_any_size_without_mips(self):
        """Test non power of two sizes are accepted without mip maps."""
        config = AtlasBuildConfig(size=1000, mip_method="no_mip_with_padding", padding=4)

        self.assertEqual(config.validate(), [])


if __name__ == '__main__':
    unittest.main()

"""
Configuration management for atlas builds.
Supports TOML and JSON configuration files with environment variable overrides.
"""

import os
import json
from dataclasses import dataclass, field
from typing import Dict, List, Any, Union
from pathlib import Path

import toml

from .processing.export import MANIFEST_FORMATS
from .processing.options import MIP_METHODS, MipOption, is_power_of_two, parse_mip_option
from .utils.image import MipFilter, WrapMode

OUTPUT_FORMATS = ('PNG', 'TGA', 'TIFF', 'WEBP', 'BMP')

ENV_PREFIX = 'MIP_ATLAS_'

# Environment variable -> (attribute, parser)
ENV_VARIABLES = {
    'MIP_ATLAS_MAX_PAGE_COUNT': ('max_page_count', int),
    'MIP_ATLAS_SIZE': ('size', int),
    'MIP_ATLAS_MIP_METHOD': ('mip_method', str),
    'MIP_ATLAS_MIP_FILTER': ('mip_filter', str),
    'MIP_ATLAS_PADDING': ('padding', int),
    'MIP_ATLAS_BLOCK_SIZE': ('block_size', int),
    'MIP_ATLAS_DEFAULT_WRAP': ('default_wrap', str),
    'MIP_ATLAS_INPUT_DIR': ('input_dir', str),
    'MIP_ATLAS_OUTPUT_DIR': ('output_dir', str),
    'MIP_ATLAS_ATLAS_NAME': ('atlas_name', str),
    'MIP_ATLAS_OUTPUT_FORMAT': ('output_format', str),
    'MIP_ATLAS_MANIFEST_FORMAT': ('manifest_format', str),
    'MIP_ATLAS_COMPRESSION_LEVEL': ('compression_level', int),
    'MIP_ATLAS_SAVE_MIP_MAPS': ('save_mip_maps', lambda value: value.lower() == 'true'),
}


@dataclass
class AtlasBuildConfig:
    """Main configuration class for atlas builds."""

    # Atlas layout
    max_page_count: int = 8
    size: int = 2048
    mip_method: str = "mip_with_block"
    mip_filter: str = "lanczos3"
    padding: int = 0
    block_size: int = 32

    # Entries
    default_wrap: str = "clamp"
    wrap_overrides: Dict[str, str] = field(default_factory=dict)

    # Paths
    input_dir: str = "textures"
    output_dir: str = "atlas"

    # Output settings
    atlas_name: str = "atlas"
    output_format: str = "PNG"
    manifest_format: str = "json"
    compression_level: int = 6
    save_mip_maps: bool = True

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "AtlasBuildConfig":
        """Load configuration from TOML or JSON file."""
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        if config_path.suffix.lower() == '.toml':
            return cls._from_toml(config_path)
        elif config_path.suffix.lower() == '.json':
            return cls._from_json(config_path)
        else:
            raise ValueError(f"Unsupported configuration format: {config_path.suffix}")

    @classmethod
    def _from_toml(cls, config_path: Path) -> "AtlasBuildConfig":
        """Load configuration from TOML file."""
        with open(config_path, 'r') as f:
            data = toml.load(f)
        return cls._from_dict(data)

    @classmethod
    def _from_json(cls, config_path: Path) -> "AtlasBuildConfig":
        """Load configuration from JSON file."""
        with open(config_path, 'r') as f:
            data = json.load(f)
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "AtlasBuildConfig":
        """Create configuration from dictionary."""
        config_data = {}

        # Handle atlas layout
        if 'atlas' in data:
            atlas = data['atlas']
            for key in ('max_page_count', 'size', 'padding', 'block_size'):
                if key in atlas:
                    config_data[key] = int(atlas[key])
            if 'mip_method' in atlas:
                config_data['mip_method'] = atlas['mip_method']
            if 'mip_filter' in atlas:
                config_data['mip_filter'] = atlas['mip_filter']

        # Handle entry settings
        if 'entries' in data:
            entries = data['entries']
            config_data['default_wrap'] = entries.get('default_wrap', 'clamp')
            config_data['wrap_overrides'] = dict(entries.get('wrap_overrides', {}))

        # Handle paths
        if 'paths' in data:
            paths = data['paths']
            config_data['input_dir'] = paths.get('input_dir', 'textures')
            config_data['output_dir'] = paths.get('output_dir', 'atlas')

        # Handle output settings
        if 'output' in data:
            output = data['output']
            config_data['atlas_name'] = output.get('atlas_name', 'atlas')
            config_data['output_format'] = output.get('format', 'PNG')
            config_data['manifest_format'] = output.get('manifest_format', 'json')
            config_data['compression_level'] = output.get('compression_level', 6)
            config_data['save_mip_maps'] = output.get('save_mip_maps', True)

        return cls(**config_data)

    @classmethod
    def default(cls) -> "AtlasBuildConfig":
        """Create default configuration with environment variable overrides."""
        return cls._apply_env_overrides(cls())

    @classmethod
    def from_env(cls) -> "AtlasBuildConfig":
        """Create configuration from environment variables only."""
        config = cls()
        return cls._apply_env_overrides(config)

    @classmethod
    def _apply_env_overrides(cls, config: "AtlasBuildConfig") -> "AtlasBuildConfig":
        """Apply environment variable overrides to configuration."""
        for variable, (attribute, parse) in ENV_VARIABLES.items():
            value = os.getenv(variable)
            if value:
                setattr(config, attribute, parse(value))

        return config

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if self.mip_method.lower() not in MIP_METHODS:
            errors.append(f"mip_method must be one of {', '.join(MIP_METHODS)}")

        if self.mip_filter.lower() not in {f.value for f in MipFilter}:
            errors.append(f"mip_filter must be one of {', '.join(f.value for f in MipFilter)}")

        wraps = {w.value for w in WrapMode}
        if self.default_wrap.lower() not in wraps:
            errors.append(f"default_wrap must be one of {', '.join(sorted(wraps))}")

        for name, wrap in self.wrap_overrides.items():
            if wrap.lower() not in wraps:
                errors.append(f"wrap override for '{name}' must be one of {', '.join(sorted(wraps))}")

        if self.max_page_count <= 0:
            errors.append("max_page_count must be positive")

        if self.size <= 0:
            errors.append("size must be positive")
        elif self.mip_method.lower() in ('mip', 'mip_with_padding', 'mip_with_block') and not is_power_of_two(self.size):
            errors.append("size must be a power of two when mip maps are generated")

        if self.mip_method.lower() == 'mip_with_block' and not is_power_of_two(self.block_size):
            errors.append("block_size must be a power of two")

        if self.padding < 0:
            errors.append("padding cannot be negative")

        if not 0 <= self.compression_level <= 9:
            errors.append("compression_level must be between 0 and 9")

        if self.output_format.upper() not in OUTPUT_FORMATS:
            errors.append(f"output_format must be one of {', '.join(OUTPUT_FORMATS)}")

        if self.manifest_format.lower() not in MANIFEST_FORMATS:
            errors.append("manifest_format must be json or toml")

        return errors

    def to_mip_option(self) -> MipOption:
        """Translate the layout settings into a mip option."""
        return parse_mip_option(self.mip_method, self.mip_filter, self.padding, self.block_size)

    def wrap_for(self, name: str) -> WrapMode:
        """Wrap mode for an entry, honouring per-entry overrides."""
        return WrapMode(self.wrap_overrides.get(name, self.default_wrap).lower())

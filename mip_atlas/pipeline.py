"""
Build pipeline that turns a directory of textures into atlas pages and a manifest.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .config import AtlasBuildConfig
from .processing.atlas import Atlas, AtlasDescriptor, AtlasEntry, AtlasError, AtlasGenerator
from .processing.export import build_manifest, save_manifest, save_pages
from .processing.validator import AtlasValidator
from .providers.base import PlacementProvider
from .utils.image import ImageUtils

IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.bmp', '.tga', '.webp')


@dataclass
class BuildResult:
    """Outcome of one atlas build."""
    atlas: Atlas
    entry_names: List[str]
    page_files: List[List[Path]] = field(default_factory=list)
    manifest_path: Optional[Path] = None
    validation_errors: List[str] = field(default_factory=list)
    duration: float = 0.0


class AtlasBuildError(Exception):
    """Base exception for build pipeline errors."""
    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause


class AtlasBuildPipeline:
    """
    Loads textures, generates the atlas, validates it and writes the results.
    """

    def __init__(self, config: AtlasBuildConfig, provider: Optional[PlacementProvider] = None):
        """
        Initialize the build pipeline.

        Args:
            config: Build configuration
            provider: Placement service override
        """
        self.config = config
        self.generator = AtlasGenerator(provider)
        self.validator = AtlasValidator()
        self.logger = self._setup_logging()

    def _setup_logging(self) -> logging.Logger:
        """Set up logging for the pipeline."""
        logger = logging.getLogger("mip_atlas")
        logger.setLevel(logging.INFO)

        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger

    def discover_images(self, input_dir: Optional[Path] = None) -> List[Path]:
        """Find texture files in the input directory, sorted by name."""
        input_dir = Path(input_dir or self.config.input_dir)

        if not input_dir.is_dir():
            raise AtlasBuildError(f"Input directory not found: {input_dir}")

        return sorted(
            path for path in input_dir.iterdir()
            if path.is_file() and path.suffix.lower() in IMAGE_EXTENSIONS
        )

    def load_entries(self, paths: List[Path]) -> List[AtlasEntry]:
        """Load each file as an entry keyed by its stem."""
        entries = []
        for path in paths:
            try:
                image = ImageUtils.load_image(path)
            except ValueError as e:
                raise AtlasBuildError(f"Failed to load texture {path}: {e}", e)
            entries.append(AtlasEntry(image, self.config.wrap_for(path.stem), key=path.stem))
            self.logger.debug(f"Loaded {path.name} ({image.width}x{image.height}, {image.mode})")
        return entries

    def build(self, entries: List[AtlasEntry]) -> Atlas:
        """Generate the atlas for already loaded entries."""
        descriptor = AtlasDescriptor(
            max_page_count=self.config.max_page_count,
            size=self.config.size,
            mip=self.config.to_mip_option(),
            entries=entries,
        )

        try:
            return self.generator.create_atlas(descriptor)
        except AtlasError as e:
            raise AtlasBuildError(f"Atlas generation failed: {e}", e)

    def run(self, input_dir: Optional[Path] = None, output_dir: Optional[Path] = None) -> BuildResult:
        """
        Run the complete build.

        Args:
            input_dir: Texture directory, defaults to the configured one
            output_dir: Output directory, defaults to the configured one

        Returns:
            BuildResult describing the written files
        """
        start_time = time.time()

        errors = self.config.validate()
        if errors:
            raise AtlasBuildError(f"Invalid configuration: {'; '.join(errors)}")

        output_dir = Path(output_dir or self.config.output_dir)

        self.logger.info("Starting atlas build")
        paths = self.discover_images(input_dir)
        if not paths:
            raise AtlasBuildError(f"No textures found in {input_dir or self.config.input_dir}")

        entries = self.load_entries(paths)
        self.logger.info(f"Loaded {len(entries)} textures")

        atlas = self.build(entries)

        validation_errors = self.validator.validate(atlas)
        for error in validation_errors:
            self.logger.warning(f"Atlas validation: {error}")

        try:
            page_files = save_pages(
                atlas,
                output_dir,
                self.config.atlas_name,
                self.config.output_format,
                self.config.save_mip_maps,
                self.config.compression_level,
            )
            manifest = build_manifest(atlas, page_files=page_files)
            manifest_path = save_manifest(
                manifest,
                output_dir / f"{self.config.atlas_name}.{self.config.manifest_format.lower()}",
                self.config.manifest_format,
            )
        except OSError as e:
            raise AtlasBuildError(f"Failed to write atlas output: {e}", e)

        duration = time.time() - start_time
        self.logger.info(f"Atlas build finished in {duration:.2f}s, wrote {manifest_path}")

        return BuildResult(
            atlas=atlas,
            entry_names=[path.stem for path in paths],
            page_files=page_files,
            manifest_path=manifest_path,
            validation_errors=validation_errors,
            duration=duration,
        )

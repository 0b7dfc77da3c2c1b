"""
Image processing utilities for atlas baking: edge dilation, resampling and blitting.
"""

from enum import Enum
from pathlib import Path
from typing import Optional, Union
from PIL import Image, ImageFilter
import numpy as np
import io


# Pixel formats the atlas can carry through every processing step.
SUPPORTED_MODES = ("L", "LA", "RGB", "RGBA", "I", "F")


class WrapMode(str, Enum):
    """How an entry's edge pixels are extended into its padding region."""
    CLAMP = "clamp"
    REPEAT = "repeat"
    MIRROR = "mirror"


class MipFilter(str, Enum):
    """Resampling filter used when building mip levels."""
    NEAREST = "nearest"
    LINEAR = "linear"
    CUBIC = "cubic"
    GAUSSIAN = "gaussian"
    LANCZOS3 = "lanczos3"


_RESAMPLE_FILTERS = {
    MipFilter.NEAREST: Image.Resampling.NEAREST,
    MipFilter.LINEAR: Image.Resampling.BILINEAR,
    MipFilter.CUBIC: Image.Resampling.BICUBIC,
    MipFilter.LANCZOS3: Image.Resampling.LANCZOS,
}


class ImageUtils:
    """Utility class for the pixel operations used by the atlas pipeline."""

    @staticmethod
    def load_image(data: Union[bytes, str, Path, Image.Image]) -> Image.Image:
        """
        Load image from various sources.

        Args:
            data: Image data as bytes, file path, or PIL Image

        Returns:
            PIL Image object

        Raises:
            ValueError: If data cannot be loaded as image
        """
        if isinstance(data, Image.Image):
            return data
        elif isinstance(data, bytes):
            try:
                image = Image.open(io.BytesIO(data))
                image.load()
                return image
            except Exception as e:
                raise ValueError(f"Cannot load image from bytes: {e}")
        elif isinstance(data, (str, Path)):
            try:
                with Image.open(data) as image:
                    image.load()
                    return image.copy()
            except Exception as e:
                raise ValueError(f"Cannot load image from path '{data}': {e}")
        else:
            raise ValueError(f"Unsupported image data type: {type(data)}")

    @staticmethod
    def save_image(image: Image.Image, path: Union[str, Path], format: str = 'PNG', **kwargs) -> None:
        """
        Save image to file.

        Args:
            image: Image to save
            path: Output file path
            format: Image format (PNG, TGA, etc.)
            **kwargs: Additional save parameters
        """
        save_kwargs = {}

        if format.upper() == 'PNG':
            save_kwargs['compress_level'] = kwargs.pop('compress_level', 6)

        save_kwargs.update(kwargs)

        image.save(path, format=format, **save_kwargs)

    @staticmethod
    def normalize_mode(image: Image.Image, mode: Optional[str] = None) -> Image.Image:
        """
        Bring an image into one of the supported pixel formats.

        Images in an unsupported mode (palette, CMYK, ...) become RGBA. When
        ``mode`` is given the image is converted to exactly that mode.
        """
        if image.mode not in SUPPORTED_MODES:
            image = image.convert('RGBA')
        if mode is not None and image.mode != mode:
            image = image.convert(mode)
        return image

    @staticmethod
    def new_buffer(mode: str, width: int, height: int) -> Image.Image:
        """Allocate a zero-filled pixel buffer."""
        return Image.new(mode, (width, height))

    @staticmethod
    def wrap_indices(offsets: np.ndarray, length: int, wrap: WrapMode) -> np.ndarray:
        """
        Map output offsets (relative to the source origin) to source indices.

        Args:
            offsets: Output coordinate minus margin, may be negative
            length: Source dimension along this axis
            wrap: Wrap mode deciding how out-of-range offsets are folded back

        Returns:
            Integer array of valid source indices
        """
        wrap = WrapMode(wrap)
        if wrap is WrapMode.CLAMP:
            return np.clip(offsets, 0, length - 1)
        if wrap is WrapMode.REPEAT:
            return np.mod(offsets, length)

        # Mirror: reflect inside even tiles, keep odd tiles as-is.
        tile = np.floor_divide(offsets, length)
        base = np.mod(offsets, length)
        return np.where(tile % 2 == 0, length - 1 - base, base)

    @staticmethod
    def dilate(source: Image.Image, wrap: WrapMode, margin_left: int, margin_top: int,
               out_width: int, out_height: int) -> Image.Image:
        """
        Produce a padded copy of ``source`` filled according to its wrap mode.

        The source origin lands at ``(margin_left, margin_top)`` in the output;
        every other output pixel is taken from the source coordinate chosen by
        :meth:`wrap_indices`.

        Args:
            source: Source image in a supported mode
            wrap: Wrap mode of the entry
            margin_left: Horizontal offset of the source inside the output
            margin_top: Vertical offset of the source inside the output
            out_width: Output width in pixels
            out_height: Output height in pixels

        Returns:
            New image of exactly ``out_width`` x ``out_height`` in the source mode
        """
        pixels = np.asarray(source)
        src_height, src_width = pixels.shape[:2]

        xs = ImageUtils.wrap_indices(np.arange(out_width) - margin_left, src_width, wrap)
        ys = ImageUtils.wrap_indices(np.arange(out_height) - margin_top, src_height, wrap)

        dilated = pixels[ys[:, np.newaxis], xs[np.newaxis, :]]
        return Image.fromarray(np.ascontiguousarray(dilated))

    @staticmethod
    def resize(image: Image.Image, width: int, height: int, filter: MipFilter) -> Image.Image:
        """
        Resample an image with one of the mip filters.

        Resizing to the current size returns an untouched copy. The Gaussian
        filter blurs with a standard deviation of half a destination pixel and
        then box-reduces.
        """
        if image.size == (width, height):
            return image.copy()

        filter = MipFilter(filter)
        if filter is MipFilter.GAUSSIAN:
            ratio = max(image.width / width, image.height / height)
            if ratio > 1:
                image = ImageUtils.gaussian_blur(image, 0.5 * ratio)
            return image.resize((width, height), Image.Resampling.BOX)

        return image.resize((width, height), _RESAMPLE_FILTERS[filter])

    @staticmethod
    def gaussian_blur(image: Image.Image, sigma: float) -> Image.Image:
        """
        Blur an image with a Gaussian of standard deviation ``sigma``.

        Pillow only blurs 8-bit modes; 32-bit ``I`` and ``F`` images are
        convolved on their numpy array with a separable kernel, edges clamped.
        """
        if image.mode not in ('I', 'F'):
            return image.filter(ImageFilter.GaussianBlur(sigma))

        radius = max(1, int(np.ceil(3 * sigma)))
        taps = np.arange(-radius, radius + 1, dtype=np.float64)
        kernel = np.exp(-0.5 * (taps / sigma) ** 2)
        kernel /= kernel.sum()

        pixels = np.asarray(image, dtype=np.float64)
        for axis in (0, 1):
            pad = [(0, 0), (0, 0)]
            pad[axis] = (radius, radius)
            padded = np.pad(pixels, pad, mode='edge')
            length = pixels.shape[axis]
            pixels = sum(
                weight * np.take(padded, np.arange(offset, offset + length), axis=axis)
                for offset, weight in enumerate(kernel)
            )

        if image.mode == 'I':
            return Image.fromarray(np.rint(pixels).astype(np.int32))
        return Image.fromarray(pixels.astype(np.float32))

    @staticmethod
    def blit(target: Image.Image, source: Image.Image, x: int, y: int) -> None:
        """
        Overwrite-copy ``source`` into ``target`` with its top-left at (x, y).

        No blending is performed and the target never grows; callers guarantee
        the source fits at the given offset.
        """
        target.paste(source, (x, y))

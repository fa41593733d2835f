"""Pillow-backed rendition renderer."""

from pathlib import Path

from PIL import Image, ImageColor, ImageOps

from thumbd.domain.exceptions import RenderError
from thumbd.domain.keys import DEFAULT_FORMAT
from thumbd.domain.models import ThumbnailDescription
from thumbd.infrastructure.storage import ScratchArea
from thumbd.shared.logging import get_logger

logger = get_logger(__name__)

# formats Pillow cannot guess from the extension alone
_FORMAT_ALIASES = {
    'jpg': 'JPEG',
    'jpeg': 'JPEG',
    'tif': 'TIFF',
}

_OPAQUE_FORMATS = {'JPEG', 'BMP'}


def pillow_format(extension: str) -> str:
    """Pillow format name for a rendition extension, e.g. 'jpg' -> 'JPEG'."""
    extension = extension.lower().lstrip('.')
    if extension in _FORMAT_ALIASES:
        return _FORMAT_ALIASES[extension]

    registered = Image.registered_extensions()
    fmt = registered.get(f".{extension}")
    if fmt is None:
        raise RenderError(f"Unsupported output format: {extension}")
    return fmt


def flatten(img: Image.Image, background: tuple) -> Image.Image:
    """RGB copy of `img` with any transparency composited onto `background`."""
    if img.mode in ('RGBA', 'LA', 'P'):
        img = img.convert('RGBA')
        flattened = Image.new('RGB', img.size, background[:3])
        flattened.paste(img, mask=img.split()[-1])
        return flattened

    if img.mode != 'RGB':
        return img.convert('RGB')
    return img


class PillowRenderer:
    """
    Produces renditions with Pillow.
    Implements IRenderer protocol.

    Strategies:
        bounded: fit inside width x height, keeping aspect ratio
        fill:    cover width x height, then centre-crop to it
        strict:  resize to exactly width x height
        matted:  bounded, then centred on a width x height background
    """

    def __init__(self, scratch: ScratchArea, default_quality: int = 85):
        self.scratch = scratch
        self.default_quality = default_quality
        self._logger = get_logger(__name__)

    def render(self, description: ThumbnailDescription, source_path: Path) -> Path:
        """
        Render `source_path` according to `description`.

        Returns:
            Path of the rendered scratch file, owned by the caller

        Raises:
            RenderError: If the source cannot be read or the rendition written
        """
        extension = description.format or DEFAULT_FORMAT
        fmt = pillow_format(extension)
        output_path = self.scratch.new_path(extension)

        try:
            with Image.open(source_path) as source:
                img = ImageOps.exif_transpose(source)
                img = self._apply_strategy(img, description)
                img = self._prepare_mode(img, fmt, description.background)
                img.save(output_path, format=fmt, **self._save_options(fmt, description))
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            self.scratch.remove(output_path)
            raise RenderError(
                f"Failed to render {description.width}x{description.height} "
                f"{description.strategy} from {source_path}: {e}"
            ) from e
        except Exception:
            self.scratch.remove(output_path)
            raise

        self._logger.debug(
            f"Rendered {source_path} -> {output_path} "
            f"({description.strategy} {description.width}x{description.height})"
        )
        return output_path

    def _apply_strategy(self, img: Image.Image, description: ThumbnailDescription) -> Image.Image:
        size = (description.width, description.height)
        resample = Image.Resampling.LANCZOS

        if description.strategy == 'fill':
            return ImageOps.fit(img, size, method=resample)
        if description.strategy == 'strict':
            return img.resize(size, resample)
        if description.strategy == 'matted':
            background = ImageColor.getrgb(description.background)
            return ImageOps.pad(flatten(img, background), size, method=resample, color=background)
        return ImageOps.contain(img, size, method=resample)

    @staticmethod
    def _prepare_mode(img: Image.Image, fmt: str, background: str) -> Image.Image:
        """Flatten transparency onto the background for formats without alpha."""
        if fmt not in _OPAQUE_FORMATS:
            return img
        return flatten(img, ImageColor.getrgb(background))

    def _save_options(self, fmt: str, description: ThumbnailDescription) -> dict:
        quality = description.quality or self.default_quality
        if fmt == 'JPEG':
            return {'quality': quality, 'optimize': True}
        if fmt == 'WEBP':
            return {'quality': quality}
        if fmt == 'PNG':
            return {'optimize': True}
        return {}

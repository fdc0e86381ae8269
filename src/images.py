"""Responsive images: resized variants on disk and the markup pointing at them."""

import hashlib
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from markupsafe import escape
from PIL import Image

from tools import Benchmark

_log = logging.getLogger(__name__)

PIL_FORMATS = {"jpeg": "JPEG", "webp": "WEBP", "avif": "AVIF", "png": "PNG"}
MIME_TYPES = {"svg": "image/svg+xml"}


@dataclass(frozen=True)
class ImageVariant:
    format: str
    width: Optional[int]
    height: Optional[int]
    url: str
    path: Path

    @property
    def mime_type(self) -> str:
        return MIME_TYPES.get(self.format, f"image/{self.format}")

    @property
    def srcset_entry(self) -> str:
        return f"{self.url} {self.width}w" if self.width else self.url


class ImageProcessor:
    """Generates image variants into the site output directory.

    Results are memoized, so an image used on several pages is only
    processed once per build.
    """

    def __init__(
        self,
        output_dir: str | Path,
        url_path: str = "/img/",
        formats: Iterable[str] = ("webp", "jpeg"),
    ):
        """
        Initialize the processor.

        Args:
            output_dir: Directory receiving the generated files
            url_path: URL prefix of that directory on the site
            formats: Output formats, the last one is the <img> fallback
        """
        self.output_dir = Path(output_dir)
        self.url_path = url_path if url_path.endswith("/") else url_path + "/"
        self.formats = tuple(formats)
        self._cache: dict[tuple, dict[str, list[ImageVariant]]] = {}

    def _content_hash(self, src: Path) -> str:
        return hashlib.sha256(src.read_bytes()).hexdigest()[:10]

    def process(
        self,
        src: str | Path,
        widths: Optional[Iterable[Optional[int]]] = None,
        formats: Optional[Iterable[str]] = None,
    ) -> dict[str, list[ImageVariant]]:
        """
        Generate the variants of a source image.

        Args:
            src: Source image path
            widths: Target widths, None keeps the original width
            formats: Output formats, defaults to the processor formats

        Returns:
            Mapping of format to its variants, sorted by width
        """
        src = Path(src)
        widths = tuple(widths or (None,))
        formats = tuple(formats or self.formats)
        key = (str(src), widths, formats)
        if key in self._cache:
            return self._cache[key]

        with Benchmark(f"image > {src}", _log):
            if src.suffix.lower() == ".svg":
                metadata = {"svg": [self._copy_svg(src)]}
            else:
                metadata = self._resize(src, widths, formats)

        self._cache[key] = metadata
        return metadata

    def _copy_svg(self, src: Path) -> ImageVariant:
        name = f"{self._content_hash(src)}.svg"
        target = self.output_dir / name
        if not target.exists():
            self.output_dir.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(src, target)
        return ImageVariant("svg", None, None, self.url_path + name, target)

    def _resize(self, src: Path, widths, formats) -> dict[str, list[ImageVariant]]:
        digest = self._content_hash(src)
        metadata: dict[str, list[ImageVariant]] = {}

        with Image.open(src) as original:
            original.load()
            targets = sorted({min(w or original.width, original.width) for w in widths})

            for fmt in formats:
                if fmt not in PIL_FORMATS:
                    raise ValueError(f"Unsupported image format: {fmt}")
                variants = []
                for width in targets:
                    height = round(original.height * width / original.width)
                    name = f"{digest}-{width}.{fmt}"
                    target = self.output_dir / name
                    if not target.exists():
                        self.output_dir.mkdir(parents=True, exist_ok=True)
                        image = original.resize((width, height)) if width != original.width else original
                        if fmt == "jpeg" and image.mode not in ("RGB", "L"):
                            image = image.convert("RGB")
                        image.save(target, PIL_FORMATS[fmt])
                        _log.debug(f"[images] Wrote {target}")
                    variants.append(ImageVariant(fmt, width, height, self.url_path + name, target))
                metadata[fmt] = variants

        return metadata


def _attributes(attributes: dict) -> str:
    return " ".join(f'{name}="{escape(value)}"' for name, value in attributes.items() if value is not None)


def generate_html(metadata: dict[str, list[ImageVariant]], attributes: dict) -> str:
    """
    Build the markup for processed image variants.

    A single format gives an <img>; several formats give a <picture> with one
    <source> per format and an <img> on the last format.

    Args:
        metadata: Result of ImageProcessor.process()
        attributes: HTML attributes, ``alt`` is mandatory (may be empty)

    Returns:
        HTML markup

    Raises:
        ValueError: If ``alt`` is missing
    """
    if attributes.get("alt") is None:
        raise ValueError("Missing alt attribute on image (use alt=\"\" for decorative images)")

    formats = list(metadata)
    fallback = metadata[formats[-1]]
    smallest, largest = fallback[0], fallback[-1]
    sizes = attributes.get("sizes") if len(fallback) > 1 or len(formats) > 1 else None

    img_attributes = {
        "alt": attributes["alt"],
        "src": smallest.url,
        "width": largest.width,
        "height": largest.height,
    }
    if len(fallback) > 1:
        img_attributes["srcset"] = ", ".join(v.srcset_entry for v in fallback)
        img_attributes["sizes"] = sizes
    img_attributes.update({k: v for k, v in attributes.items() if k not in ("alt", "sizes")})
    img = f"<img {_attributes(img_attributes)}>"

    if len(formats) == 1:
        return img

    sources = [
        f"<source {_attributes({'type': variants[0].mime_type, 'srcset': ', '.join(v.srcset_entry for v in variants), 'sizes': sizes})}>"
        for fmt, variants in metadata.items()
        if fmt != formats[-1]
    ]
    return f"<picture>{''.join(sources)}{img}</picture>"

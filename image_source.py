# image_source.py - PicViewer Image Listing and Reading
"""
Lists displayable images in a folder and reads them into self-describing
payloads. Pillow-readable formats are transcoded to one canonical output
format, Fuji RAF files return their embedded JPEG preview and anything
Pillow rejects is passed through as raw bytes.
"""

import base64
import io
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List

import magic
import rawpy
from PIL import Image, ImageOps, UnidentifiedImageError

from errors import DecodeFailed, ListFailed, ReadFailed

logger = logging.getLogger("picviewer.image_source")

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp", ".raf"})

EXTENSION_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".webp": "image/webp",
}

OUTPUT_MIME_TYPES = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
}


@dataclass(frozen=True)
class ImagePayload:
    """Encoded image bytes plus their MIME type"""
    mime_type: str
    data: bytes

    def to_data_url(self) -> str:
        """Encode as a data: URL"""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"

    def __len__(self) -> int:
        return len(self.data)


def is_image_file(name: str) -> bool:
    """Check extension against the allow-list (case-insensitive)"""
    return os.path.splitext(name)[1].lower() in IMAGE_EXTENSIONS


def list_images(folder_path: str) -> List[str]:
    """List images directly inside folder_path in plain sorted order.

    Subfolders are not searched. Ordering is code-point order, so
    file10.jpg sorts before file2.jpg.
    """
    try:
        with os.scandir(folder_path) as entries:
            image_files = [
                os.path.join(folder_path, entry.name)
                for entry in entries
                if is_image_file(entry.name) and entry.is_file()
            ]
    except OSError as e:
        raise ListFailed(f"failed to list images in {folder_path}: {e}", folder_path) from e

    image_files.sort()
    return image_files


def read_image(file_path: str, output_format: str = "PNG") -> ImagePayload:
    """Read one image file into an ImagePayload"""
    ext = Path(file_path).suffix.lower()

    if ext == ".raf":
        return _read_raf_preview(file_path)

    try:
        data = Path(file_path).read_bytes()
    except OSError as e:
        raise ReadFailed(f"failed to open file {file_path}: {e}", file_path) from e

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            format_name = img.format
            img = _fix_orientation(img)
            img = _convert_mode(img, output_format)
            logger.debug(f"Decoded format: {format_name} for file {file_path}")
            return _encode(img, output_format, file_path)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as decode_error:
        # Pillow could not decode it; hand the original bytes through
        mime_type = _guess_mime_type(ext, data, file_path)
        logger.debug(f"Passing through {file_path} as {mime_type}: {decode_error}")
        return ImagePayload(mime_type=mime_type, data=data)


def _read_raf_preview(file_path: str) -> ImagePayload:
    """Extract the embedded JPEG preview from a Fuji RAF file.

    An unreadable file is ReadFailed; any other failure inside the raw
    extractor is reported as DecodeFailed.
    """
    try:
        with rawpy.imread(file_path) as raw:
            thumb = raw.extract_thumb()
    except (rawpy.LibRawIOError, OSError) as e:
        raise ReadFailed(f"failed to open RAF file {file_path}: {e}", file_path) from e
    except Exception as e:
        logger.error(f"Raw extractor failed while decoding RAF file {file_path}: {e}")
        raise DecodeFailed(f"failed to decode RAF file {file_path}: {e}", file_path) from e

    if thumb.format != rawpy.ThumbFormat.JPEG or not thumb.data:
        raise DecodeFailed(f"failed to extract JPEG from RAF file {file_path}", file_path)

    return ImagePayload(mime_type="image/jpeg", data=bytes(thumb.data))


def _fix_orientation(img: Image.Image) -> Image.Image:
    """Apply EXIF orientation"""
    try:
        return ImageOps.exif_transpose(img)
    except Exception as e:
        logger.debug(f"Could not fix orientation: {e}")
        return img


def _convert_mode(img: Image.Image, output_format: str) -> Image.Image:
    """Convert image mode to something the output format can store"""
    if output_format == "JPEG":
        if img.mode in ("RGBA", "LA", "P"):
            background = Image.new("RGB", img.size, (255, 255, 255))
            if img.mode != "RGBA":
                img = img.convert("RGBA")
            background.paste(img, mask=img.split()[-1])
            return background
        if img.mode != "RGB":
            return img.convert("RGB")
        return img

    if img.mode not in ("RGB", "RGBA", "L", "LA"):
        if "transparency" in img.info or img.mode == "PA":
            return img.convert("RGBA")
        return img.convert("RGB")
    return img


def _encode(img: Image.Image, output_format: str, file_path: str) -> ImagePayload:
    """Encode a decoded image into the canonical output format"""
    buffer = io.BytesIO()
    try:
        img.save(buffer, format=output_format)
    except (OSError, ValueError, KeyError) as e:
        raise DecodeFailed(
            f"failed to encode image {file_path} to {output_format}: {e}", file_path
        ) from e
    return ImagePayload(mime_type=OUTPUT_MIME_TYPES[output_format], data=buffer.getvalue())


def _guess_mime_type(ext: str, data: bytes, file_path: str) -> str:
    """Best-guess MIME type for undecodable data"""
    mime_type = EXTENSION_MIME_TYPES.get(ext)
    if mime_type:
        return mime_type

    logger.warning(f"Unsupported format '{ext}' encountered during fallback for file {file_path}")
    try:
        return magic.from_buffer(data[:2048], mime=True) or "application/octet-stream"
    except magic.MagicException as e:
        logger.debug(f"MIME sniffing failed for {file_path}: {e}")
        return "application/octet-stream"

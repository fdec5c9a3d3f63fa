"""
Default resize engine backed by Pillow.

Resized variants are written next to the original as ``<name>-<W>x<H>.<ext>``
and reused on later calls, so identical requests always produce the same url.
"""

import logging
import os
from typing import NamedTuple, Optional

from PIL import Image

from responsive_images.conf import get_setting
from responsive_images.exceptions import InvalidFormat, InvalidInput, NotFound, ResizeFailed
from responsive_images.image_utils import (
    get_attachment_info_by_path,
    get_attachment_path_by_url,
    get_attachment_url_by_path,
)

logger = logging.getLogger(__name__)


class ResizeResult(NamedTuple):
    url: str
    width: int
    height: int


def constrain_dimensions(orig_w, orig_h, max_w=0, max_h=0):
    """Scale (orig_w, orig_h) down to fit inside the box, never enlarging."""
    if not max_w and not max_h:
        return orig_w, orig_h

    width_ratio = max_w / orig_w if max_w and orig_w > max_w else 1.0
    height_ratio = max_h / orig_h if max_h and orig_h > max_h else 1.0
    ratio = min(width_ratio, height_ratio)

    return max(1, int(round(orig_w * ratio))), max(1, int(round(orig_h * ratio)))


def resize_dimensions(orig_w, orig_h, dest_w, dest_h=None, crop=False, upscale=False):
    """
    Compute the output size and the source box to read from.

    Returns:
        tuple: (dst_w, dst_h, (left, top, right, bottom)) or None when the original
        should be used as is.
    """
    dest_w = dest_w or 0
    dest_h = dest_h or 0
    if orig_w <= 0 or orig_h <= 0 or (dest_w <= 0 and dest_h <= 0):
        return None

    if crop:
        aspect_ratio = orig_w / orig_h
        if upscale:
            new_w, new_h = dest_w, dest_h
        else:
            new_w, new_h = min(dest_w, orig_w), min(dest_h, orig_h)

        if not new_w:
            new_w = int(round(new_h * aspect_ratio))
        if not new_h:
            new_h = int(round(new_w / aspect_ratio))

        size_ratio = max(new_w / orig_w, new_h / orig_h)
        crop_w = int(round(new_w / size_ratio))
        crop_h = int(round(new_h / size_ratio))
        left = (orig_w - crop_w) // 2
        top = (orig_h - crop_h) // 2
        box = (left, top, left + crop_w, top + crop_h)
    else:
        new_w, new_h = constrain_dimensions(orig_w, orig_h, dest_w, dest_h)
        box = (0, 0, orig_w, orig_h)

    if not (crop and upscale):
        # The result would be the same size or larger than the original.
        if new_w >= orig_w and new_h >= orig_h and dest_w != orig_w and dest_h != orig_h:
            return None

    return new_w, new_h, box


def _variant_name(name, width, height):
    root, ext = os.path.splitext(name)
    return f"{root}-{width}x{height}{ext}"


def _save_variant(path, dest_path, size, box):
    try:
        with Image.open(path) as img:
            resized = img.resize(size, Image.Resampling.LANCZOS, box=box)
            save_kwargs = {}
            if os.path.splitext(dest_path)[1].lower() in (".jpg", ".jpeg"):
                if resized.mode not in ("RGB", "L"):
                    resized = resized.convert("RGB")
                save_kwargs = {"quality": get_setting("JPEG_QUALITY"), "optimize": True, "progressive": True}
            resized.save(dest_path, **save_kwargs)
    except (OSError, ValueError) as e:
        raise ResizeFailed(f"Unable to write resized image {dest_path}: {e}") from e


def resize(url, width, height: Optional[int] = None, crop=True, upscale=True) -> ResizeResult:
    """
    Resize a local image and return the url and dimensions of the result.

    Raises:
        InvalidInput: If url or width is missing
        NotLocal: If url is outside of the upload namespace
        ResizeFailed: If the original can't be read or the requested crop is impossible
    """
    if not url:
        raise InvalidInput("url parameter is required")
    if not width:
        raise InvalidInput("width parameter is required")

    path = get_attachment_path_by_url(url)
    try:
        orig = get_attachment_info_by_path(path)
    except (NotFound, InvalidFormat) as e:
        raise ResizeFailed(str(e)) from e
    orig_w, orig_h = orig["width"], orig["height"]

    dims = resize_dimensions(orig_w, orig_h, width, height, crop, upscale)
    if dims is None and crop and not upscale:
        raise ResizeFailed(f"Unable to crop {url} to {width}x{height}: original is {orig_w}x{orig_h}")
    if dims is None or dims[:2] == (orig_w, orig_h):
        return ResizeResult(url, orig_w, orig_h)

    dst_w, dst_h, box = dims
    if crop and not upscale and (dst_w < width or (height and dst_h < height)):
        raise ResizeFailed(f"Unable to crop {url} to {width}x{height}: original is {orig_w}x{orig_h}")

    dest_path = _variant_name(path, dst_w, dst_h)
    dest_url = get_attachment_url_by_path(dest_path, url)

    if os.path.exists(dest_path):
        logger.debug(f"Reusing resized image {dest_path}")
    else:
        _save_variant(path, dest_path, (dst_w, dst_h), box)
        logger.info(f"Resized {path} to {dst_w}x{dst_h}")

    return ResizeResult(dest_url, dst_w, dst_h)

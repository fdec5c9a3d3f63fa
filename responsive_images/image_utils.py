"""
URL, path and dimension utilities for responsive images.

Resolves attachment URLs inside the managed upload namespace to local paths,
probes image dimensions with Pillow and tells raster images apart from SVGs.
"""

import os
from abc import ABC, abstractmethod
from typing import Optional, Tuple
from urllib.parse import urlparse

from django.utils.html import escape
from PIL import Image, UnidentifiedImageError

from responsive_images.conf import DEFAULT_IMAGE_SIZES, get_setting
from responsive_images.exceptions import InvalidFormat, InvalidInput, NotFound, NotLocal

HTTP_SCHEME = "http://"
HTTPS_SCHEME = "https://"
RELATIVE_SCHEME = "//"  # The protocol-relative URL


def is_svg_by_attachment_url(url):
    """Check the file extension of the URL path, case-insensitively."""
    if not url:
        return False
    path = urlparse(url).path
    return os.path.splitext(path)[1].lower() == ".svg"


def is_svg_by_attachment_id(attachment_id):
    from attachments.models import SVG_MIME_TYPE, Attachment

    if not attachment_id or attachment_id <= 0:
        return False
    mime_type = Attachment.objects.filter(pk=attachment_id).values_list("mime_type", flat=True).first()
    return mime_type == SVG_MIME_TYPE


def _match_upload_url_scheme(url, upload_url):
    # Images don't resolve when the schemes differ, so follow the scheme of the requested url.
    if url.startswith(HTTPS_SCHEME):
        return upload_url.replace(HTTP_SCHEME, HTTPS_SCHEME)
    if url.startswith(HTTP_SCHEME):
        return upload_url.replace(HTTPS_SCHEME, HTTP_SCHEME)
    if url.startswith(RELATIVE_SCHEME):
        return upload_url.replace(HTTP_SCHEME, RELATIVE_SCHEME).replace(HTTPS_SCHEME, RELATIVE_SCHEME)
    return upload_url


def _is_inside(path, directory):
    real_dir = os.path.realpath(directory)
    real_path = os.path.realpath(path)
    return real_path == real_dir or real_path.startswith(real_dir.rstrip(os.sep) + os.sep)


def get_upload_location():
    """Return the (base url, base dir) pair of the managed upload namespace."""
    return get_setting("UPLOAD_URL"), get_setting("UPLOAD_DIR")


def get_attachment_path_by_url(url):
    """
    Retrieve the local path of an uploaded file by its url.

    Raises:
        InvalidInput: If url is empty
        NotLocal: If url does not belong to the upload namespace
    """
    if not url:
        raise InvalidInput("Empty url")

    upload_url, upload_dir = get_upload_location()
    upload_url = _match_upload_url_scheme(url, upload_url)

    if not upload_url or upload_url not in url:
        raise NotLocal(f"Url is not local: {url}")

    rel_path = url.split(upload_url, 1)[1]
    path = os.path.normpath(os.path.join(upload_dir, rel_path.lstrip("/")))
    if not _is_inside(path, upload_dir):
        raise NotLocal(f"Url points outside of the upload dir: {url}")
    return path


def get_attachment_url_by_path(path, like_url=None):
    """
    Inverse of get_attachment_path_by_url for files inside the upload dir.

    The scheme of the returned url follows ``like_url`` when given.
    """
    upload_url, upload_dir = get_upload_location()
    if like_url:
        upload_url = _match_upload_url_scheme(like_url, upload_url)
    if not _is_inside(path, upload_dir):
        raise NotLocal(f"Path is outside of the upload dir: {path}")
    rel_path = os.path.relpath(path, upload_dir)
    return upload_url.rstrip("/") + "/" + rel_path.replace(os.sep, "/")


def get_attachment_info_by_path(path):
    """
    Probe the pixel dimensions of an image file.

    Returns:
        dict: {"width": int, "height": int}

    Raises:
        NotFound: If the file does not exist
        InvalidFormat: If the file is not a readable image or has a zero dimension
    """
    if not os.path.exists(path):
        raise NotFound(f"File not exists: {path}")

    try:
        with Image.open(path) as img:
            width, height = img.size
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidFormat(f"Can't get image size: {e}") from e

    if not width or not height:
        raise InvalidFormat(f"Unexpected image size: [width:{width}, height:{height}]")

    return {"width": int(width), "height": int(height)}


class ImageSource(ABC):
    """
    An image referenced by url, either raster or vector.

    Vector images have no responsive variants and no probe-able dimensions;
    consumers ask ``is_vector`` instead of inspecting the url themselves.
    """

    is_vector = False

    def __init__(self, url):
        self.url = url

    def __repr__(self):
        return f"{type(self).__name__}({self.url!r})"

    @classmethod
    def from_url(cls, url) -> "ImageSource":
        return VectorImage(url) if is_svg_by_attachment_url(url) else RasterImage(url)

    @abstractmethod
    def resolve_dimensions(self, width: Optional[int] = None, height: Optional[int] = None) -> Tuple:
        pass


class RasterImage(ImageSource):
    def resolve_dimensions(self, width=None, height=None):
        """Explicit values win; missing ones are read from the local file."""
        if width and height:
            return width, height

        info = get_attachment_info_by_path(get_attachment_path_by_url(self.url))
        return width or info["width"], height or info["height"]


class VectorImage(ImageSource):
    is_vector = True

    def resolve_dimensions(self, width=None, height=None):
        return width or None, height or None


def get_all_inited_image_sizes():
    """
    Collect every registered image size: the defaults first, then project sizes.

    Returns:
        dict: name -> {"width": int, "height": int, "crop": int, "name": str}
    """
    additional_sizes = get_setting("IMAGE_SIZES") or {}
    all_names = list(DEFAULT_IMAGE_SIZES) + [name for name in additional_sizes if name not in DEFAULT_IMAGE_SIZES]

    sizes = {}
    for size_name in all_names:
        size_data = additional_sizes.get(size_name) or DEFAULT_IMAGE_SIZES[size_name]
        sizes[size_name] = {
            "width": int(size_data.get("width") or 0),
            "height": int(size_data.get("height") or 0),
            "crop": int(bool(size_data.get("crop"))),
            "name": size_name,
        }
    return sizes


def get_all_inited_image_sizes_formatted():
    """Registered sizes as 'medium - 300 x 300 (crop = 0)' strings."""
    return {
        size_key: "%s - %d x %d (crop = %s)"
        % (escape(size_data["name"]), size_data["width"], size_data["height"], size_data["crop"])
        for size_key, size_data in get_all_inited_image_sizes().items()
    }

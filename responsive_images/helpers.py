"""
Responsive image helpers.

Builds <img> and <picture> markup for an image url, an attachment or a post
thumbnail from a mapping of media query -> width in pixels, e.g.::

    img(url, {"(max-width: 600px)": 400, "": 800}, pixel_ratio_2x=True, aspect_ratio=16 / 9)

The last, unlabeled entry is the default width. These helpers never raise:
any failure is logged and results in an empty string so page rendering
is never broken by a single image.
"""

import logging
import math
from collections.abc import Mapping
from typing import Iterable, Iterator, Optional, Tuple, Union

from django.utils.html import strip_tags

from attachments.models import Attachment, Post
from responsive_images.attributes import AttrsFilter
from responsive_images.conf import get_setting
from responsive_images.decorators import fail_silently
from responsive_images.elements import Img, Picture, Size, Source, SrcsetItem
from responsive_images.exceptions import ResponsiveImageError
from responsive_images.image_utils import RELATIVE_SCHEME
from responsive_images.resizer import Resizer

logger = logging.getLogger(__name__)

MediaWidths = Union[Mapping, Iterable[Tuple[Optional[str], int]]]


def iter_media_widths(mq_with_width: Optional[MediaWidths]) -> Iterator[Tuple[str, int]]:
    """Yield (media query, width) pairs in input order; non-string or empty keys mean no media condition."""
    if not mq_with_width:
        return
    items = mq_with_width.items() if isinstance(mq_with_width, Mapping) else mq_with_width
    for media_query, width in items:
        media_query = media_query if isinstance(media_query, str) and media_query else ""
        yield media_query, int(width)


def height_for_aspect_ratio(width, aspect_ratio):
    # Round half up.
    return int(math.floor(width / aspect_ratio + 0.5))


def _resize_to(resizer, width, aspect_ratio):
    resizer.set_width(width)
    if aspect_ratio:
        resizer.set_height(height_for_aspect_ratio(width, aspect_ratio))
    return resizer


def _get_post(post_id):
    if not post_id:
        return None
    return Post.objects.select_related("thumbnail").filter(pk=post_id).first()


def _get_attachment_url(attachment_id):
    attachment = Attachment.objects.filter(pk=attachment_id).first() if attachment_id else None
    return attachment.url if attachment else ""


@fail_silently
def picture(
    origin_url,
    mq_with_width: Optional[MediaWidths] = None,
    pixel_ratio_2x=False,
    aspect_ratio=None,
    img_alt="",
    lazy=False,
    attrs=None,
    picture_attrs_filter: Optional[AttrsFilter] = None,
    img_attrs_filter: Optional[AttrsFilter] = None,
    source_attrs_filter: Optional[AttrsFilter] = None,
):
    """
    Create a <picture> tag from an image url, one <source> per media query.

    Args:
        origin_url: Full-size image url
        mq_with_width: Media query -> width in px, the unlabeled entry being the default width
        pixel_ratio_2x: Whether to add a 2x pixel density candidate to every source
        aspect_ratio: Image aspect ratio (width / height); native ratio when None
        img_alt: Alt text, HTML tags are stripped
        lazy: Whether to lazy load the fallback image
        attrs: Additional <picture> attributes, e.g. {"class": "hero"}

    Returns:
        str: Picture markup, or an empty string on any failure
    """
    img_alt = strip_tags(img_alt or "")
    resizer = Resizer.make_with_url(origin_url)

    sources = []
    for media_query, width in iter_media_widths(mq_with_width):
        srcset = [SrcsetItem.make_with_resize(_resize_to(resizer, width, aspect_ratio), "1x")]
        if pixel_ratio_2x:
            srcset.append(SrcsetItem.make_with_resize(_resize_to(resizer, width * 2, aspect_ratio), "2x"))

        sources.append(Source.make(srcset, [], media_query))

    picture_tag = Picture.make(origin_url, img_alt, None, None, sources, lazy)
    for name, value in (attrs or {}).items():
        picture_tag.set_picture_attr(name, value)

    return picture_tag.render(picture_attrs_filter, img_attrs_filter, source_attrs_filter)


@fail_silently
def img(
    origin_url,
    mq_with_width: Optional[MediaWidths] = None,
    pixel_ratio_2x=False,
    aspect_ratio=None,
    img_alt="",
    lazy=False,
    attrs=None,
    attrs_filter: Optional[AttrsFilter] = None,
):
    """
    Create an <img> tag with srcset and sizes from an image url.

    Every media query contributes a sizes entry and a width-descriptor candidate,
    plus a double-width one with pixel_ratio_2x. Arguments as for picture(),
    except that attrs are set on the <img> itself.
    """
    img_alt = strip_tags(img_alt or "")
    resizer = Resizer.make_with_url(origin_url)

    sizes = []
    srcset = []
    for media_query, width in iter_media_widths(mq_with_width):
        sizes.append(Size.make(media_query, f"{width}px"))

        srcset.append(SrcsetItem.make_with_resize(_resize_to(resizer, width, aspect_ratio), f"{width}w"))
        if pixel_ratio_2x:
            srcset.append(SrcsetItem.make_with_resize(_resize_to(resizer, width * 2, aspect_ratio), f"{width * 2}w"))

    img_tag = Img.make(origin_url, img_alt, None, None, srcset, sizes, lazy)
    for name, value in (attrs or {}).items():
        img_tag.set_attr(name, value)

    return img_tag.render(attrs_filter)


@fail_silently
def picture_for_post(
    post_id, mq_with_width=None, pixel_ratio_2x=False, aspect_ratio=None, lazy=False, attrs=None, **filters
):
    """Picture of the post thumbnail, the post title being the alt text."""
    post = _get_post(post_id)
    if not post or not post.has_thumbnail():
        return ""

    return picture(post.thumbnail_url, mq_with_width, pixel_ratio_2x, aspect_ratio, post.title, lazy, attrs, **filters)


@fail_silently
def picture_by_attachment_id(
    attachment_id,
    mq_with_width=None,
    pixel_ratio_2x=False,
    aspect_ratio=None,
    img_alt="",
    lazy=False,
    attrs=None,
    **filters,
):
    origin_url = _get_attachment_url(attachment_id)
    return picture(origin_url, mq_with_width, pixel_ratio_2x, aspect_ratio, img_alt, lazy, attrs, **filters)


@fail_silently
def img_for_post(
    post_id, mq_with_width=None, pixel_ratio_2x=False, aspect_ratio=None, lazy=False, attrs=None, **filters
):
    """Image of the post thumbnail, the post title being the alt text."""
    post = _get_post(post_id)
    if not post or not post.has_thumbnail():
        return ""

    return img(post.thumbnail_url, mq_with_width, pixel_ratio_2x, aspect_ratio, post.title, lazy, attrs, **filters)


@fail_silently
def img_by_attachment_id(
    attachment_id,
    mq_with_width=None,
    pixel_ratio_2x=False,
    aspect_ratio=None,
    img_alt="",
    lazy=False,
    attrs=None,
    **filters,
):
    origin_url = _get_attachment_url(attachment_id)
    return img(origin_url, mq_with_width, pixel_ratio_2x, aspect_ratio, img_alt, lazy, attrs, **filters)


def resize_img(url, width, height=None, crop=True, upscale=True):
    """
    Resize an image and return the url of the result.

    Protocol-relative urls get a scheme first. Falls back to the original url
    when the image can't be resized.
    """
    if url and url.startswith(RELATIVE_SCHEME):
        url = ("https:" if get_setting("USE_HTTPS") else "http:") + url

    try:
        return Resizer.make_with_url(url, width, height, crop, upscale).resize().url
    except ResponsiveImageError as e:
        logger.warning(f"Unable to resize {url!r}: {str(e)}")
        return url

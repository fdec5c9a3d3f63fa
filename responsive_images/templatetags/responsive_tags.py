import logging

from django import template
from django.utils.safestring import mark_safe

from attachments.models import Attachment, Post
from responsive_images import helpers

logger = logging.getLogger(__name__)

register = template.Library()


def parse_media_widths(value):
    """
    Accept a media query -> width mapping, or a string such as
    "(max-width: 600px) 400; 800" where the last entry has no media query.
    """
    if not isinstance(value, str):
        return value

    pairs = []
    for entry in value.split(";"):
        entry = entry.strip()
        if not entry:
            continue
        media_query, _, width = entry.rpartition(" ")
        pairs.append((media_query.strip(), int(width)))
    return pairs


def parse_aspect_ratio(value):
    """Accept a number or "16/9" / "16:9" strings."""
    if not value:
        return None
    if isinstance(value, str):
        for separator in ("/", ":"):
            if separator in value:
                width, height = value.split(separator, 1)
                return float(width) / float(height)
        return float(value)
    return float(value)


def _resolve_source(source, alt_text):
    """Return (url, alt) for a url, an Attachment or a Post."""
    if isinstance(source, Post):
        return source.thumbnail_url, alt_text or source.title
    if isinstance(source, Attachment):
        return source.url, alt_text or source.alt_text or source.title
    return str(source), alt_text


def _prepare(source, widths, alt_text, aspect_ratio):
    url, alt_text = _resolve_source(source, alt_text)
    if not url:
        return None
    try:
        mq_with_width = parse_media_widths(widths)
        ratio = parse_aspect_ratio(aspect_ratio)
    except (TypeError, ValueError, ZeroDivisionError) as e:
        logger.warning(f"Invalid responsive image arguments {widths!r}, {aspect_ratio!r}: {e}")
        return None
    return url, alt_text, mq_with_width, ratio


@register.simple_tag
def responsive_img(source, widths, alt_text="", css_class="", lazy=True, pixel_ratio_2x=False, aspect_ratio=None):
    if not source:
        return ""

    prepared = _prepare(source, widths, alt_text, aspect_ratio)
    if not prepared:
        return ""
    url, alt_text, mq_with_width, ratio = prepared

    attrs = {"class": css_class} if css_class else None
    html = helpers.img(url, mq_with_width, pixel_ratio_2x, ratio, alt_text, lazy, attrs)

    return mark_safe(html)  # nosec B703 B308 - attribute values are escaped when the tag is rendered


@register.simple_tag
def responsive_picture(source, widths, alt_text="", css_class="", lazy=True, pixel_ratio_2x=False, aspect_ratio=None):
    if not source:
        return ""

    prepared = _prepare(source, widths, alt_text, aspect_ratio)
    if not prepared:
        return ""
    url, alt_text, mq_with_width, ratio = prepared

    attrs = {"class": css_class} if css_class else None
    html = helpers.picture(url, mq_with_width, pixel_ratio_2x, ratio, alt_text, lazy, attrs)

    return mark_safe(html)  # nosec B703 B308 - attribute values are escaped when the tag is rendered


@register.filter
def resized_url(url, size):
    """{{ url|resized_url:"300x200" }} or {{ url|resized_url:"300" }}; the original url when resizing fails."""
    if not url:
        return ""
    try:
        width, _, height = str(size).partition("x")
        return helpers.resize_img(url, int(width), int(height) if height else None)
    except ValueError:
        return url

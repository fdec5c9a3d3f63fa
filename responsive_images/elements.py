"""
Value objects for responsive image markup: srcset candidates, sizes entries,
<source>, <img> and <picture> tags.

Objects validate their input on construction and raise InvalidInput; they never
recover from errors themselves. Rendering takes optional attribute filters that
are applied to a copy of the attributes right before serialization.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from responsive_images.attributes import Attributes, AttrsFilter, apply_filter, render_tag
from responsive_images.exceptions import InvalidInput
from responsive_images.image_utils import ImageSource

# Attributes computed from the constructor arguments, never set directly.
COMPUTED_ATTRS = ("src", "srcset", "sizes")

IMG_SKIP_EMPTY = ("srcset", "sizes")
SOURCE_SKIP_EMPTY = ("srcset", "sizes", "media", "type")


@dataclass(frozen=True)
class SrcsetItem:
    """
    One srcset candidate.

    The descriptor is either a width descriptor in pixels (``480w``, note the
    ``w`` unit rather than ``px``) or a pixel density descriptor (``2x``).
    """

    url: str
    descriptor: str
    width: Optional[int] = None
    height: Optional[int] = None

    def __post_init__(self):
        if not self.url:
            raise InvalidInput("Srcset item: empty url")
        if not self.descriptor or not self.descriptor.endswith(("w", "x")):
            raise InvalidInput('Srcset item: descriptor must end with "w" or "x"')

    @classmethod
    def make(cls, url, descriptor, width=None, height=None):
        return cls(url, descriptor, width, height)

    @classmethod
    def make_with_resize(cls, resizer, descriptor):
        """Build the candidate from a resize; vector images keep their original url."""
        image = ImageSource.from_url(resizer.origin_url)
        if image.is_vector:
            return cls(resizer.origin_url, descriptor)

        result = resizer.resize()
        return cls(result.url, descriptor, result.width or None, result.height or None)

    def render(self):
        return f"{self.url} {self.descriptor}" if self.descriptor else self.url

    def __str__(self):
        return self.render()


@dataclass(frozen=True)
class Size:
    media: str
    slot_width: str

    def __post_init__(self):
        if not self.slot_width:
            raise InvalidInput("Size: empty slot width")

    @classmethod
    def make(cls, media, slot_width):
        return cls(media or "", slot_width)

    def render(self):
        return f"{self.media} {self.slot_width}" if self.media else self.slot_width

    def __str__(self):
        return self.render()


def join_srcset(srcset: Iterable[SrcsetItem], unique=False) -> str:
    rendered = [item.render() for item in srcset]
    if unique:
        rendered = list(dict.fromkeys(rendered))
    return ", ".join(value for value in rendered if value)


def join_sizes(sizes: Iterable[Size]) -> str:
    return ", ".join(size.render() for size in sizes)


class Source:
    """A <source> candidate of a <picture>. Duplicate srcset candidates are dropped."""

    def __init__(self, srcset: List[SrcsetItem], sizes: Iterable[Size] = (), media="", type=""):
        srcset = list(srcset or [])
        if not srcset:
            raise InvalidInput("Source: empty srcset")

        self.srcset = srcset
        self.sizes = list(sizes or [])
        self.attrs = Attributes()
        self.attrs["media"] = media or ""
        self.attrs["type"] = type or ""
        self.attrs["sizes"] = join_sizes(self.sizes)

        srcset_value = join_srcset(self.srcset, unique=True)
        if srcset_value:
            self.attrs["srcset"] = srcset_value

    @classmethod
    def make(cls, srcset, sizes=(), media="", type=""):
        return cls(srcset, sizes, media, type)

    def set_attr(self, name, value):
        """Set a source attribute, except 'src', 'srcset' and 'sizes'."""
        if name.lower() in COMPUTED_ATTRS:
            return self
        self.attrs[name] = value
        return self

    def render(self, attrs_filter: Optional[AttrsFilter] = None):
        return render_tag("source", apply_filter(self.attrs, attrs_filter), SOURCE_SKIP_EMPTY)

    def __str__(self):
        return self.render()


class Img:
    """
    A single <img> tag.

    For raster images the width/height attributes come from the explicit values
    or, when missing, from the local file. SVG images get a ``data-is_svg`` marker
    instead of dimensions, srcset and sizes.

    Args:
        src: Image 'src' attribute
        alt: Image 'alt' attribute
        width: Image width, probed from the file when missing
        height: Image height, probed from the file when missing
        srcset: Srcset candidates
        sizes: Sizes entries
        lazy: Adds 'loading="lazy"'

    Raises:
        InvalidInput: If src is empty
        NotLocal, NotFound, InvalidFormat: If dimensions have to be probed and can't be
    """

    def __init__(self, src, alt="", width=None, height=None, srcset=(), sizes=(), lazy=False):
        if not src:
            raise InvalidInput("Img: empty src")

        self.image = ImageSource.from_url(src)
        self.attrs = Attributes()
        self.attrs["src"] = src
        self.attrs["alt"] = alt or ""
        if lazy:
            self.attrs["loading"] = "lazy"

        if self.image.is_vector:
            self.attrs["data-is_svg"] = 1
            return

        self.attrs["sizes"] = join_sizes(sizes or [])
        self.attrs["width"], self.attrs["height"] = self.image.resolve_dimensions(width, height)
        srcset_value = join_srcset(srcset or [])
        if srcset_value:
            self.attrs["srcset"] = srcset_value

    @classmethod
    def make(cls, src, alt="", width=None, height=None, srcset=(), sizes=(), lazy=False):
        return cls(src, alt, width, height, srcset, sizes, lazy)

    @property
    def is_svg(self):
        return self.image.is_vector

    def set_attr(self, name, value):
        """Set an image attribute, except 'src', 'srcset' and 'sizes'. ``PRESENT`` for valueless ones."""
        if name.lower() in COMPUTED_ATTRS:
            return self
        self.attrs[name] = value
        return self

    def render(self, attrs_filter: Optional[AttrsFilter] = None):
        return render_tag("img", apply_filter(self.attrs, attrs_filter), IMG_SKIP_EMPTY)

    def __str__(self):
        return self.render()


class Picture:
    """
    A <picture> tag: ordered <source> candidates plus a fallback <img>.

    Sources are dropped for SVG images, which have no responsive variants.
    """

    def __init__(self, src, alt="", width=None, height=None, sources=(), lazy=False):
        if not src:
            raise InvalidInput("Picture: empty src")

        self.image = ImageSource.from_url(src)
        self.picture_attrs = Attributes()
        self.img_attrs = Attributes()
        self.img_attrs["src"] = src
        self.img_attrs["alt"] = alt or ""
        if lazy:
            self.img_attrs["loading"] = "lazy"

        if self.image.is_vector:
            self.sources = []
            self.img_attrs["data-is_svg"] = 1
        else:
            self.sources = list(sources or [])

        width, height = self.image.resolve_dimensions(width, height)
        if width and height:
            self.img_attrs["width"] = width
            self.img_attrs["height"] = height

    @classmethod
    def make(cls, src, alt="", width=None, height=None, sources=(), lazy=False):
        return cls(src, alt, width, height, sources, lazy)

    @property
    def is_svg(self):
        return self.image.is_vector

    def set_picture_attr(self, name, value):
        self.picture_attrs[name] = value
        return self

    def set_img_attr(self, name, value):
        """Set a fallback image attribute, except 'src', 'srcset' and 'sizes'."""
        if name.lower() in COMPUTED_ATTRS:
            return self
        self.img_attrs[name] = value
        return self

    def render_img(self, img_attrs_filter: Optional[AttrsFilter] = None):
        return render_tag("img", apply_filter(self.img_attrs, img_attrs_filter), IMG_SKIP_EMPTY)

    def render(
        self,
        picture_attrs_filter: Optional[AttrsFilter] = None,
        img_attrs_filter: Optional[AttrsFilter] = None,
        source_attrs_filter: Optional[AttrsFilter] = None,
    ):
        sources = "\n\t".join(source.render(source_attrs_filter) for source in self.sources)
        sources = f"{sources}\n\t" if sources else ""
        img = self.render_img(img_attrs_filter)
        opening_tag = render_tag("picture", apply_filter(self.picture_attrs, picture_attrs_filter))

        return f"{opening_tag}\n\t{sources}{img}\n</picture>"

    def __str__(self):
        return self.render()

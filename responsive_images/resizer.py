from collections.abc import Mapping
from typing import Optional

from django.utils.module_loading import import_string

from responsive_images.conf import get_setting
from responsive_images.exceptions import InvalidInput, ResizeFailed, ResponsiveImageError
from responsive_images.resize_engine import ResizeResult


def get_resize_engine():
    return import_string(get_setting("RESIZE_ENGINE"))


class Resizer:
    """
    A single resize request against the resize engine.

    The same instance is meant to be reused for successive variants of one image
    (1x then 2x, or one width per media query): only width/height change between calls.

    Args:
        origin_url: Full-size image url
        width: Target width in pixels
        height: Optional target height in pixels
        crop: True crops to the exact size around the center, False scales to fit
        upscale: Whether images smaller than the target may be enlarged
    """

    def __init__(
        self,
        origin_url: Optional[str] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
        crop: Optional[bool] = None,
        upscale: Optional[bool] = None,
    ):
        self.origin_url = origin_url
        self.width = width
        self.height = height
        self.crop = get_setting("DEFAULT_CROP") if crop is None else crop
        self.upscale = get_setting("DEFAULT_UPSCALE") if upscale is None else upscale

    def __repr__(self):
        return (
            f"Resizer(origin_url={self.origin_url!r}, width={self.width}, height={self.height}, "
            f"crop={self.crop}, upscale={self.upscale})"
        )

    @classmethod
    def make_with_url(cls, origin_url, width=None, height=None, crop=None, upscale=None):
        return cls(origin_url, width, height, crop, upscale)

    @classmethod
    def make_by_attachment_id(cls, attachment_id, width=None, height=None, crop=None, upscale=None):
        from attachments.models import Attachment

        attachment = Attachment.objects.filter(pk=attachment_id).first()
        return cls(attachment.url if attachment else None, width, height, crop, upscale)

    @classmethod
    def make_by_post_id(cls, post_id, width=None, height=None, crop=None, upscale=None):
        from attachments.models import Post

        post = Post.objects.select_related("thumbnail").filter(pk=post_id).first()
        return cls(post.thumbnail_url if post else None, width, height, crop, upscale)

    def resize(self):
        """
        Run the resize engine for the current request.

        Returns:
            ResizeResult: (url, width, height) of the resized image

        Raises:
            InvalidInput: If origin_url or width is not set
            ResizeFailed: If the engine fails
        """
        if not self.origin_url:
            raise InvalidInput("Resizer: origin_url is empty")
        if not self.width:
            raise InvalidInput("Resizer: width is empty")

        engine = get_resize_engine()
        try:
            result = engine(self.origin_url, self.width, self.height, self.crop, self.upscale)
        except ResponsiveImageError:
            raise
        except Exception as e:
            raise ResizeFailed(f"Resizer: failed to resize {self.origin_url}: {e}") from e

        if not result:
            raise ResizeFailed(f"Resizer: no result for {self.origin_url}")
        return self._to_result(result)

    def _to_result(self, result):
        """Accept a {"url", "width", "height"} mapping or a (url, width, height) sequence."""
        try:
            if isinstance(result, Mapping):
                return ResizeResult(result["url"], result["width"], result["height"])
            if isinstance(result, str):
                raise TypeError("a string is not a resize result")
            return ResizeResult(*result)
        except (KeyError, TypeError) as e:
            raise ResizeFailed(f"Resizer: unexpected engine result {result!r} for {self.origin_url}") from e

    def set_origin_url(self, origin_url):
        self.origin_url = origin_url
        return self

    def set_width(self, width):
        self.width = width
        return self

    def set_height(self, height):
        self.height = height
        return self

    def set_crop(self, crop):
        self.crop = crop
        return self

    def set_upscale(self, upscale):
        self.upscale = upscale
        return self

import mimetypes
import os

from django.db import models
from django.utils import timezone
from django.utils.text import slugify

SVG_MIME_TYPE = "image/svg+xml"


def attachment_upload_to(instance, filename):
    """Generate upload path for attachments grouped by upload year and month."""
    uploaded_at = instance.uploaded_at or timezone.now()
    return f"{uploaded_at:%Y/%m}/{filename}"


class Attachment(models.Model):
    file = models.FileField(upload_to=attachment_upload_to, max_length=255)
    title = models.CharField(max_length=255, blank=True)
    alt_text = models.CharField(max_length=255, blank=True, help_text="Alternative text for the image")
    mime_type = models.CharField(max_length=100, blank=True, help_text="Detected from the file name on save")
    uploaded_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-uploaded_at"]

    def __str__(self):
        return self.title or os.path.basename(self.file.name or "")

    def save(self, *args, **kwargs):
        if self.file and not self.mime_type:
            self.mime_type = mimetypes.guess_type(self.file.name)[0] or ""
        if self.file and not self.title:
            self.title = os.path.splitext(os.path.basename(self.file.name))[0]
        super().save(*args, **kwargs)

    @property
    def url(self):
        """Full-size URL of the attached file, or an empty string."""
        if not self.file:
            return ""
        try:
            return self.file.url
        except ValueError:
            return ""

    @property
    def is_svg(self):
        return self.mime_type == SVG_MIME_TYPE


class Post(models.Model):
    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    thumbnail = models.ForeignKey(
        Attachment,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="posts",
        help_text="Featured image",
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.title)
        super().save(*args, **kwargs)

    def has_thumbnail(self):
        return self.thumbnail is not None and bool(self.thumbnail.file)

    @property
    def thumbnail_url(self):
        return self.thumbnail.url if self.has_thumbnail() else ""

from django.conf import settings

DEFAULT_IMAGE_SIZES = {
    "thumbnail": {"width": 150, "height": 150, "crop": True},
    "medium": {"width": 300, "height": 300, "crop": False},
    "medium_large": {"width": 768, "height": 0, "crop": False},
    "large": {"width": 1024, "height": 1024, "crop": False},
}

DEFAULTS = {
    "UPLOAD_URL": None,  # Falls back to MEDIA_URL
    "UPLOAD_DIR": None,  # Falls back to MEDIA_ROOT
    "RESIZE_ENGINE": "responsive_images.resize_engine.resize",
    "DEFAULT_CROP": True,
    "DEFAULT_UPSCALE": True,
    "JPEG_QUALITY": 82,
    "USE_HTTPS": True,
    "IMAGE_SIZES": {},
}


def get_setting(name):
    """Read a RESPONSIVE_IMAGES setting, falling back to the app defaults."""
    user_settings = getattr(settings, "RESPONSIVE_IMAGES", {}) or {}
    value = user_settings.get(name, DEFAULTS[name])

    if name == "UPLOAD_URL" and not value:
        return settings.MEDIA_URL or ""
    if name == "UPLOAD_DIR" and not value:
        return str(settings.MEDIA_ROOT or "")

    return value

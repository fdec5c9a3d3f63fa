import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class ResponsiveImagesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "responsive_images"
    verbose_name = "Responsive images"

    def ready(self):
        logger.info("Responsive images app ready")

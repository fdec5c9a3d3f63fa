import logging
from functools import wraps

logger = logging.getLogger("responsive_images.helpers")


def fail_silently(func):
    """
    Turn any exception raised while building markup into an empty string.

    The failure is logged with the image reference (first argument) so a broken
    image never breaks page rendering.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            target = args[0] if args else None
            logger.error(f"Error generating markup in {func.__name__}({target!r}): {str(e)}", exc_info=True)
            return ""

    return wrapper

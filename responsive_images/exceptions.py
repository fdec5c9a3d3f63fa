class ResponsiveImageError(Exception):
    pass


class InvalidInput(ResponsiveImageError, ValueError):
    pass


class NotFound(ResponsiveImageError):
    pass


class InvalidFormat(ResponsiveImageError):
    pass


class NotLocal(ResponsiveImageError):
    pass


class ResizeFailed(ResponsiveImageError):
    pass

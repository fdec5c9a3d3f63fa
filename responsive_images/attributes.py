"""
Ordered HTML attribute container and tag serialization.

Attribute names are case-insensitive and stored lowercased. Values are strings,
integers, ``None`` (an explicit "no value" entry that is left out of the
rendered tag) or ``PRESENT`` for valueless boolean attributes such as ``hidden``.
"""

from collections.abc import MutableMapping
from typing import Callable, Iterable, Mapping, Optional

from django.utils.html import escape

from responsive_images.exceptions import InvalidInput


class _Present:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "PRESENT"

    def __reduce__(self):
        return (_Present, ())


PRESENT = _Present()

AttrsFilter = Callable[["Attributes"], Mapping]


class Attributes(MutableMapping):
    def __init__(self, initial: Optional[Mapping] = None, **kwargs):
        self._data = {}
        if initial:
            self.update(initial)
        if kwargs:
            self.update(kwargs)

    @staticmethod
    def _normalize_value(value):
        if value is True:
            return PRESENT
        if value is False:
            return None
        if value is None or value is PRESENT or isinstance(value, (str, int)):
            return value
        raise InvalidInput(f"Unsupported attribute value type: {type(value).__name__}")

    def __getitem__(self, name):
        return self._data[name.lower()]

    def __setitem__(self, name, value):
        if not name or not isinstance(name, str):
            raise InvalidInput("Attribute name must be a non-empty string")
        self._data[name.lower()] = self._normalize_value(value)

    def __delitem__(self, name):
        del self._data[name.lower()]

    def __contains__(self, name):
        return isinstance(name, str) and name.lower() in self._data

    def __iter__(self):
        return iter(self._data)

    def __len__(self):
        return len(self._data)

    def __repr__(self):
        return f"Attributes({self._data!r})"

    def copy(self):
        return Attributes(self._data)


def apply_filter(attrs: Attributes, attrs_filter: Optional[AttrsFilter] = None) -> Attributes:
    """Run an extension callback over a copy of ``attrs``; identity when no callback is given."""
    if attrs_filter is None:
        return attrs
    filtered = attrs_filter(attrs.copy())
    return filtered if isinstance(filtered, Attributes) else Attributes(filtered)


def render_attributes(attrs: Mapping, skip_empty: Iterable[str] = ()) -> str:
    skip_empty = set(skip_empty)
    parts = []
    for name, value in attrs.items():
        if value is None:
            continue
        if value is PRESENT:
            parts.append(escape(name))
            continue
        if name in skip_empty and not value:
            continue
        parts.append(f'{escape(name)}="{escape(value)}"')
    return " ".join(parts)


def render_tag(tag: str, attrs: Mapping, skip_empty: Iterable[str] = ()) -> str:
    content = render_attributes(attrs, skip_empty)
    return f"<{tag} {content}>" if content else f"<{tag}>"

"""Small list helpers used when rewriting argv for the target package manager."""

from typing import TypeVar

T = TypeVar("T")


def remove(items: list[T], value: T) -> list[T]:
    """Remove the first occurrence of value from items in place.

    Returns:
        The same list, for chaining
    """
    if value in items:
        items.remove(value)
    return items


def exclude(items: list[T], value: T) -> list[T]:
    """Return a new list without any occurrence of value. items is untouched."""
    return [item for item in items if item != value]

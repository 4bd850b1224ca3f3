"""
Named business-rule policies.

These encode the "first value wins", "drop anything at or below a
threshold" and "keep one point per bucket" rules that the segmentation,
car info and indexing code rely on.
"""

import math
from typing import Any, Callable, Iterable, List, Optional, Sequence, TypeVar

T = TypeVar('T')


def is_empty(value: Any) -> bool:
    return value is None or value == ''


def first_non_empty(values: Iterable[Any]) -> Optional[str]:
    """
    Return the first non-empty value as a string; later values are ignored.

    Examples:
        >>> first_non_empty([None, '', 'LRW3E7EK1NC000001', 'OTHER'])
        'LRW3E7EK1NC000001'
        >>> first_non_empty([None, ''])
        None
    """
    for value in values:
        if not is_empty(value):
            return str(value)
    return None


def first_matching(items: Iterable[T], predicate: Callable[[T], bool]) -> Optional[T]:
    for item in items:
        if predicate(item):
            return item
    return None


def last_matching(items: Sequence[T], predicate: Callable[[T], bool]) -> Optional[T]:
    for item in reversed(items):
        if predicate(item):
            return item
    return None


def discard_if_below(threshold: float) -> Callable[[Optional[float]], bool]:
    """
    Build a predicate that is True when a value must be discarded.

    A value is discarded when it is missing or at/below ``threshold``.

    Examples:
        >>> too_short = discard_if_below(0.1)
        >>> too_short(0.1)
        True
        >>> too_short(0.11)
        False
    """
    def should_discard(value: Optional[float]) -> bool:
        return value is None or value <= threshold

    return should_discard


def downsample(items: Sequence[T], max_points: int) -> List[T]:
    """
    Fixed-stride subsample keeping the first item of every bucket.

    The bucket size is ``ceil(len(items) / max_points)``; no averaging or
    interpolation is done.

    Examples:
        >>> downsample(list(range(10)), 5)
        [0, 2, 4, 6, 8]
        >>> downsample([1, 2, 3], 5)
        [1, 2, 3]
    """
    if len(items) <= max_points:
        return list(items)

    bucket_size = math.ceil(len(items) / max_points)
    return list(items[::bucket_size])

"""Merging of records fetched from more than one source."""
from typing import Callable, Hashable, Iterable, List, Optional, TypeVar

T = TypeVar("T")


def merge_unique(
    primary: Iterable[T],
    secondary: Iterable[T],
    key_of: Callable[[T], Optional[Hashable]],
) -> List[T]:
    """
    Merge two record lists, de-duplicating by key.

    Primary records come first, in order; a secondary record is appended only
    if its key has not been seen. First seen wins, so the primary source takes
    precedence for identifiers present in both. Records whose key is None are
    always kept.
    """
    merged: List[T] = []
    seen_ids = set()

    for source in (primary, secondary):
        for record in source:
            key = key_of(record)
            if key is not None:
                if key in seen_ids:
                    continue
                seen_ids.add(key)
            merged.append(record)

    return merged

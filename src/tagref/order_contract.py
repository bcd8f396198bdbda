from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def sort_once(
    values: Iterable[T],
    *,
    source: str,
    key: Callable[[T], Any] | None = None,
    reverse: bool = False,
) -> list[T]:
    """Sort a carrier exactly once for user-visible output.

    Every ordering that reaches a listing, a diagnostic or the walk goes
    through here. `source` names the call site and shows up in debug logs.
    """
    items = sorted(values, key=key, reverse=reverse)
    logger.debug("sorted %d items for %s", len(items), source)
    return items

"""Time-limited memoization for documents that rarely change (testimonials, apartment details)."""

from __future__ import annotations

import functools
import os
import threading
import time
from typing import Any, Callable, Dict, NamedTuple, Tuple, TypeVar

T = TypeVar("T")

DEFAULT_TTL = float(os.getenv("CACHE_TTL_SECONDS", "300"))


class _Entry(NamedTuple):
    expires_at: float
    value: Any


_lock = threading.Lock()
_entries: Dict[Tuple, _Entry] = {}


def memoize(prefix: str, ttl: float = DEFAULT_TTL) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Cache results under ``prefix`` for ``ttl`` seconds; exceptions are never cached."""

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            key = (prefix, args, tuple(sorted(kwargs.items())))
            with _lock:
                entry = _entries.get(key)
            if entry is not None and entry.expires_at > time.monotonic():
                return entry.value
            value = func(*args, **kwargs)
            with _lock:
                _entries[key] = _Entry(time.monotonic() + ttl, value)
            return value

        return wrapper

    return decorator


def clear_prefix(prefix: str) -> int:
    """Drop every entry stored under ``prefix``; returns how many were dropped."""
    with _lock:
        stale = [key for key in _entries if key[0] == prefix]
        for key in stale:
            del _entries[key]
    return len(stale)

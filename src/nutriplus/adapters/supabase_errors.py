"""Translation of Supabase client failures into store errors."""

from collections.abc import Iterator
from contextlib import contextmanager

import httpx
from postgrest.exceptions import APIError

from nutriplus.domain.errors import StoreError


@contextmanager
def store_call(action: str) -> Iterator[None]:
    """Raise StoreError when a wrapped Supabase call fails."""
    try:
        yield
    except (APIError, httpx.HTTPError) as exc:
        raise StoreError(f"Failed to {action}") from exc

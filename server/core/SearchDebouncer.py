"""Debouncing for interactive (search-as-you-type) callers."""

import asyncio
from typing import Awaitable, Callable, Generic, TypeVar

T = TypeVar("T")


class SearchDebouncer(Generic[T]):
    """Runs a search only after the input has been stable for a short delay.

    Each submit() waits for the delay. If another submit() arrives in the
    meantime, the earlier one is superseded and returns None without running
    the search, so only the latest query hits the embedding backend.
    """

    def __init__(self, search: Callable[[str], Awaitable[T]], delay_seconds: float = 0.2) -> None:
        self._search = search
        self._delay = delay_seconds
        self._generation = 0

    async def submit(self, query: str) -> T | None:
        """Schedule a search for query.

        Args:
            query (str): The current input.

        Returns:
            T | None: The search result, or None if a newer query superseded this one.
        """
        self._generation += 1
        generation = self._generation
        await asyncio.sleep(self._delay)
        if generation != self._generation:
            return None
        return await self._search(query)

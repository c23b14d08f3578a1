"""
Page registry for the setup wizard.

The registry fixes the order of the pages at construction and resolves pages
by key or by position.
"""

from typing import Iterable, Iterator, Tuple, Dict, Optional

from .page import Page


class PageRegistry:
    """Immutable ordered collection of uniquely keyed pages."""

    def __init__(self, pages: Iterable[Page]):
        """
        Build the registry.

        Args:
            pages: Pages in wizard order

        Raises:
            ValueError: If no pages are given or two pages share a key
        """
        self._pages: Tuple[Page, ...] = tuple(pages)
        if not self._pages:
            raise ValueError("A wizard needs at least one page")

        self._positions: Dict[str, int] = {}
        for position, page in enumerate(self._pages):
            if page.key in self._positions:
                raise ValueError(f"Duplicate page key: {page.key}")
            self._positions[page.key] = position

    def __len__(self) -> int:
        return len(self._pages)

    def __iter__(self) -> Iterator[Page]:
        return iter(self._pages)

    def __contains__(self, key: object) -> bool:
        return key in self._positions

    @property
    def keys(self) -> Tuple[str, ...]:
        return tuple(page.key for page in self._pages)

    def at(self, position: int) -> Page:
        """
        Get the page at a position.

        Raises:
            IndexError: If the position is outside 0..n-1
        """
        if not 0 <= position < len(self._pages):
            raise IndexError(f"Page position out of range: {position}")
        return self._pages[position]

    def get(self, key: str) -> Optional[Page]:
        position = self._positions.get(key)
        return None if position is None else self._pages[position]

    def index_of(self, key: str) -> int:
        """
        Get the position of a page key.

        Raises:
            KeyError: If the key is not registered
        """
        return self._positions[key]

    def __repr__(self) -> str:
        return f"PageRegistry({', '.join(self.keys)})"

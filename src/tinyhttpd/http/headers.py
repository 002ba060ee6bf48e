"""
=============================================================================
REQUEST HEADER LIST
=============================================================================

HTTP header names are case-insensitive, and a header may legally appear
more than once:

    Accept-Encoding: gzip\r\n
    accept-encoding: br\r\n

A plain dict with lowercased keys loses both the original spelling and
the repeated values. Headers keeps the raw (name, value) pairs in the
order they arrived and answers lookups case-insensitively:

    ┌─────────────────────────────┬───────────────────────────────────────┐
    │ Call                        │ Result for the two lines above        │
    ├─────────────────────────────┼───────────────────────────────────────┤
    │ get("ACCEPT-ENCODING")      │ "gzip"            (first match wins)  │
    │ get_all("Accept-Encoding")  │ ["gzip", "br"]    (every match)       │
    │ get("Host", "none")         │ "none"            (default)           │
    └─────────────────────────────┴───────────────────────────────────────┘

=============================================================================
"""

from typing import Iterable, Iterator, List, Optional, Tuple


HeaderPair = Tuple[str, str]


class Headers:
    """Ordered, duplicate-preserving header list with case-insensitive lookup."""

    def __init__(self, pairs: Optional[Iterable[HeaderPair]] = None):
        self._pairs: List[HeaderPair] = list(pairs or [])

    def add(self, name: str, value: str) -> None:
        """Append a header line (never replaces an existing one)."""
        self._pairs.append((name, value))

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Return the value of the FIRST header called `name`.

        Args:
            name: Header name, any case.
            default: Returned when no header matches.
        """
        wanted = name.lower()
        for key, value in self._pairs:
            if key.lower() == wanted:
                return value
        return default

    def get_all(self, name: str) -> List[str]:
        """Return every value of headers called `name`, in arrival order."""
        wanted = name.lower()
        return [value for key, value in self._pairs if key.lower() == wanted]

    def items(self) -> List[HeaderPair]:
        return list(self._pairs)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return self.get(name) is not None

    def __iter__(self) -> Iterator[HeaderPair]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Headers):
            return self._pairs == other._pairs
        return NotImplemented

    def __repr__(self) -> str:
        return f"Headers({self._pairs!r})"

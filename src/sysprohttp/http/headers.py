"""
=============================================================================
HEADER STORE
=============================================================================

Ordered collection of request headers with case-insensitive lookup.

    Wire:                          Store (wire order kept):

    Host: example.com              0  ("Host", "example.com")
    X-Tag: 1                       1  ("X-Tag", "1")
    Accept: */*                    2  ("Accept", "*/*")
    x-tag: 2                       3  ("x-tag", "2")

    lookup("X-TAG")  → "2"         last one on the wire wins
    get_all("x-tag") → ["1", "2"]  every value, wire order

Names keep the case they were received in; only comparisons are folded.
Names are not forced to be unique, so duplicates are resolved at lookup
time with a fixed "last wins" rule.
=============================================================================
"""

from typing import Iterator, List, Optional, Tuple


class HeaderStore:
    """
    Ordered name/value pairs for one request.

    Example:
        headers = HeaderStore()
        headers.insert("Content-Length", "5")
        headers.lookup("content-length")  # "5"
    """

    def __init__(self, pairs: Optional[List[Tuple[str, str]]] = None):
        self._entries: List[Tuple[str, str]] = []
        for name, value in pairs or ():
            self.insert(name, value)

    def insert(self, name: str, value: str) -> None:
        """Append a header. Duplicate names are allowed."""
        self._entries.append((name, value))

    def lookup(self, name: str) -> Optional[str]:
        """
        Case-insensitive lookup.

        Scans from the most recently inserted entry, so when a name repeats
        the value that appeared last on the wire is returned.

        Returns:
            The header value, or None when no header has that name.
        """
        folded = name.lower()
        for entry_name, value in reversed(self._entries):
            if entry_name.lower() == folded:
                return value
        return None

    def get_all(self, name: str) -> List[str]:
        """Every value stored under `name`, in wire order."""
        folded = name.lower()
        return [value for entry_name, value in self._entries if entry_name.lower() == folded]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"HeaderStore({self._entries!r})"

"""Header note markers binding script variables to a column."""

from typing import Iterable, Iterator


class MarkerSet:
    """
    Ordered set of ``script:variable`` tokens stored in a header note.

    Notes are comma-separated; whitespace around tokens is ignored and
    membership is by exact token, so ``S1:v1`` never matches ``S1:v10``.
    """

    SEPARATOR = ", "

    def __init__(self, tokens: Iterable[str] = ()):
        self._tokens: list[str] = []
        for token in tokens:
            self.add(token)

    @classmethod
    def parse(cls, text: str) -> "MarkerSet":
        return cls(part.strip() for part in (text or "").split(","))

    def serialize(self) -> str:
        return self.SEPARATOR.join(self._tokens)

    def add(self, token: str) -> bool:
        """Add a token. Returns False if it was already present."""
        token = token.strip()
        if not token or token in self._tokens:
            return False
        self._tokens.append(token)
        return True

    def discard(self, token: str) -> bool:
        """Remove a token. Returns False if it was not present."""
        token = token.strip()
        if token not in self._tokens:
            return False
        self._tokens.remove(token)
        return True

    def __contains__(self, token: object) -> bool:
        return isinstance(token, str) and token.strip() in self._tokens

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __repr__(self) -> str:
        return f"MarkerSet({self._tokens!r})"

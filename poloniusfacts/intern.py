"""Interning of fact strings into small integer ids."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from .facts import AtomKind


class Interner:
    """Maps strings to dense integer ids, assigned in first-seen order."""

    def __init__(self) -> None:
        self._ids: dict[str, int] = {}
        self._strings: list[str] = []

    def intern(self, data: str) -> int:
        """Return the id of ``data``, assigning a new one if it is unseen."""
        index = self._ids.get(data)
        if index is None:
            index = len(self._strings)
            self._strings.append(data)
            self._ids[data] = index
        return index

    def untern(self, index: int) -> str:
        """Return the string with the given id."""
        if index < 0:
            raise IndexError(f"invalid interned id: {index}")
        return self._strings[index]

    def untern_all(self, indices: Iterable[int]) -> list[str]:
        """Return the strings for a sequence of ids."""
        return [self.untern(index) for index in indices]

    def __len__(self) -> int:
        return len(self._strings)

    def __contains__(self, data: object) -> bool:
        return data in self._ids


@dataclass
class InternerTables:
    """One interner per kind of atom."""

    origins: Interner = field(default_factory=Interner)
    loans: Interner = field(default_factory=Interner)
    points: Interner = field(default_factory=Interner)
    variables: Interner = field(default_factory=Interner)
    paths: Interner = field(default_factory=Interner)

    def table(self, kind: AtomKind) -> Interner:
        """The interner for atoms of the given kind."""
        match kind:
            case AtomKind.ORIGIN:
                return self.origins
            case AtomKind.LOAN:
                return self.loans
            case AtomKind.POINT:
                return self.points
            case AtomKind.VARIABLE:
                return self.variables
            case AtomKind.PATH:
                return self.paths
        raise ValueError(f"unknown atom kind: {kind!r}")

    def intern_row(
        self, kinds: Sequence[AtomKind], values: Sequence[str]
    ) -> tuple[int, ...]:
        """Intern each value with the interner of its column's kind."""
        if len(kinds) != len(values):
            raise ValueError(
                f"expected {len(kinds)} values, got {len(values)}"
            )
        return tuple(
            self.table(kind).intern(value) for kind, value in zip(kinds, values)
        )
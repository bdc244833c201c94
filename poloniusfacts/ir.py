"""Intermediate representation of parsed fact programs."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional, Union


@dataclass(frozen=True)
class Use:
    """Use of some origins."""

    origins: tuple[str, ...]


@dataclass(frozen=True)
class Outlives:
    """``a: b`` outlives relation."""

    a: str
    b: str


@dataclass(frozen=True)
class BorrowRegionAt:
    """A loan flowing into an origin."""

    origin: str
    loan: str


@dataclass(frozen=True)
class Invalidates:
    """An invalidated loan."""

    loan: str


@dataclass(frozen=True)
class Kill:
    """A killed loan."""

    loan: str


@dataclass(frozen=True)
class OriginLiveOnEntry:
    """An origin live on entry."""

    origin: str


@dataclass(frozen=True)
class DefineVariable:
    """A variable being (re)defined."""

    variable: str


@dataclass(frozen=True)
class UseVariable:
    """A variable being used."""

    variable: str


Fact = Union[
    Outlives,
    BorrowRegionAt,
    Invalidates,
    Kill,
    OriginLiveOnEntry,
    DefineVariable,
    UseVariable,
]
Effect = Union[Use, Fact]


@dataclass(frozen=True)
class KnownSubset:
    """A known ``a: b`` subset between placeholder origins."""

    a: str
    b: str


@dataclass(frozen=True)
class Placeholder:
    """A placeholder origin and its loan."""

    origin: str
    loan: str


@dataclass
class Statement:
    """A statement's effects at its Start and Mid points."""

    effects_start: list = field(default_factory=list)
    effects: list = field(default_factory=list)

    @classmethod
    def from_effects(cls, effects: Iterable[Effect]) -> Statement:
        """Build a statement from Mid-point effects.

        Anything live on entry to the Mid point is also live on entry
        to the Start point.
        """
        effects = list(effects)
        start = [e for e in effects if isinstance(e, OriginLiveOnEntry)]
        return cls(effects_start=start, effects=effects)


@dataclass
class Block:
    """A named basic block."""

    name: str
    statements: list = field(default_factory=list)
    goto: list = field(default_factory=list)


@dataclass
class Input:
    """A whole parsed program."""

    placeholders: list = field(default_factory=list)
    known_subsets: list = field(default_factory=list)
    blocks: list = field(default_factory=list)
    use_of_var_derefs_origin: list = field(default_factory=list)
    drop_of_var_derefs_origin: list = field(default_factory=list)

    @classmethod
    def build(
        cls,
        placeholders: Iterable[str],
        known_subsets: Optional[Iterable[KnownSubset]] = None,
        use_of_var_derefs_origin: Optional[Iterable[tuple[str, str]]] = None,
        drop_of_var_derefs_origin: Optional[Iterable[tuple[str, str]]] = None,
        blocks: Optional[Iterable[Block]] = None,
    ) -> Input:
        """Build an input; each placeholder origin gets a loan of the same name."""
        return cls(
            placeholders=[Placeholder(origin=o, loan=o) for o in placeholders],
            known_subsets=list(known_subsets or ()),
            blocks=list(blocks or ()),
            use_of_var_derefs_origin=list(use_of_var_derefs_origin or ()),
            drop_of_var_derefs_origin=list(drop_of_var_derefs_origin or ()),
        )
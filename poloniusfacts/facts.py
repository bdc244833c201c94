"""Fact relations and the kinds of atoms they are built from."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class AtomKind(enum.Enum):
    """The kinds of interned atoms that appear in facts."""

    ORIGIN = "origin"
    LOAN = "loan"
    POINT = "point"
    VARIABLE = "variable"
    PATH = "path"


_O = AtomKind.ORIGIN
_L = AtomKind.LOAN
_P = AtomKind.POINT
_V = AtomKind.VARIABLE
_PA = AtomKind.PATH

_RELATIONS: dict[str, tuple[AtomKind, ...]] = {
    "borrow_region": (_O, _L, _P),
    "universal_region": (_O,),
    "cfg_edge": (_P, _P),
    "killed": (_L, _P),
    "outlives": (_O, _O, _P),
    "invalidates": (_P, _L),
    "var_defined_at": (_V, _P),
    "var_used_at": (_V, _P),
    "var_dropped_at": (_V, _P),
    "use_of_var_derefs_origin": (_V, _O),
    "drop_of_var_derefs_origin": (_V, _O),
    "child_path": (_PA, _PA),
    "path_is_var": (_PA, _V),
    "path_assigned_at_base": (_PA, _P),
    "path_moved_at_base": (_PA, _P),
    "path_accessed_at_base": (_PA, _P),
    "known_subset": (_O, _O),
    "placeholder": (_O, _L),
}


@dataclass
class AllFacts:
    """All input relations of a borrow-check problem.

    Each relation is a list of rows of interned atom ids. Rows of
    single-column relations are bare ids; all other rows are tuples.
    """

    borrow_region: list = field(default_factory=list)
    universal_region: list = field(default_factory=list)
    cfg_edge: list = field(default_factory=list)
    killed: list = field(default_factory=list)
    outlives: list = field(default_factory=list)
    invalidates: list = field(default_factory=list)
    var_defined_at: list = field(default_factory=list)
    var_used_at: list = field(default_factory=list)
    var_dropped_at: list = field(default_factory=list)
    use_of_var_derefs_origin: list = field(default_factory=list)
    drop_of_var_derefs_origin: list = field(default_factory=list)
    child_path: list = field(default_factory=list)
    path_is_var: list = field(default_factory=list)
    path_assigned_at_base: list = field(default_factory=list)
    path_moved_at_base: list = field(default_factory=list)
    path_accessed_at_base: list = field(default_factory=list)
    known_subset: list = field(default_factory=list)
    placeholder: list = field(default_factory=list)

    @staticmethod
    def relation_names() -> tuple[str, ...]:
        """Names of all relations, in their canonical order."""
        return tuple(_RELATIONS)

    @staticmethod
    def relation_kinds(name: str) -> tuple[AtomKind, ...]:
        """The atom kind of each column of the named relation."""
        try:
            return _RELATIONS[name]
        except KeyError:
            raise KeyError(f"unknown relation: {name!r}") from None
"""Turning a parsed fact program into input relations."""

from __future__ import annotations

from .facts import AllFacts
from .intern import InternerTables
from .ir import (
    BorrowRegionAt,
    DefineVariable,
    Invalidates,
    Kill,
    Outlives,
    UseVariable,
)
from .parser import parse_input


def _point_name(kind: str, block: str, statement: int) -> str:
    return f'"{kind}({block}[{statement}])"'


def _emit_fact(
    relations: dict[str, set], fact: object, point: int, tables: InternerTables
) -> None:
    if isinstance(fact, BorrowRegionAt):
        origin = tables.origins.intern(fact.origin)
        loan = tables.loans.intern(fact.loan)
        relations["borrow_region"].add((origin, loan, point))
    elif isinstance(fact, Outlives):
        origin_a = tables.origins.intern(fact.a)
        origin_b = tables.origins.intern(fact.b)
        relations["outlives"].add((origin_a, origin_b, point))
    elif isinstance(fact, Kill):
        relations["killed"].add((tables.loans.intern(fact.loan), point))
    elif isinstance(fact, Invalidates):
        relations["invalidates"].add((point, tables.loans.intern(fact.loan)))
    elif isinstance(fact, DefineVariable):
        relations["var_defined_at"].add((tables.variables.intern(fact.variable), point))
    elif isinstance(fact, UseVariable):
        relations["var_used_at"].add((tables.variables.intern(fact.variable), point))


def parse_from_program(program: str, tables: InternerTables) -> AllFacts:
    """Parse a fact program into deduplicated, sorted input relations.

    Raises ParseError if the program is malformed.
    """
    source = parse_input(program)
    relations: dict[str, set] = {name: set() for name in AllFacts.relation_names()}

    relations["universal_region"].update(
        tables.origins.intern(p.origin) for p in source.placeholders
    )
    relations["placeholder"].update(
        (tables.origins.intern(p.origin), tables.loans.intern(p.loan))
        for p in source.placeholders
    )
    relations["drop_of_var_derefs_origin"].update(
        (tables.variables.intern(var), tables.origins.intern(origin))
        for var, origin in source.drop_of_var_derefs_origin
    )
    relations["use_of_var_derefs_origin"].update(
        (tables.variables.intern(var), tables.origins.intern(origin))
        for var, origin in source.use_of_var_derefs_origin
    )
    relations["known_subset"].update(
        (tables.origins.intern(s.a), tables.origins.intern(s.b))
        for s in source.known_subsets
    )

    for block in source.blocks:
        name = block.name
        terminator = len(block.statements) - 1
        for index, statement in enumerate(block.statements):
            start = tables.points.intern(_point_name("Start", name, index))
            mid = tables.points.intern(_point_name("Mid", name, index))

            if index > 0:
                previous_mid = tables.points.intern(_point_name("Mid", name, index - 1))
                relations["cfg_edge"].add((previous_mid, start))
            relations["cfg_edge"].add((start, mid))

            for target in block.goto:
                source_point = tables.points.intern(_point_name("Mid", name, terminator))
                target_point = tables.points.intern(_point_name("Start", target, 0))
                relations["cfg_edge"].add((source_point, target_point))

            for effect in statement.effects:
                _emit_fact(relations, effect, mid, tables)
            for effect in statement.effects_start:
                _emit_fact(relations, effect, start, tables)

    return AllFacts(**{name: sorted(rows) for name, rows in relations.items()})
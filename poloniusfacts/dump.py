"""Dumping of relations as aligned text tables and GraphViz renderings."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any, Optional, Union

from .facts import AllFacts, AtomKind
from .intern import InternerTables

PathLike = Union[str, "os.PathLike[str]"]

_DIGRAPH_HEADER = 'digraph g {\n  graph [\n  rankdir = "TD"\n];\n'


def _untern(tables: InternerTables, kinds: Sequence[AtomKind], position: int, atom: int) -> str:
    if position >= len(kinds):
        raise ValueError(f"not enough atom kinds to describe column {position + 1}")
    return tables.table(kinds[position]).untern(atom)


def _flatten(
    value: Any,
    kinds: Sequence[AtomKind],
    tables: InternerTables,
    prefix: list[str],
    out: list[list[str]],
) -> None:
    if isinstance(value, Mapping):
        for key in sorted(value):
            text = _untern(tables, kinds, 0, key)
            _flatten(value[key], kinds[1:], tables, prefix + [text], out)
    elif isinstance(value, (set, frozenset)):
        for item in sorted(value):
            _flatten(item, kinds, tables, prefix, out)
    elif isinstance(value, tuple):
        out.append(prefix + [_untern(tables, kinds, i, atom) for i, atom in enumerate(value)])
    elif isinstance(value, int):
        out.append(prefix + [_untern(tables, kinds, 0, value)])
    elif isinstance(value, Iterable):
        for item in value:
            _flatten(item, kinds, tables, prefix, out)
    else:
        raise TypeError(f"cannot dump value of type {type(value).__name__}")


def flatten_rows(
    value: Any, kinds: Sequence[AtomKind], tables: InternerTables
) -> list[list[str]]:
    """Flatten a nested relation into rows of atom names.

    Mappings contribute their sorted keys as leading columns, sets are
    walked in sorted order, other iterables in their own order; tuples
    and bare ids are the rows' last columns. ``kinds`` gives the atom
    kind of each column in turn.
    """
    rows: list[list[str]] = []
    _flatten(value, tuple(kinds), tables, [], rows)
    return rows


def _width(text: str) -> int:
    return len(text.encode("utf-8"))


def format_rows(rows: Sequence[Sequence[str]], name: Optional[str] = None) -> str:
    """Render rows as aligned columns, one line per row.

    Every column but the last is padded to the widest cell plus one
    space. When ``name`` is given, each line is prefixed with it.
    """
    col_width = max((max((_width(c) for c in row), default=0) for row in rows), default=0)
    lines = []
    for row in rows:
        *not_last, last = row
        text = "".join(col + " " * (col_width - _width(col) + 1) for col in not_last) + last
        lines.append(f"{name} {text}" if name is not None else text)
    return "".join(line + "\n" for line in lines)


def dump_relation(
    name: str,
    value: Any,
    kinds: Sequence[AtomKind],
    tables: InternerTables,
    output_dir: Optional[PathLike] = None,
) -> Optional[Path]:
    """Write a relation to ``<output_dir>/<name>.facts``, or to stdout.

    Returns the path written, or None when writing to stdout.
    """
    rows = flatten_rows(value, kinds, tables)
    if output_dir is not None:
        directory = Path(output_dir)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"{name}.facts"
        path.write_text(format_rows(rows), encoding="utf-8")
        return path
    sys.stdout.write(f"# {name}\n")
    sys.stdout.write(format_rows(rows, name))
    return None


def escape_for_graphviz(text: str) -> str:
    """Escape text for use inside a GraphViz record label."""
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("(", "\\(")
        .replace(")", "\\)")
        .replace("\n", "\\n")
    )


def facts_by_point(
    facts: Iterable[Any],
    split: Callable[[Any], tuple[int, Any]],
    name: str,
    point_pos: int,
    kinds: Sequence[AtomKind],
    tables: InternerTables,
) -> dict[int, str]:
    """Group facts by point and render each group as label text.

    ``split`` maps a fact to its point and the rest of the fact; the
    point is shown as ``_`` at column ``point_pos``. Lines end with
    GraphViz's left-aligning ``\\l``.
    """
    grouped: dict[int, list[Any]] = {}
    for fact in facts:
        point, rest = split(fact)
        grouped.setdefault(point, []).append(rest)

    result: dict[int, str] = {}
    for point, rests in grouped.items():
        lines = []
        for values in flatten_rows(rests, kinds, tables):
            values.insert(point_pos, "_")
            lines.append(escape_for_graphviz(f"{name}({', '.join(values)})"))
        result[point] = "\\l".join(lines) + "\\l"
    return result


def _point_last(row: tuple) -> tuple[int, tuple]:
    return row[-1], tuple(row[:-1])


def inputs_by_point(all_facts: AllFacts, tables: InternerTables) -> list[dict[int, str]]:
    """Render the input relations that mention points, grouped by point."""
    o, l, v, pa = AtomKind.ORIGIN, AtomKind.LOAN, AtomKind.VARIABLE, AtomKind.PATH
    specs = [
        (all_facts.borrow_region, _point_last, "borrow_region", 2, (o, l)),
        (all_facts.killed, _point_last, "killed", 1, (l,)),
        (all_facts.outlives, _point_last, "outlives", 2, (o, o)),
        (all_facts.invalidates, lambda r: (r[0], (r[1],)), "invalidates", 0, (l,)),
        (all_facts.var_used_at, _point_last, "var_used_at", 1, (v,)),
        (all_facts.var_defined_at, _point_last, "var_defined_at", 1, (v,)),
        (all_facts.var_dropped_at, _point_last, "var_dropped_at", 1, (v,)),
        (all_facts.path_assigned_at_base, _point_last, "path_assigned_at_base", 1, (pa,)),
        (all_facts.path_moved_at_base, _point_last, "moved_out_at_base", 1, (pa,)),
        (all_facts.path_accessed_at_base, _point_last, "path_accessed_at_base", 1, (pa,)),
    ]
    return [
        facts_by_point(facts, split, name, pos, kinds, tables)
        for facts, split, name, pos, kinds in specs
    ]


def _joined(groups: Sequence[Mapping[int, str]], point: int) -> str:
    return " | ".join(group[point] for group in groups if point in group)


def render_point(
    point: int,
    tables: InternerTables,
    inputs: Sequence[Mapping[int, str]],
    outputs: Sequence[Mapping[int, str]],
) -> str:
    """Render one point as a GraphViz record node."""
    label = escape_for_graphviz(tables.points.untern(point))
    return (
        f'"node{point}" [\n'
        f'  label = "{{ <f0> {label} | INPUTS | {_joined(inputs, point)} '
        f'| OUTPUTS | {_joined(outputs, point)} }}"\n'
        f'  shape = "record"\n'
        f"];\n"
    )


def graphviz(
    all_facts: AllFacts,
    outputs_by_point: Sequence[Mapping[int, str]],
    output_file: PathLike,
    tables: InternerTables,
) -> None:
    """Write the control-flow graph with per-point facts as a GraphViz file."""
    inputs = inputs_by_point(all_facts, tables)
    fragments = [_DIGRAPH_HEADER]
    seen: set[int] = set()
    for index, (point1, point2) in enumerate(all_facts.cfg_edge):
        for point in (point1, point2):
            if point not in seen:
                seen.add(point)
                fragments.append(render_point(point, tables, inputs, outputs_by_point))
        fragments.append(f'"node{point1}" -> "node{point2}":f0 [\n  id = {index}\n];\n')
    fragments.append("}")
    Path(output_file).write_bytes("".join(fragments).encode("utf-8"))
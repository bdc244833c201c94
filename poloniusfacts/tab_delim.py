"""Loading of fact relations from tab-delimited ``.facts`` files."""

from __future__ import annotations

import os
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Optional, Union

from .facts import AllFacts, AtomKind
from .intern import InternerTables

PathLike = Union[str, "os.PathLike[str]"]


class FactsFileError(Exception):
    """Raised when a facts file cannot be read or holds a malformed line."""

    def __init__(self, message: str, path: Path, line: Optional[int] = None) -> None:
        super().__init__(message)
        self.path = path
        self.line = line


def _read_lines(path: Path) -> Iterator[str]:
    try:
        with open(path, encoding="utf-8", newline="") as handle:
            content = handle.read()
    except OSError as exc:
        raise FactsFileError(f"Error opening file '{path}': {exc}", path) from exc
    except UnicodeDecodeError as exc:
        raise FactsFileError(f"Error reading file '{path}': {exc}", path) from exc

    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()
    for line in lines:
        yield line[:-1] if line.endswith("\r") else line


def load_tab_delimited_file(
    tables: InternerTables, path: PathLike, kinds: Sequence[AtomKind]
) -> list:
    """Load one relation, interning each column with its kind's interner.

    Rows of single-column relations are bare ids; other rows are tuples.
    """
    path = Path(path)
    rows = []
    for number, line in enumerate(_read_lines(path), start=1):
        columns = line.split("\t")
        if len(columns) < len(kinds):
            raise FactsFileError(
                f"error parsing line {number} of `{path}`", path, number
            )
        if len(columns) > len(kinds):
            raise FactsFileError(
                f"extra data on line {number} of `{path}`", path, number
            )
        row = tables.intern_row(kinds, columns)
        rows.append(row[0] if len(kinds) == 1 else row)
    return rows


def load_tab_delimited_facts(tables: InternerTables, facts_dir: PathLike) -> AllFacts:
    """Load every relation from ``<name>.facts`` files in ``facts_dir``."""
    facts_dir = Path(facts_dir)
    relations = {
        name: load_tab_delimited_file(
            tables, facts_dir / f"{name}.facts", AllFacts.relation_kinds(name)
        )
        for name in AllFacts.relation_names()
    }
    return AllFacts(**relations)
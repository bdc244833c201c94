# poloniusfacts

Tools for working with borrow-checker fact sets, of the kind a compiler
emits for location-sensitive lifetime analysis.

It gives you:

- **Interning** of the string atoms in fact files (origins, loans, points,
  variables, paths) into small integer ids (`poloniusfacts.intern`).
- **Loading** of a directory of tab-delimited `*.facts` files into an
  `AllFacts` value (`poloniusfacts.tab_delim`, `poloniusfacts.facts`).
- **A small fact-program language** with placeholders, known subsets and
  blocks of statements, parsed into an IR (`poloniusfacts.parser`,
  `poloniusfacts.ir`) and lowered to input facts (`poloniusfacts.program`).
- **Output**: aligned tuple dumps, a GraphViz rendering of the control-flow
  graph with the facts at each point (`poloniusfacts.dump`), and a reduced
  liveness graph (`poloniusfacts.liveness`).

## Installation

```
pip install poloniusfacts
```

There are no runtime dependencies.

## Writing a fact program

```python
from poloniusfacts.intern import InternerTables
from poloniusfacts.program import parse_from_program

program = """
    placeholders { 'a, 'b }
    known_subsets { 'b: 'a }

    block B0 {
        borrow_region_at('x, L0), outlives('b: 'x), outlives('x: 'a);
        invalidates(L0) / kill(L0);
        goto B1;
    }

    block B1 {
        var_used_at(V1);
    }
"""

tables = InternerTables()
facts = parse_from_program(program, tables)
print(tables.points.untern_all(p for p, _ in facts.invalidates))
```

A program starts with `placeholders { ... }`, optionally followed by
`known_subsets { 'a: 'b, ... }`, `use_of_var_derefs_origin { (V, 'a), ... }`
and `drop_of_var_derefs_origin { ... }`, then any number of blocks. `//`
starts a comment.

Each statement has two points, `"Start(B[i])"` and `"Mid(B[i])"`. Effects
before a `/` apply to the Start point and the rest to the Mid point; without
a `/`, all effects apply to the Mid point and any `origin_live_on_entry` is
also recorded at the Start point. Edges link Start to Mid, each Mid to the
next Start, and the block's last Mid to the first Start of every `goto`
target. Relations are deduplicated and sorted.

Effects: `use('a, ...)`, `outlives('a: 'b)`, `borrow_region_at('a, L)`,
`invalidates(L)`, `kill(L)`, `origin_live_on_entry('a)`,
`var_defined_at(V)`, `var_used_at(V)`.

`parser.parse_input(text)` returns the IR (`ir.Input`, `ir.Block`,
`ir.Statement` and one dataclass per effect). Malformed programs raise
`parser.ParseError`, a `ValueError`.

## Loading fact files

```python
from pathlib import Path
from poloniusfacts.intern import InternerTables
from poloniusfacts.tab_delim import load_tab_delimited_facts

tables = InternerTables()
facts = load_tab_delimited_facts(tables, Path("nll-facts/main"))
```

One file per relation is expected (`borrow_region.facts`, `cfg_edge.facts`,
...; see `AllFacts.relation_names()` and `AllFacts.relation_kinds(name)`).
A missing or unreadable file, or a row with too few or too many columns,
raises `tab_delim.FactsFileError`, which carries `path` and `line`.
`load_tab_delimited_file(tables, path, kinds)` loads a single relation.
Rows of single-column relations are bare ids; other rows are tuples.

## Output

- `dump.flatten_rows(value, kinds, tables)` turns nested mappings, sets,
  lists and tuples of ids into rows of names; `dump.format_rows(rows, name)`
  aligns them.
- `dump.dump_relation(name, value, kinds, tables, output_dir=None)` writes a
  relation to `<output_dir>/<name>.facts` and returns the path, or writes it
  to standard output under a `# name` header and returns `None`.
- `dump.graphviz(all_facts, outputs_by_point, output_file, tables)` writes a
  `digraph` with one record node per CFG point listing the input tuples at
  that point (from `dump.inputs_by_point`) and the output text you pass in
  `outputs_by_point`, which you can build with `dump.facts_by_point`.
- `liveness.liveness_graph(all_facts, var_live_on_entry,
  var_drop_live_on_entry, output_file, tables)` writes a graph of the CFG in
  which straight runs of points with unchanged live variables are merged,
  and each edge is labelled with the variables live across it (`U` for use-
  live, `D` for drop-live).

## What this package does not do

It does not run the borrow-check analysis itself: there is no computation
of errors, subset errors, move errors, loan liveness or variable liveness.
Output relations passed to `dump_relation`, `graphviz` and `liveness_graph`
must come from elsewhere. There is also no command-line program; the
package is used as a library.

## Running the tests

```
pip install -e .[test]
pytest
```
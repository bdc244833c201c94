import pytest

from poloniusfacts.dump import (
    dump_relation,
    escape_for_graphviz,
    facts_by_point,
    flatten_rows,
    format_rows,
    graphviz,
    inputs_by_point,
    render_point,
)
from poloniusfacts.facts import AllFacts, AtomKind
from poloniusfacts.intern import InternerTables
from poloniusfacts.program import parse_from_program


@pytest.fixture
def tables():
    return InternerTables()


def test_escape_for_graphviz_escapes_specials():
    assert escape_for_graphviz('"Mid(B0[0])"') == '\\"Mid\\(B0[0]\\)\\"'
    assert escape_for_graphviz("a\\b") == "a\\\\b"
    assert escape_for_graphviz("x\ny") == "x\\ny"


def test_flatten_rows_mapping_sorted_and_nested(tables):
    p0 = tables.points.intern("P0")
    p1 = tables.points.intern("P1")
    l0 = tables.loans.intern("L0")
    l1 = tables.loans.intern("L1")
    value = {p1: [l0], p0: [l1, l0]}
    rows = flatten_rows(value, (AtomKind.POINT, AtomKind.LOAN), tables)
    assert rows == [["P0", "L1"], ["P0", "L0"], ["P1", "L0"]]


def test_flatten_rows_sets_are_sorted_and_tuples_are_rows(tables):
    o0 = tables.origins.intern("'a")
    o1 = tables.origins.intern("'b")
    rows = flatten_rows({(o1, o0), (o0, o1)}, (AtomKind.ORIGIN, AtomKind.ORIGIN), tables)
    assert rows == [["'a", "'b"], ["'b", "'a"]]


def test_flatten_rows_requires_enough_kinds(tables):
    o0 = tables.origins.intern("'a")
    with pytest.raises(ValueError):
        flatten_rows([(o0, o0)], (AtomKind.ORIGIN,), tables)


def test_flatten_rows_rejects_unknown_values(tables):
    with pytest.raises(TypeError):
        flatten_rows([1.5], (AtomKind.ORIGIN,), tables)


def test_format_rows_aligns_columns():
    rows = [["a", "bb"], ["ccc", "d"]]
    lines = format_rows(rows).splitlines()
    assert len(lines) == 2
    assert lines[0].index("bb") == lines[1].index("d")
    assert lines[1] == "ccc d"


def test_format_rows_prefixes_name():
    lines = format_rows([["x"], ["y"]], "errors").splitlines()
    assert lines == ["errors x", "errors y"]


def test_dump_relation_to_directory(tables, tmp_path):
    p0 = tables.points.intern("P0")
    l0 = tables.loans.intern("L0")
    out = tmp_path / "out"
    path = dump_relation("errors", {p0: [l0]}, (AtomKind.POINT, AtomKind.LOAN), tables, out)
    assert path == out / "errors.facts"
    line = path.read_text(encoding="utf-8").strip()
    assert line.split() == ["P0", "L0"]


def test_dump_relation_to_stdout(tables, capsys):
    v0 = tables.variables.intern("V1")
    result = dump_relation("vars", [v0], (AtomKind.VARIABLE,), tables, None)
    captured = capsys.readouterr().out
    assert result is None
    assert captured.splitlines() == ["# vars", "vars V1"]


def test_facts_by_point_inserts_placeholder_and_escapes(tables):
    loan = tables.loans.intern("L0")
    point = tables.points.intern("P")
    result = facts_by_point(
        [(loan, point)],
        lambda r: (r[1], (r[0],)),
        "killed",
        1,
        (AtomKind.LOAN,),
        tables,
    )
    assert result == {point: "killed\\(L0, _\\)\\l"}


def test_facts_by_point_joins_multiple_lines(tables):
    l0 = tables.loans.intern("L0")
    l1 = tables.loans.intern("L1")
    point = tables.points.intern("P")
    result = facts_by_point(
        [(point, l0), (point, l1)],
        lambda r: (r[0], (r[1],)),
        "invalidates",
        0,
        (AtomKind.LOAN,),
        tables,
    )
    text = result[point]
    assert text.endswith("\\l")
    assert text.count("\\l") == 2
    assert "L0" in text and "L1" in text


def test_inputs_by_point_covers_program_facts(tables):
    program = """
        placeholders { }
        block B0 {
            invalidates(L0), kill(L1);
        }
    """
    facts = parse_from_program(program, tables)
    groups = inputs_by_point(facts, tables)
    assert len(groups) == 10
    mid = tables.points.intern('"Mid(B0[0])"')
    killed = groups[1]
    invalidated = groups[3]
    assert "L1" in killed[mid]
    assert "L0" in invalidated[mid]


def test_render_point_includes_label_and_tuples(tables):
    point = tables.points.intern('"Start(B0[0])"')
    text = render_point(point, tables, [{point: "in"}], [{point: "out"}, {}])
    assert text.startswith(f'"node{point}" [')
    assert "INPUTS | in | OUTPUTS | out }" in text
    assert escape_for_graphviz('"Start(B0[0])"') in text


def test_graphviz_writes_each_node_once(tables, tmp_path):
    program = """
        placeholders { }
        block B0 {
            invalidates(L0);
            invalidates(L1);
        }
    """
    facts = parse_from_program(program, tables)
    target = tmp_path / "graph.dot"
    graphviz(facts, [], target, tables)
    text = target.read_text(encoding="utf-8")
    assert text.startswith("digraph g {")
    assert text.endswith("}")
    points = {p for edge in facts.cfg_edge for p in edge}
    for point in points:
        assert text.count(f'"node{point}" [') == 1
    assert text.count("->") == len(facts.cfg_edge)


def test_graphviz_empty_facts(tables, tmp_path):
    target = tmp_path / "empty.dot"
    graphviz(AllFacts(), [], target, tables)
    assert target.read_text(encoding="utf-8") == 'digraph g {\n  graph [\n  rankdir = "TD"\n];\n}'
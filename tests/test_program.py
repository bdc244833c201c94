import pytest

from poloniusfacts.intern import InternerTables
from poloniusfacts.ir import Placeholder
from poloniusfacts.parser import ParseError
from poloniusfacts.program import parse_from_program

COMPLETE_PROGRAM = r"""
    // program description
    placeholders { 'a, 'b, 'c }

    // block description
    block B0 {
        // 0:
        invalidates(L0);

        // 1:
        invalidates(L1), origin_live_on_entry('d) / kill(L2);

        // another comment
        goto B1;
    }

    block B1 {
        // O:
        use('a, 'b), outlives('a: 'b), borrow_region_at('b, L1);
    }
"""


@pytest.fixture
def parsed():
    tables = InternerTables()
    facts = parse_from_program(COMPLETE_PROGRAM, tables)
    return facts, tables


def test_universal_regions(parsed):
    facts, tables = parsed
    assert tables.origins.untern_all(facts.universal_region) == ["'a", "'b", "'c"]


def test_placeholders(parsed):
    facts, tables = parsed
    placeholders = [
        Placeholder(origin=tables.origins.untern(o), loan=tables.loans.untern(l))
        for o, l in facts.placeholder
    ]
    assert placeholders == [
        Placeholder(origin="'a", loan="'a"),
        Placeholder(origin="'b", loan="'b"),
        Placeholder(origin="'c", loan="'c"),
    ]


def test_invalidates(parsed):
    facts, tables = parsed
    assert len(facts.invalidates) == 2
    point, loan = facts.invalidates[0]
    assert tables.points.untern(point) == "\"Mid(B0[0])\""
    assert tables.loans.untern(loan) == "L0"
    point, loan = facts.invalidates[1]
    assert tables.points.untern(point) == "\"Start(B0[1])\""
    assert tables.loans.untern(loan) == "L1"


def test_outlives(parsed):
    facts, tables = parsed
    assert len(facts.outlives) == 1
    a, b, point = facts.outlives[0]
    assert tables.origins.untern(a) == "'a"
    assert tables.origins.untern(b) == "'b"
    assert tables.points.untern(point) == "\"Mid(B1[0])\""


def test_borrow_region(parsed):
    facts, tables = parsed
    assert len(facts.borrow_region) == 1
    origin, loan, point = facts.borrow_region[0]
    assert tables.origins.untern(origin) == "'b"
    assert tables.loans.untern(loan) == "L1"
    assert tables.points.untern(point) == "\"Mid(B1[0])\""


def test_killed(parsed):
    facts, tables = parsed
    assert len(facts.killed) == 1
    loan, point = facts.killed[0]
    assert tables.loans.untern(loan) == "L2"
    assert tables.points.untern(point) == "\"Mid(B0[1])\""


def test_cfg_edges(parsed):
    facts, tables = parsed
    points = {p for edge in facts.cfg_edge for p in edge}
    assert len(points) == 6
    assert len(facts.cfg_edge) == 5

    def make_edge(a, b):
        return (tables.points.intern(a), tables.points.intern(b))

    for edge in [
        ("\"Start(B0[0])\"", "\"Mid(B0[0])\""),
        ("\"Start(B0[1])\"", "\"Mid(B0[1])\""),
        ("\"Start(B1[0])\"", "\"Mid(B1[0])\""),
        ("\"Mid(B0[0])\"", "\"Start(B0[1])\""),
        ("\"Mid(B0[1])\"", "\"Start(B1[0])\""),
    ]:
        assert make_edge(*edge) in facts.cfg_edge


def test_point_interning_order():
    program = r"""
        placeholders { }
        block B0 {
            invalidates(L0);
            goto B1;
        }
        block B1 {
            var_defined_at(V1);
            invalidates(L0);
            goto B2;
        }
        block B2 {
            invalidates(L0);
            var_used_at(V1);
        }
    """
    tables = InternerTables()
    facts = parse_from_program(program, tables)
    assert tables.points.untern(3) == "\"Mid(B1[0])\""
    variable, point = facts.var_defined_at[0]
    assert tables.variables.untern(variable) == "V1"
    assert tables.points.untern(point) == "\"Mid(B1[0])\""
    assert [tables.points.untern(p) for _, p in facts.var_used_at] == ["\"Mid(B2[1])\""]


def test_relations_are_sorted_and_deduplicated():
    program = r"""
        placeholders { 'b, 'a }
        block B0 {
            invalidates(L1), invalidates(L0), invalidates(L1);
        }
    """
    tables = InternerTables()
    facts = parse_from_program(program, tables)
    assert facts.invalidates == sorted(set(facts.invalidates))
    assert len(facts.invalidates) == 2
    assert facts.universal_region == sorted(facts.universal_region)


def test_derefs_and_known_subsets():
    program = r"""
        placeholders { 'a, 'b }
        known_subsets { 'a: 'b }
        use_of_var_derefs_origin { (V1, 'a) }
        drop_of_var_derefs_origin { (V2, 'b) }
    """
    tables = InternerTables()
    facts = parse_from_program(program, tables)
    assert [
        (tables.origins.untern(a), tables.origins.untern(b)) for a, b in facts.known_subset
    ] == [("'a", "'b")]
    assert [
        (tables.variables.untern(v), tables.origins.untern(o))
        for v, o in facts.use_of_var_derefs_origin
    ] == [("V1", "'a")]
    assert [
        (tables.variables.untern(v), tables.origins.untern(o))
        for v, o in facts.drop_of_var_derefs_origin
    ] == [("V2", "'b")]
    assert facts.cfg_edge == []


def test_origin_live_on_entry_emits_nothing():
    program = r"""
        placeholders { }
        block B0 {
            origin_live_on_entry('a), use('a);
        }
    """
    tables = InternerTables()
    facts = parse_from_program(program, tables)
    assert len(tables.origins) == 0
    assert len(facts.cfg_edge) == 1


def test_parse_error_propagates():
    with pytest.raises(ParseError):
        parse_from_program("block B0 { }", InternerTables())
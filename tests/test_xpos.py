import pytest

from lensm.pos import (
    NO_POS,
    POS_DEFAULT_STMT,
    POS_IS_STMT,
    POS_NOT_STMT,
    PosXlogue,
    make_bogus_lico,
    make_lico,
    make_pos,
    new_file_base,
    new_line_pragma_base,
)
from lensm.xpos import NO_XPOS, PosTable, XPos


def test_unknown_position():
    assert not NO_XPOS.is_known()
    assert NO_XPOS.line_number() == "?"
    assert NO_XPOS.line_number_html() == "?"


def test_known_position_line_number():
    p = XPos(1, make_lico(10, 2))
    assert p.is_known()
    assert p.line_number() == "10"
    assert p.line() == 10
    assert p.col() == 2
    assert p.file_index() == 1


def test_known_without_index():
    assert XPos(0, make_lico(5, 1)).is_known()


def test_before_and_after_by_index_then_lico():
    a = XPos(1, make_lico(50, 1))
    b = XPos(2, make_lico(1, 1))
    c = XPos(2, make_lico(3, 1))
    assert a.before(b)
    assert b.after(a)
    assert b.before(c)
    assert c.after(b)
    assert not a.before(a)
    assert not a.after(a)


def test_same_file_and_line():
    a = XPos(3, make_lico(7, 1))
    b = XPos(3, make_lico(7, 9))
    c = XPos(3, make_lico(8, 1))
    d = XPos(4, make_lico(7, 1))
    assert a.same_file(c)
    assert not a.same_file(d)
    assert a.same_file_and_line(b)
    assert not a.same_file_and_line(c)
    assert not a.same_file_and_line(d)


def test_statement_markers_and_html():
    p = XPos(1, make_lico(10, 2))
    assert p.with_default_stmt().line_number_html() == "10"
    assert p.with_is_stmt().line_number_html() == "<b>+10</b>"
    assert p.with_not_stmt().line_number_html() == "<s>10</s>"
    assert p.with_is_stmt().lico.is_stmt() == POS_IS_STMT
    assert p.with_not_stmt().lico.is_stmt() == POS_NOT_STMT
    assert p.with_is_stmt().with_default_stmt().lico.is_stmt() == POS_DEFAULT_STMT
    assert p.with_is_stmt().line() == 10
    assert p.with_is_stmt().col() == 2


def test_bogus_line_requires_file():
    with pytest.raises(ValueError):
        XPos(0, make_lico(3, 1)).with_bogus_line()


def test_bogus_line():
    p = XPos(2, make_lico(30, 4)).with_bogus_line()
    assert p.index == 2
    assert p.lico == make_bogus_lico()


def test_with_xlogue():
    p = XPos(1, make_lico(4, 2)).with_xlogue(PosXlogue.PROLOGUE_END)
    assert p.lico.xlogue() == PosXlogue.PROLOGUE_END
    assert p.line() == 4
    assert p.col() == 2


def test_at_column1():
    p = XPos(1, make_lico(12, 9)).at_column1()
    assert p.col() == 1
    assert p.line() == 12
    assert p.lico.is_stmt() == POS_IS_STMT


def test_table_round_trip():
    table = PosTable()
    base = new_file_base("a.go", "/src/a.go")
    pos = make_pos(base, 3, 4)
    x = table.xpos(pos)
    assert x.index == 1
    assert table.pos(x) == pos
    assert table.pos(x).base is base


def test_table_no_pos_maps_to_zero():
    table = PosTable()
    x = table.xpos(NO_POS)
    assert x == NO_XPOS
    assert table.pos(x).base is None


def test_table_reuses_index_for_same_base():
    table = PosTable()
    base = new_file_base("a.go", "/src/a.go")
    first = table.xpos(make_pos(base, 1, 1))
    second = table.xpos(make_pos(base, 9, 2))
    assert first.index == second.index
    assert first.same_file(second)


def test_table_file_names():
    table = PosTable()
    a = new_file_base("a.go", "/src/a.go")
    b = new_file_base("b.go", "/src/b.go")
    pragma = new_line_pragma_base(make_pos(a, 5, 1), "a.go", "/src/a.go", 10, 1)
    table.xpos(make_pos(a, 1, 1))
    table.xpos(make_pos(b, 1, 1))
    xp = table.xpos(make_pos(pragma, 6, 1))
    assert xp.index == 3
    assert table.file_index(a.sym_filename) == 0
    assert table.file_index(b.sym_filename) == 1
    assert table.file_index(pragma.sym_filename) == 0
    assert table.file_index("missing") == -1
    assert table.file_table() == [a.sym_filename, b.sym_filename]


def test_empty_table():
    table = PosTable()
    assert table.file_table() == []
    assert table.file_index("anything") == -1
    with pytest.raises(IndexError):
        table.pos(XPos(1, make_lico(1, 1)))
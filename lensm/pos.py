"""Source positions: compact line/column encoding, position bases and positions."""

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass
from typing import Optional

__all__ = [
    "FILE_SYM_PREFIX",
    "POS_DEFAULT_STMT",
    "POS_IS_STMT",
    "POS_NOT_STMT",
    "LINE_MAX",
    "COL_MAX",
    "PosXlogue",
    "Lico",
    "make_lico",
    "make_bogus_lico",
    "Pos",
    "NO_POS",
    "make_pos",
    "PosBase",
    "new_file_base",
    "new_line_pragma_base",
    "new_inlining_base",
]

FILE_SYM_PREFIX = "gofile.."

# Layout: 20 bits line, 8 bits column, 2 bits prologue/epilogue, 2 bits is-statement.
LINE_BITS = 20
LINE_MAX = (1 << LINE_BITS) - 2
BOGUS_LINE = 1
IS_STMT_BITS = 2
IS_STMT_MAX = (1 << IS_STMT_BITS) - 1
XLOGUE_BITS = 2
XLOGUE_MAX = (1 << XLOGUE_BITS) - 1
COL_BITS = 32 - LINE_BITS - XLOGUE_BITS - IS_STMT_BITS
COL_MAX = (1 << COL_BITS) - 1

IS_STMT_SHIFT = 0
IS_STMT_MASK = IS_STMT_MAX << IS_STMT_SHIFT
XLOGUE_SHIFT = IS_STMT_BITS + IS_STMT_SHIFT
XLOGUE_MASK = XLOGUE_MAX << XLOGUE_SHIFT
COL_SHIFT = XLOGUE_BITS + XLOGUE_SHIFT
LINE_SHIFT = COL_BITS + COL_SHIFT

_UINT32 = 0xFFFFFFFF

# Statement-boundary markers.
POS_DEFAULT_STMT = 0
POS_IS_STMT = 1
POS_NOT_STMT = 2


class PosXlogue(enum.IntEnum):
    """Prologue/epilogue marker attached to a position."""

    DEFAULT_LOGUE = 0
    PROLOGUE_END = 1
    EPILOGUE_BEGIN = 2


@dataclass(frozen=True, order=True)
class Lico:
    """A compact 32-bit encoding of a line and column number with statement flags."""

    value: int = 0

    def line(self) -> int:
        return self.value >> LINE_SHIFT

    def col(self) -> int:
        return (self.value >> COL_SHIFT) & COL_MAX

    def is_stmt(self) -> int:
        if self.value == 0:
            return POS_NOT_STMT
        return (self.value >> IS_STMT_SHIFT) & IS_STMT_MAX

    def xlogue(self) -> PosXlogue:
        return PosXlogue((self.value >> XLOGUE_SHIFT) & XLOGUE_MAX)

    def same_line(self, other: Lico) -> bool:
        """Report whether both encode the same line, ignoring column and flags."""
        return ((self.value ^ other.value) & ~((1 << LINE_SHIFT) - 1)) == 0

    def with_not_stmt(self) -> Lico:
        return self.with_stmt(POS_NOT_STMT)

    def with_default_stmt(self) -> Lico:
        return self.with_stmt(POS_DEFAULT_STMT)

    def with_is_stmt(self) -> Lico:
        return self.with_stmt(POS_IS_STMT)

    def with_xlogue(self, xlogue: int) -> Lico:
        """Return the same location carrying the given prologue/epilogue marker."""
        x = self.value
        if x == 0:
            if xlogue == 0:
                return self
            # A zero position becomes "not a statement" before marking.
            x = POS_NOT_STMT << IS_STMT_SHIFT
        return Lico(((x & ~XLOGUE_MASK) | (int(xlogue) << XLOGUE_SHIFT)) & _UINT32)

    def with_stmt(self, stmt: int) -> Lico:
        """Return the same location with the given statement marker."""
        if self.value == 0:
            return Lico(0)
        return Lico(((self.value & ~IS_STMT_MASK) | (stmt << IS_STMT_SHIFT)) & _UINT32)

    def line_number(self) -> str:
        return str(self.line())

    def line_number_html(self) -> str:
        if self.is_stmt() == POS_DEFAULT_STMT:
            return str(self.line())
        style, prefix = "b", "+"
        if self.is_stmt() == POS_NOT_STMT:
            style, prefix = "s", ""
        return f"<{style}>{prefix}{self.line()}</{style}>"

    def at_column1(self) -> Lico:
        return make_lico(self.line(), 1).with_is_stmt()


def _make_lico_raw(line: int, col: int) -> Lico:
    return Lico(((line << LINE_SHIFT) | (col << COL_SHIFT)) & _UINT32)


def make_lico(line: int, col: int) -> Lico:
    """Encode a line and column, saturating values that do not fit."""
    if line >= LINE_MAX:
        # Keep line+col monotonic by dropping the column once the line saturates.
        line = LINE_MAX
        col = 0
    if col > COL_MAX:
        col = COL_MAX
    return _make_lico_raw(line, col)


def make_bogus_lico() -> Lico:
    """A not-position that is still kept as a statement."""
    return _make_lico_raw(BOGUS_LINE, 0).with_is_stmt()


def _format(filename: str, line: int, col: int, show_col: bool) -> str:
    text = f"{filename}:{line}"
    # Column 0 and COL_MAX both mean an unknown column.
    if show_col and 0 < col < COL_MAX:
        text += f":{col}"
    return text


@dataclass(frozen=True)
class Pos:
    """A source position: an encoded line/column pair relative to a position base."""

    base: Optional[PosBase] = None
    lico: Lico = Lico()

    def line(self) -> int:
        return self.lico.line()

    def col(self) -> int:
        return self.lico.col()

    def is_known(self) -> bool:
        return self.base is not None or self.line() != 0

    def before(self, other: Pos) -> bool:
        """Report whether this position comes before other, ordering files by name."""
        n, m = self.filename(), other.filename()
        return n < m or (n == m and self.lico < other.lico)

    def after(self, other: Pos) -> bool:
        """Report whether this position comes after other, ordering files by name."""
        n, m = self.filename(), other.filename()
        return n > m or (n == m and self.lico > other.lico)

    def line_number(self) -> str:
        if not self.is_known():
            return "?"
        return self.lico.line_number()

    def line_number_html(self) -> str:
        if not self.is_known():
            return "?"
        return self.lico.line_number_html()

    def filename(self) -> str:
        """Name of the actual file containing this position."""
        return _base_pos(self.base).rel_filename()

    def rel_filename(self) -> str:
        """Filename recorded with the position's base."""
        return self.base.filename if self.base is not None else ""

    def rel_line(self) -> int:
        """Line number relative to the position's base, 0 if unknown."""
        b = self.base
        if b is None or b.line == 0:
            return 0
        return b.line + (self.line() - b.pos.line())

    def rel_col(self) -> int:
        """Column number relative to the position's base, 0 if unknown."""
        b = self.base
        if b is None or b.col == 0:
            return 0
        if self.line() == b.pos.line():
            return b.col + (self.col() - b.pos.col())
        return self.col()

    def abs_filename(self) -> str:
        return self.base.abs_filename if self.base is not None else ""

    def sym_filename(self) -> str:
        if self.base is not None:
            return self.base.sym_filename
        return FILE_SYM_PREFIX + "??"

    def format(self, show_col: bool, show_orig: bool) -> str:
        """Format as "file:line[:col]", adding the original position for line directives."""
        if not self.is_known():
            return "<unknown line number>"
        b = self.base
        if b is _base_pos(b).base:
            return _format(self.filename(), self.line(), self.col(), show_col)
        text = _format(self.rel_filename(), self.rel_line(), self.rel_col(), show_col)
        if show_orig:
            text += "[" + _format(self.filename(), self.line(), self.col(), show_col) + "]"
        return text

    def __str__(self) -> str:
        return self.format(True, True)


NO_POS = Pos()


def make_pos(base: Optional[PosBase], line: int, col: int) -> Pos:
    """Create a position with the given base and file-absolute line and column."""
    return Pos(base, make_lico(line, col))


@dataclass(eq=False)
class PosBase:
    """A filename and base position, introduced by a file or a line directive."""

    pos: Pos = NO_POS
    filename: str = ""
    abs_filename: str = ""
    sym_filename: str = ""
    line: int = 0
    col: int = 0
    inl: int = -1


def _base_pos(base: Optional[PosBase]) -> Pos:
    return base.pos if base is not None else NO_POS


def new_file_base(filename: str, abs_filename: str) -> PosBase:
    """Create a position base for a file."""
    base = PosBase(
        filename=filename,
        abs_filename=abs_filename,
        sym_filename=FILE_SYM_PREFIX + abs_filename,
        line=1,
        col=1,
        inl=-1,
    )
    base.pos = make_pos(base, 1, 1)
    return base


def new_line_pragma_base(
    pos: Pos, filename: str, abs_filename: str, line: int, col: int
) -> PosBase:
    """Create a position base for a line directive located at pos."""
    return PosBase(
        pos=pos,
        filename=filename,
        abs_filename=abs_filename,
        sym_filename=FILE_SYM_PREFIX + abs_filename,
        line=line,
        col=col,
        inl=-1,
    )


def new_inlining_base(old: Optional[PosBase], inl_tree_index: int) -> PosBase:
    """Return a copy of old with the given inlining index; without old, no filename."""
    if old is None:
        base = PosBase(line=1, col=1, inl=inl_tree_index)
        base.pos = make_pos(base, 1, 1)
        return base
    base = dataclasses.replace(old, inl=inl_tree_index)
    if old is old.pos.base:
        base.pos = Pos(base, old.pos.lico)
    return base
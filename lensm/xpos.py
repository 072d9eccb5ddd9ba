"""Compact source positions indexed through a table of position bases."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Optional

from lensm.pos import Lico, Pos, PosBase, PosXlogue, make_bogus_lico

__all__ = ["XPos", "NO_XPOS", "PosTable"]


@dataclass(frozen=True)
class XPos:
    """A position identified by a base index into a PosTable and an encoded line/column."""

    index: int = 0
    lico: Lico = Lico()

    def line(self) -> int:
        return self.lico.line()

    def col(self) -> int:
        return self.lico.col()

    def is_known(self) -> bool:
        """Report whether the position is known; matches Pos.is_known for the same position."""
        return self.index != 0 or self.line() != 0

    def before(self, other: XPos) -> bool:
        """Report whether this position comes before other, ordering bases by index."""
        n, m = self.index, other.index
        return n < m or (n == m and self.lico < other.lico)

    def after(self, other: XPos) -> bool:
        """Report whether this position comes after other, ordering bases by index."""
        n, m = self.index, other.index
        return n > m or (n == m and self.lico > other.lico)

    def same_file(self, other: XPos) -> bool:
        return self.index == other.index

    def same_file_and_line(self, other: XPos) -> bool:
        return self.index == other.index and self.lico.same_line(other.lico)

    def with_not_stmt(self) -> XPos:
        return dataclasses.replace(self, lico=self.lico.with_not_stmt())

    def with_default_stmt(self) -> XPos:
        return dataclasses.replace(self, lico=self.lico.with_default_stmt())

    def with_is_stmt(self) -> XPos:
        return dataclasses.replace(self, lico=self.lico.with_is_stmt())

    def with_bogus_line(self) -> XPos:
        """Return a position on a line that matches no real source line."""
        if self.index == 0:
            raise ValueError(
                "assigning a bogus line to a position with no file is not allowed"
            )
        return dataclasses.replace(self, lico=make_bogus_lico())

    def with_xlogue(self, xlogue: PosXlogue) -> XPos:
        return dataclasses.replace(self, lico=self.lico.with_xlogue(xlogue))

    def line_number(self) -> str:
        if not self.is_known():
            return "?"
        return self.lico.line_number()

    def line_number_html(self) -> str:
        if not self.is_known():
            return "?"
        return self.lico.line_number_html()

    def file_index(self) -> int:
        return self.index

    def at_column1(self) -> XPos:
        return dataclasses.replace(self, lico=self.lico.at_column1())


NO_XPOS = XPos()


@dataclass
class PosTable:
    """Tracks conversions between Pos and XPos values."""

    _base_list: list[Optional[PosBase]] = field(default_factory=list)
    _index_map: Optional[dict[Optional[PosBase], int]] = None
    _name_map: dict[str, int] = field(default_factory=dict)

    def xpos(self, pos: Pos) -> XPos:
        """Return the XPos for pos, registering its base if necessary."""
        if self._index_map is None:
            # The missing base always gets index 0 so that NO_POS maps to NO_XPOS.
            self._base_list.append(None)
            self._index_map = {None: 0}
            self._name_map = {}
        index = self._index_map.get(pos.base)
        if index is None:
            index = len(self._base_list)
            self._base_list.append(pos.base)
            self._index_map[pos.base] = index
            name = pos.base.sym_filename
            if name not in self._name_map:
                self._name_map[name] = len(self._name_map)
        return XPos(index, pos.lico)

    def pos(self, xpos: XPos) -> Pos:
        """Return the Pos for xpos; raises IndexError if it was not made by this table."""
        base = self._base_list[xpos.index] if xpos.index != 0 else None
        return Pos(base, xpos.lico)

    def file_index(self, filename: str) -> int:
        """Index of the given file symbol name, or -1 if unknown."""
        return self._name_map.get(filename, -1)

    def file_table(self) -> list[str]:
        """All file symbol names, ordered by their index."""
        table = [""] * len(self._name_map)
        for name, index in self._name_map.items():
            table[index] = name
        return table
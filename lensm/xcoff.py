"""Reading XCOFF (Extended Common Object File Format) object files."""

from __future__ import annotations

import io
import struct
from dataclasses import dataclass, field
from typing import BinaryIO, Optional, Protocol, Union

from lensm.xcoff_format import (
    C_EXT,
    C_HIDEXT,
    C_WEAKEXT,
    FILHSZ_32,
    FILHSZ_64,
    LDHDRSZ_32,
    STYP_DATA,
    STYP_LOADER,
    STYP_TEXT,
    SYM_TYPE_FUNC,
    SYMESZ,
    U64_TOCMAGIC,
    U802TOCMAGIC,
    XTY_SD,
    AuxCSect32,
    AuxCSect64,
    AuxFcn32,
    AuxFcn64,
    FileHeader32,
    FileHeader64,
    LoaderHeader32,
    LoaderHeader64,
    LoaderSymbol32,
    LoaderSymbol64,
    Reloc32,
    Reloc64,
    SectionHeader32,
    SectionHeader64,
    SymEnt32,
    SymEnt64,
    read_record,
)

__all__ = [
    "XcoffError",
    "Section",
    "AuxiliaryCSect",
    "AuxiliaryFcn",
    "Symbol",
    "Reloc",
    "ImportedSymbol",
    "XcoffFile",
    "cstring",
    "get_string",
    "open_file",
    "new_file",
]

_U64 = (1 << 64) - 1
_EXTERNAL_CLASSES = frozenset({C_EXT, C_WEAKEXT, C_HIDEXT})

Readable = Union[bytes, bytearray, memoryview, BinaryIO]


class XcoffError(ValueError):
    """Raised when data is not a well-formed XCOFF file."""


class _Source(Protocol):
    def read_at(self, offset: int, size: int) -> bytes: ...


class _BytesSource:
    def __init__(self, data: bytes) -> None:
        self._data = data

    def read_at(self, offset: int, size: int) -> bytes:
        if offset < 0:
            raise XcoffError(f"negative offset {offset}")
        return self._data[offset:offset + size]


class _FileSource:
    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def read_at(self, offset: int, size: int) -> bytes:
        if offset < 0:
            raise XcoffError(f"negative offset {offset}")
        self._stream.seek(offset)
        return self._stream.read(size)


class _Window:
    """A bounded view onto another source."""

    def __init__(self, source: _Source, base: int, size: int) -> None:
        self._source = source
        self._base = base
        self._size = size

    def read_at(self, offset: int, size: int) -> bytes:
        if offset < 0:
            raise XcoffError(f"negative offset {offset}")
        if offset >= self._size:
            return b""
        return self._source.read_at(self._base + offset, min(size, self._size - offset))


class _ZeroSource:
    """Section contents that are all zero (sections without raw data)."""

    def __init__(self, size: int) -> None:
        self._size = size

    def read_at(self, offset: int, size: int) -> bytes:
        if offset < 0:
            raise XcoffError(f"negative offset {offset}")
        return bytes(max(0, min(size, self._size - offset)))


class _Cursor:
    """Sequential reading over a source with an explicit position."""

    def __init__(self, source: _Source) -> None:
        self._source = source
        self.position = 0

    def seek(self, position: int) -> None:
        if position < 0:
            raise XcoffError(f"negative position {position}")
        self.position = position

    def skip(self, count: int) -> None:
        self.seek(self.position + count)

    def read(self, size: int) -> bytes:
        data = self._source.read_at(self.position, size)
        self.position += len(data)
        return data


def _as_source(reader: Readable) -> _Source:
    if isinstance(reader, (bytes, bytearray, memoryview)):
        return _BytesSource(bytes(reader))
    return _FileSource(reader)


def _read(cursor: _Cursor, record_type):
    try:
        return read_record(record_type, cursor)  # type: ignore[arg-type]
    except EOFError as exc:
        raise XcoffError(str(exc)) from exc


def _read_exact(source: _Source, offset: int, size: int, what: str) -> bytes:
    data = source.read_at(offset, size)
    if len(data) < size:
        raise XcoffError(f"unexpected end of data reading {what}")
    return data


def _to_int64(value: int) -> int:
    value &= _U64
    return value - (1 << 64) if value >= 1 << 63 else value


def _cbytes(data: bytes) -> bytes:
    end = data.find(b"\0")
    return data if end < 0 else data[:end]


def cstring(data: bytes) -> str:
    """Decode bytes up to the first NUL byte, or all of them if there is none."""
    return _cbytes(bytes(data)).decode("utf-8", errors="replace")


def get_string(table: bytes, offset: int) -> Optional[str]:
    """Extract a string from an XCOFF string table; None if offset is out of range."""
    if offset < 4 or offset >= len(table):
        return None
    return cstring(table[offset:])


@dataclass
class Reloc:
    virtual_address: int
    symbol: Optional[Symbol]
    signed: bool
    instruction_fixed: bool
    length: int
    type: int


@dataclass
class Section:
    """A section header together with access to its contents."""

    name: str
    virtual_address: int
    size: int
    type: int
    relptr: int
    nreloc: int
    relocs: list[Reloc] = field(default_factory=list)
    _reader: Optional[_Source] = field(default=None, repr=False, compare=False)

    def data(self) -> bytes:
        """Return the contents of the section."""
        if self._reader is None:
            return bytes(self.size)
        data = self._reader.read_at(0, self.size)
        if len(data) < self.size:
            raise XcoffError(
                f"section {self.name!r} is truncated: got {len(data)} of {self.size} bytes"
            )
        return data


@dataclass
class AuxiliaryCSect:
    """Information from an AUX_CSECT entry."""

    length: int = 0
    storage_mapping_class: int = 0
    symbol_type: int = 0


@dataclass
class AuxiliaryFcn:
    """Information from an AUX_FCN entry."""

    size: int = 0


@dataclass
class Symbol:
    name: str
    value: int
    section_number: int
    storage_class: int
    aux_fcn: AuxiliaryFcn = field(default_factory=AuxiliaryFcn)
    aux_csect: AuxiliaryCSect = field(default_factory=AuxiliaryCSect)


@dataclass(frozen=True)
class ImportedSymbol:
    """A symbol expected to be satisfied by another library at load time."""

    name: str
    library: str = ""


@dataclass
class XcoffFile:
    """An open XCOFF file."""

    target_machine: int
    sections: list[Section] = field(default_factory=list)
    symbols: list[Symbol] = field(default_factory=list)
    string_table: bytes = b""
    library_paths: list[str] = field(default_factory=list)
    _closer: Optional[BinaryIO] = field(default=None, repr=False, compare=False)

    @property
    def is_64bit(self) -> bool:
        return self.target_machine == U64_TOCMAGIC

    def close(self) -> None:
        """Close the underlying file if this object opened it."""
        if self._closer is not None:
            closer, self._closer = self._closer, None
            closer.close()

    def __enter__(self) -> XcoffFile:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def section(self, name: str) -> Optional[Section]:
        """First section with the given name; names longer than 8 bytes match truncated."""
        for section in self.sections:
            if section.name == name or (len(name) > 8 and section.name == name[:8]):
                return section
        return None

    def section_by_type(self, typ: int) -> Optional[Section]:
        """First section with the given type, or None."""
        return next((s for s in self.sections if s.type == typ), None)

    def csect(self, name: str) -> Optional[bytes]:
        """Contents of the section-definition csect with the given name, or None."""
        for symbol in self.symbols:
            if symbol.name == name and symbol.aux_csect.symbol_type == XTY_SD:
                index = symbol.section_number - 1
                if 0 <= index < len(self.sections):
                    section = self.sections[index]
                    length = symbol.aux_csect.length
                    if length >= 0 and symbol.value + length <= section.size:
                        reader = section._reader or _ZeroSource(section.size)
                        data = reader.read_at(symbol.value, length)
                        return data if len(data) == length else None
                break
        return None

    def _read_import_ids(self, section: Section) -> list[str]:
        """Import file IDs from the loader section; also sets library_paths."""
        reader = section._reader or _ZeroSource(section.size)
        cursor = _Cursor(reader)
        if self.is_64bit:
            header = _read(cursor, LoaderHeader64)
        else:
            header = _read(cursor, LoaderHeader32)
        table = _read_exact(reader, header.limpoff, header.listlen, "import file ID table")

        libpath = _cbytes(table)
        self.library_paths = libpath.decode("utf-8", errors="replace").split(":")
        offset = len(libpath) + 3  # three NUL bytes
        paths = []
        for _ in range(1, header.lnimpid):
            parts = []
            for _part in range(3):
                raw = _cbytes(table[offset:])
                offset += len(raw) + 1
                parts.append(raw.decode("utf-8", errors="replace"))
            impidpath, impidbase, impidmem = parts
            if impidpath:
                paths.append(f"{impidpath}/{impidbase}/{impidmem}")
            else:
                paths.append(f"{impidbase}/{impidmem}")
        return paths

    def imported_symbols(self) -> list[ImportedSymbol]:
        """Symbols expected to be satisfied by other libraries; weak ones excluded."""
        section = self.section_by_type(STYP_LOADER)
        if section is None:
            return []
        reader = section._reader or _ZeroSource(section.size)
        cursor = _Cursor(reader)
        if self.is_64bit:
            header = _read(cursor, LoaderHeader64)
            symoff = header.lsymoff
        else:
            header = _read(cursor, LoaderHeader32)
            symoff = LDHDRSZ_32
        strings = _read_exact(reader, header.lstoff, header.lstlen, "loader string table")
        libraries = self._read_import_ids(section)

        cursor.seek(symoff)
        imported = []
        for _ in range(header.lnsyms):
            if self.is_64bit:
                entry = _read(cursor, LoaderSymbol64)
                if not entry.lsmtype & 0x40:
                    continue
                name = get_string(strings, entry.loffset)
            else:
                entry = _read(cursor, LoaderSymbol32)
                if not entry.lsmtype & 0x40:
                    continue
                if int.from_bytes(entry.lname[:4], "big") != 0:
                    name = cstring(entry.lname)
                else:
                    name = get_string(strings, int.from_bytes(entry.lname[4:], "big"))
            if name is None:
                continue
            library = ""
            if 1 <= entry.lifile <= len(libraries):
                library = libraries[entry.lifile - 1]
            imported.append(ImportedSymbol(name, library))
        return imported

    def imported_libraries(self) -> list[str]:
        """Libraries the binary expects to be linked with at load time."""
        section = self.section_by_type(STYP_LOADER)
        if section is None:
            return []
        return self._read_import_ids(section)


def open_file(name: str) -> XcoffFile:
    """Open the named file as an XCOFF binary."""
    stream = open(name, "rb")
    try:
        xcoff = new_file(stream)
    except BaseException:
        stream.close()
        raise
    xcoff._closer = stream
    return xcoff


def new_file(reader: Readable) -> XcoffFile:
    """Parse an XCOFF binary from bytes or a seekable binary stream."""
    source = _as_source(reader)
    cursor = _Cursor(source)

    head = cursor.read(2)
    if len(head) < 2:
        raise XcoffError("unexpected end of data reading XCOFF magic")
    (magic,) = struct.unpack(">H", head)
    if magic not in (U802TOCMAGIC, U64_TOCMAGIC):
        raise XcoffError(f"unrecognised XCOFF magic: 0x{magic:x}")
    is64 = magic == U64_TOCMAGIC

    cursor.seek(0)
    if is64:
        file_header = _read(cursor, FileHeader64)
        header_size = FILHSZ_64
    else:
        file_header = _read(cursor, FileHeader32)
        header_size = FILHSZ_32
    nscns = file_header.fnscns
    symptr = file_header.fsymptr
    nsyms = file_header.fnsyms

    if symptr == 0 or nsyms <= 0:
        raise XcoffError("no symbol table")

    # The string table follows the symbol table; it starts with its own length.
    offset = symptr + nsyms * SYMESZ
    (length,) = struct.unpack(">I", _read_exact(source, offset, 4, "string table length"))
    string_table = b""
    if length > 4:
        string_table = _read_exact(source, offset, length, "string table")

    xcoff = XcoffFile(target_machine=magic, string_table=string_table)

    cursor.seek(header_size + file_header.fopthdr)
    for _ in range(nscns):
        header = _read(cursor, SectionHeader64 if is64 else SectionHeader32)
        reader_for_section: _Source
        if header.sscnptr == 0:
            reader_for_section = _ZeroSource(header.ssize)
        else:
            reader_for_section = _Window(source, header.sscnptr, header.ssize)
        xcoff.sections.append(
            Section(
                name=cstring(header.sname),
                virtual_address=header.svaddr,
                size=header.ssize,
                type=header.sflags,
                relptr=header.srelptr,
                nreloc=header.snreloc,
                _reader=reader_for_section,
            )
        )

    index_to_symbol = _read_symbols(xcoff, cursor, symptr, nsyms, nscns)
    _read_relocations(xcoff, cursor, index_to_symbol)
    return xcoff


def _read_symbols(
    xcoff: XcoffFile, cursor: _Cursor, symptr: int, nsyms: int, nscns: int
) -> dict[int, Symbol]:
    is64 = xcoff.is_64bit
    table = xcoff.string_table
    index_to_symbol: dict[int, Symbol] = {}

    cursor.seek(symptr)
    i = 0
    while i < nsyms:
        index = i
        if is64:
            entry = _read(cursor, SymEnt64)
            name = get_string(table, entry.noffset)
        else:
            entry = _read(cursor, SymEnt32)
            if int.from_bytes(entry.nname[:4], "big") != 0:
                name = cstring(entry.nname)
            else:
                name = get_string(table, int.from_bytes(entry.nname[4:], "big"))
        numaux = entry.nnumaux
        need_aux_fcn = bool(entry.ntype & SYM_TYPE_FUNC) and numaux > 1

        accepted = (
            name is not None
            and entry.nsclass in _EXTERNAL_CLASSES
            # Must have at least one csect auxiliary entry.
            and numaux >= 1
            and i + numaux < nsyms
            and entry.nscnum <= nscns
        )
        if accepted:
            value = entry.nvalue
            if entry.nscnum == 0:
                value = 0
            else:
                value = (value - xcoff.sections[entry.nscnum - 1].virtual_address) & _U64
            symbol = Symbol(
                name=name,
                value=value,
                section_number=entry.nscnum,
                storage_class=entry.nsclass,
            )
            index_to_symbol[index] = symbol

            if need_aux_fcn:
                aux_fcn = _read(cursor, AuxFcn64 if is64 else AuxFcn32)
                symbol.aux_fcn.size = aux_fcn.xfsize
            else:
                # The csect auxiliary entry is, by convention, the last one.
                cursor.skip((numaux - 1) * SYMESZ)
            i += numaux
            numaux = 0

            if is64:
                aux = _read(cursor, AuxCSect64)
                csect_length = _to_int64((aux.xscnlenhi << 32) | aux.xscnlenlo)
            else:
                aux = _read(cursor, AuxCSect32)
                csect_length = aux.xscnlen
            symbol.aux_csect = AuxiliaryCSect(
                length=csect_length,
                storage_mapping_class=aux.xsmclas,
                symbol_type=aux.xsmtyp & 0x7,
            )
            xcoff.symbols.append(symbol)

        i += numaux
        cursor.skip(numaux * SYMESZ)
        i += 1
    return index_to_symbol


def _read_relocations(
    xcoff: XcoffFile, cursor: _Cursor, index_to_symbol: dict[int, Symbol]
) -> None:
    record_type = Reloc64 if xcoff.is_64bit else Reloc32
    for section in xcoff.sections:
        if section.type not in (STYP_TEXT, STYP_DATA) or section.relptr == 0:
            continue
        cursor.seek(section.relptr)
        section.relocs = []
        for _ in range(section.nreloc):
            raw = _read(cursor, record_type)
            section.relocs.append(
                Reloc(
                    virtual_address=raw.rvaddr,
                    symbol=index_to_symbol.get(raw.rsymndx),
                    signed=bool(raw.rsize & 0x80),
                    instruction_fixed=bool(raw.rsize & 0x40),
                    length=(raw.rsize & 0x3F) + 1,
                    type=raw.rtype,
                )
            )


# Keep io referenced for callers that pass in-memory streams.
_ = io
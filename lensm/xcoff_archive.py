"""Reading AIX big archives whose members are XCOFF object files."""

from __future__ import annotations

import re
import struct
from dataclasses import dataclass, field
from typing import BinaryIO, Optional

from lensm.xcoff import (
    Readable,
    XcoffError,
    XcoffFile,
    _as_source,
    _read_exact,
    _Source,
    _Window,
    new_file,
)

__all__ = [
    "SAIAMAG",
    "AIAFMAG",
    "AIAMAG",
    "AIAMAGBIG",
    "FL_HSZ_BIG",
    "AR_HSZ_BIG",
    "Member",
    "Archive",
    "open_archive",
    "new_archive",
]

SAIAMAG = 0x8
AIAFMAG = b"`\n"
AIAMAG = b"<aiaff>\n"
AIAMAGBIG = b"<bigaf>\n"

# Header sizes.
FL_HSZ_BIG = 0x80
AR_HSZ_BIG = 0x70

# magic, member table, 32-bit symtab, 64-bit symtab, first member, last member, free list
_FILE_HEADER = struct.Struct(">8s20s20s20s20s20s20s")
# size, next, previous, date, uid, gid, mode, name length
_MEMBER_HEADER = struct.Struct(">20s20s20s12s12s12s12s4s")

_DECIMAL = re.compile(r"[+-]?[0-9]+")


def _parse_decimal(field_bytes: bytes, what: str) -> int:
    text = field_bytes.decode("latin-1").strip()
    if not _DECIMAL.fullmatch(text):
        raise XcoffError(f"error parsing {what}: invalid decimal {text!r}")
    return int(text)


@dataclass
class Member:
    """A member of an AIX big archive."""

    name: str
    size: int
    _reader: Optional[_Source] = field(default=None, repr=False, compare=False)

    def data(self) -> bytes:
        """Return the contents of the member."""
        if self._reader is None:
            return b""
        data = self._reader.read_at(0, self.size)
        if len(data) < self.size:
            raise XcoffError(
                f"member {self.name!r} is truncated: got {len(data)} of {self.size} bytes"
            )
        return data


@dataclass
class Archive:
    """An open AIX big archive."""

    magic: str
    members: list[Member] = field(default_factory=list)
    _closer: Optional[BinaryIO] = field(default=None, repr=False, compare=False)

    def close(self) -> None:
        """Release the file handle held by this archive, if any."""
        if self._closer is not None:
            closer, self._closer = self._closer, None
            closer.close()

    def __enter__(self) -> Archive:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def get_file(self, name: str) -> XcoffFile:
        """Return the XCOFF file stored in the first member called name."""
        for member in self.members:
            if member.name == name:
                return new_file(member.data())
        raise XcoffError(f"unknown member {name} in archive")


def open_archive(name: str) -> Archive:
    """Read the archive stored at the given path."""
    stream = open(name, "rb")
    try:
        archive = new_archive(stream)
    except BaseException:
        stream.close()
        raise
    archive._closer = stream
    return archive


def new_archive(reader: Readable) -> Archive:
    """Parse an AIX big archive from bytes or a seekable binary stream."""
    source = _as_source(reader)

    magic = source.read_at(0, SAIAMAG)
    if len(magic) < SAIAMAG:
        raise XcoffError("unexpected end of data reading archive magic")
    if magic == AIAMAG:
        raise XcoffError("small AIX archive not supported")
    if magic != AIAMAGBIG:
        raise XcoffError(f"unrecognised archive magic: 0x{magic.hex()}")

    archive = Archive(magic=magic.decode("latin-1"))

    header = _FILE_HEADER.unpack(
        _read_exact(source, 0, _FILE_HEADER.size, "archive header")
    )
    first_offset, last_offset = header[4], header[5]
    off = _parse_decimal(first_offset, "offset of first member in archive header")
    if off == 0:
        # The archive is empty.
        return archive
    last = _parse_decimal(last_offset, "offset of last member in archive header")

    seen: set[int] = set()
    while True:
        if off in seen:
            raise XcoffError(f"archive member chain loops at offset {off}")
        seen.add(off)

        # The name is read separately from the rest of the member header.
        fields = _MEMBER_HEADER.unpack(
            _read_exact(source, off, _MEMBER_HEADER.size, "member header")
        )
        size_field, next_field, name_len_field = fields[0], fields[1], fields[7]

        size = _parse_decimal(size_field, "size in member header")
        if size < 0:
            raise XcoffError(f"negative member size {size}")
        name_len = _parse_decimal(name_len_field, "name length in member header")
        if name_len < 0:
            raise XcoffError(f"negative member name length {name_len}")

        name_offset = off + AR_HSZ_BIG
        name = _read_exact(source, name_offset, name_len, "member name")

        file_offset = name_offset + name_len
        if file_offset & 1:
            file_offset += 1

        fmag = _read_exact(source, file_offset, 2, "member header terminator")
        if fmag != AIAFMAG:
            raise XcoffError("AIAFMAG not found after member header")
        file_offset += 2

        archive.members.append(
            Member(
                name=name.decode("utf-8", errors="replace"),
                size=size,
                _reader=_Window(source, file_offset, size),
            )
        )

        if off == last:
            break
        off = _parse_decimal(next_field, "offset of next member in member header")

    return archive
import io

import pytest

from lensm.xcoff import XcoffError
from lensm.xcoff_archive import (
    AIAMAG,
    AIAMAGBIG,
    AR_HSZ_BIG,
    FL_HSZ_BIG,
    new_archive,
    open_archive,
)
from lensm.xcoff_format import U802TOCMAGIC, FileHeader32, SymEnt32


def _field(value, width):
    return str(value).encode().ljust(width, b" ")


def _build_archive(members, magic=AIAMAGBIG, fmag=b"`\n"):
    """Lay out a big archive with members chained one after another."""
    body = bytearray()
    offsets = []
    off = FL_HSZ_BIG
    chunks = []
    for index, (name, data) in enumerate(members):
        offsets.append(off)
        name_bytes = name.encode()
        pad = b"\0" if (off + AR_HSZ_BIG + len(name_bytes)) & 1 else b""
        length = AR_HSZ_BIG + len(name_bytes) + len(pad) + 2 + len(data)
        if length & 1:
            length += 1
        chunks.append((name_bytes, pad, data, length))
        off += length
    for index, (name_bytes, pad, data, length) in enumerate(chunks):
        next_off = offsets[index + 1] if index + 1 < len(offsets) else 0
        prev_off = offsets[index - 1] if index > 0 else 0
        member = (
            _field(len(data), 20)
            + _field(next_off, 20)
            + _field(prev_off, 20)
            + _field(0, 12)
            + _field(0, 12)
            + _field(0, 12)
            + _field(644, 12)
            + _field(len(name_bytes), 4)
            + name_bytes
            + pad
            + fmag
            + data
        )
        body += member.ljust(length, b"\0")
    first = offsets[0] if offsets else 0
    last = offsets[-1] if offsets else 0
    header = (
        magic
        + _field(0, 20)
        + _field(0, 20)
        + _field(0, 20)
        + _field(first, 20)
        + _field(last, 20)
        + _field(0, 20)
    )
    assert len(header) == FL_HSZ_BIG
    return bytes(header + body)


def _minimal_xcoff():
    header = FileHeader32(
        fmagic=U802TOCMAGIC, fnscns=0, ftimedat=0, fsymptr=20, fnsyms=1, fopthdr=0, fflags=0
    ).pack()
    symbol = SymEnt32(
        nname=b"main\0\0\0\0", nvalue=0, nscnum=0, ntype=0, nsclass=0, nnumaux=0
    ).pack()
    return header + symbol + (4).to_bytes(4, "big")


def test_members_round_trip():
    members = [("abc.o", b"hello"), ("even.o", b"world!!"), ("x", b"")]
    archive = new_archive(_build_archive(members))
    assert [m.name for m in archive.members] == [name for name, _ in members]
    assert [m.size for m in archive.members] == [len(data) for _, data in members]
    assert [m.data() for m in archive.members] == [data for _, data in members]


def test_magic_is_recorded():
    archive = new_archive(_build_archive([("a.o", b"1")]))
    assert archive.magic == AIAMAGBIG.decode()


def test_empty_archive_has_no_members():
    archive = new_archive(_build_archive([]))
    assert archive.members == []


def test_stream_input():
    data = _build_archive([("one.o", b"first"), ("two.o", b"second")])
    archive = new_archive(io.BytesIO(data))
    assert [m.data() for m in archive.members] == [b"first", b"second"]


def test_small_archive_rejected():
    data = _build_archive([("a.o", b"1")], magic=AIAMAG)
    with pytest.raises(XcoffError, match="small AIX archive not supported"):
        new_archive(data)


def test_unknown_magic_rejected():
    with pytest.raises(XcoffError, match="unrecognised archive magic"):
        new_archive(b"!<arch>\n" + bytes(200))


def test_short_magic_rejected():
    with pytest.raises(XcoffError):
        new_archive(b"<big")


def test_missing_fmag_rejected():
    data = _build_archive([("a.o", b"payload")], fmag=b"XX")
    with pytest.raises(XcoffError, match="AIAFMAG"):
        new_archive(data)


def test_truncated_member_header_rejected():
    data = _build_archive([("a.o", b"payload")])
    with pytest.raises(XcoffError):
        new_archive(data[: FL_HSZ_BIG + 50])


def test_bad_decimal_rejected():
    data = bytearray(_build_archive([("a.o", b"payload")]))
    data[FL_HSZ_BIG:FL_HSZ_BIG + 20] = b"notanumber".ljust(20, b" ")
    with pytest.raises(XcoffError, match="size"):
        new_archive(bytes(data))


def test_get_file_parses_member():
    archive = new_archive(_build_archive([("lib.o", _minimal_xcoff())]))
    xcoff = archive.get_file("lib.o")
    assert xcoff.target_machine == U802TOCMAGIC
    assert xcoff.symbols == []


def test_get_file_unknown_member():
    archive = new_archive(_build_archive([("lib.o", _minimal_xcoff())]))
    with pytest.raises(XcoffError, match="unknown member missing.o"):
        archive.get_file("missing.o")


def test_open_archive_and_close(tmp_path):
    path = tmp_path / "lib.a"
    path.write_bytes(_build_archive([("m.o", b"content")]))
    with open_archive(str(path)) as archive:
        assert archive.members[0].data() == b"content"
        closer = archive._closer
    assert archive._closer is None
    assert closer.closed


def test_open_archive_invalid_file(tmp_path):
    path = tmp_path / "bad.a"
    path.write_bytes(b"garbage!" + bytes(10))
    with pytest.raises(XcoffError):
        open_archive(str(path))
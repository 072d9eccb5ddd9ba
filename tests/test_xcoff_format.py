import io

import pytest

from lensm.xcoff_format import (
    FILHSZ_32,
    FILHSZ_64,
    LDHDRSZ_32,
    LDHDRSZ_64,
    SYMESZ,
    U64_TOCMAGIC,
    U802TOCMAGIC,
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

SAMPLES = [
    FileHeader32(U802TOCMAGIC, 3, 100, 2000, 7, 0, 2),
    FileHeader64(U64_TOCMAGIC, 4, 200, 1 << 40, 0, 2, 9),
    SectionHeader32(b".text\x00\x00\x00", 0, 64, 128, 256, 512, 0, 3, 0, 0x20),
    SectionHeader64(b".data\x00\x00\x00", 0, 1 << 33, 128, 256, 512, 0, 3, 0, 0x40),
    SymEnt32(b"main\x00\x00\x00\x00", 12, 1, 0x20, 2, 2),
    SymEnt64(1 << 35, 4, 1, 0x20, 2, 1),
    AuxFcn32(0, 48, 0, 5),
    AuxFcn64(0, 48, 5),
    AuxCSect32(48, 0, 0, 0x11, 0),
    AuxCSect64(48, 0, 0, 0x11, 0, 1),
    LoaderHeader32(1, 2, 3, 4, 5, 6, 7, 8),
    LoaderHeader64(2, 2, 3, 4, 5, 6, 1 << 34, 8, 56, 64),
    LoaderSymbol32(b"printf\x00\x00", 0, 0, 0x40, 0, 1, 0),
    LoaderSymbol64(0, 4, 0, 0x40, 0, 1, 0),
    Reloc32(16, 2, 0x3F, 0),
    Reloc64(1 << 36, 2, 0x3F, 0),
]


@pytest.mark.parametrize("record", SAMPLES, ids=lambda r: type(r).__name__)
def test_round_trip(record):
    data = record.pack()
    assert len(data) == type(record).size()
    assert read_record(type(record), io.BytesIO(data)) == record


@pytest.mark.parametrize(
    "record_type, size",
    [
        (FileHeader32, FILHSZ_32),
        (FileHeader64, FILHSZ_64),
        (LoaderHeader32, LDHDRSZ_32),
        (LoaderHeader64, LDHDRSZ_64),
        (SymEnt32, SYMESZ),
        (SymEnt64, SYMESZ),
        (AuxFcn32, SYMESZ),
        (AuxFcn64, SYMESZ),
        (AuxCSect32, SYMESZ),
        (AuxCSect64, SYMESZ),
    ],
)
def test_sizes_match_format_constants(record_type, size):
    assert record_type.size() == size


def test_magic_is_big_endian_on_the_wire():
    header = FileHeader32(U802TOCMAGIC, 0, 0, 0, 0, 0, 0)
    assert header.pack()[:2] == b"\x01\xdf"


def test_unpack_reads_big_endian_fields():
    data = b"\x00\x00\x00\x10\x00\x00\x00\x02\x3f\x00"
    reloc = read_record(Reloc32, io.BytesIO(data))
    assert reloc.rvaddr == 0x10
    assert reloc.rsymndx == 0x02
    assert reloc.rsize == 0x3F
    assert reloc.rtype == 0


def test_consecutive_reads_advance_stream():
    first = SymEnt64(1, 4, 1, 0, 2, 1)
    second = AuxCSect64(48, 0, 0, 1, 0, 0)
    stream = io.BytesIO(first.pack() + second.pack())
    assert read_record(SymEnt64, stream) == first
    assert read_record(AuxCSect64, stream) == second
    assert stream.read() == b""


def test_short_record_raises():
    data = Reloc64(1, 2, 3, 4).pack()[:-1]
    with pytest.raises(EOFError):
        read_record(Reloc64, io.BytesIO(data))


def test_empty_stream_raises():
    with pytest.raises(EOFError):
        read_record(FileHeader64, io.BytesIO(b""))
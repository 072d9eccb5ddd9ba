"""On-disk record layouts and constants of the XCOFF object file format."""

from __future__ import annotations

import dataclasses
import struct
from dataclasses import dataclass
from typing import BinaryIO, ClassVar, TypeVar

# File header sizes.
FILHSZ_32 = 20
FILHSZ_64 = 24

U802TOCMAGIC = 0o737  # AIX 32-bit XCOFF
U64_TOCMAGIC = 0o767  # AIX 64-bit XCOFF

# Flags that describe the type of the object file.
F_RELFLG = 0x0001
F_EXEC = 0x0002
F_LNNO = 0x0004
F_FDPR_PROF = 0x0010
F_FDPR_OPTI = 0x0020
F_DSA = 0x0040
F_VARPG = 0x0100
F_DYNLOAD = 0x1000
F_SHROBJ = 0x2000
F_LOADONLY = 0x4000

# Flags defining the section type.
STYP_DWARF = 0x0010
STYP_TEXT = 0x0020
STYP_DATA = 0x0040
STYP_BSS = 0x0080
STYP_EXCEPT = 0x0100
STYP_INFO = 0x0200
STYP_TDATA = 0x0400
STYP_TBSS = 0x0800
STYP_LOADER = 0x1000
STYP_DEBUG = 0x2000
STYP_TYPCHK = 0x4000
STYP_OVRFLO = 0x8000

SSUBTYP_DWINFO = 0x10000
SSUBTYP_DWLINE = 0x20000
SSUBTYP_DWPBNMS = 0x30000
SSUBTYP_DWPBTYP = 0x40000
SSUBTYP_DWARNGE = 0x50000
SSUBTYP_DWABREV = 0x60000
SSUBTYP_DWSTR = 0x70000
SSUBTYP_DWRNGES = 0x80000
SSUBTYP_DWLOC = 0x90000
SSUBTYP_DWFRAME = 0xA0000
SSUBTYP_DWMAC = 0xB0000

SYMESZ = 18

# Section numbers.
N_DEBUG = -2
N_ABS = -1
N_UNDEF = 0

# Symbol type bits.
SYM_V_INTERNAL = 0x1000
SYM_V_HIDDEN = 0x2000
SYM_V_PROTECTED = 0x3000
SYM_V_EXPORTED = 0x4000
SYM_TYPE_FUNC = 0x0020

# Storage classes.
C_NULL = 0
C_EXT = 2
C_STAT = 3
C_BLOCK = 100
C_FCN = 101
C_FILE = 103
C_HIDEXT = 107
C_BINCL = 108
C_EINCL = 109
C_WEAKEXT = 111
C_DWARF = 112
C_GSYM = 128
C_LSYM = 129
C_PSYM = 130
C_RSYM = 131
C_RPSYM = 132
C_STSYM = 133
C_BCOMM = 135
C_ECOML = 136
C_ECOMM = 137
C_DECL = 140
C_ENTRY = 141
C_FUN = 142
C_BSTAT = 143
C_ESTAT = 144
C_GTLS = 145
C_STTLS = 146

# Auxiliary entry types.
_AUX_EXCEPT = 255
_AUX_FCN = 254
_AUX_SYM = 253
_AUX_FILE = 252
_AUX_CSECT = 251
_AUX_SECT = 250

# Symbol type field.
XTY_ER = 0
XTY_SD = 1
XTY_LD = 2
XTY_CM = 3

# File auxiliary string types.
XFT_FN = 0
XFT_CT = 1
XFT_CV = 2
XFT_CD = 128

# Storage-mapping classes.
XMC_PR = 0
XMC_RO = 1
XMC_DB = 2
XMC_TC = 3
XMC_UA = 4
XMC_RW = 5
XMC_GL = 6
XMC_XO = 7
XMC_SV = 8
XMC_BS = 9
XMC_DS = 10
XMC_UC = 11
XMC_TC0 = 15
XMC_TD = 16
XMC_SV64 = 17
XMC_SV3264 = 18
XMC_TL = 20
XMC_UL = 21
XMC_TE = 22

LDHDRSZ_32 = 32
LDHDRSZ_64 = 56

# Relocation types.
R_POS = 0x00
R_NEG = 0x01
R_REL = 0x02
R_TOC = 0x03
R_TRL = 0x12
R_TRLA = 0x13
R_GL = 0x05
R_TCL = 0x06
R_RL = 0x0C
R_RLA = 0x0D
R_REF = 0x0F
R_BA = 0x08
R_RBA = 0x18
R_BR = 0x0A
R_RBR = 0x1A
R_TLS = 0x20
R_TLS_IE = 0x21
R_TLS_LD = 0x22
R_TLS_LE = 0x23
R_TLSM = 0x24
R_TLSML = 0x25
R_TOCU = 0x30
R_TOCL = 0x31


R = TypeVar("R", bound="_Record")


class _Record:
    """A fixed-size big-endian record whose fields follow the struct layout in order."""

    _STRUCT: ClassVar[struct.Struct]

    @classmethod
    def size(cls) -> int:
        return cls._STRUCT.size

    @classmethod
    def unpack(cls: type[R], data: bytes) -> R:
        return cls(*cls._STRUCT.unpack(data))

    def pack(self) -> bytes:
        return self._STRUCT.pack(*dataclasses.astuple(self))


@dataclass(frozen=True)
class FileHeader32(_Record):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct(">HHIIIHH")
    fmagic: int
    fnscns: int
    ftimedat: int
    fsymptr: int
    fnsyms: int
    fopthdr: int
    fflags: int


@dataclass(frozen=True)
class FileHeader64(_Record):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct(">HHIQHHI")
    fmagic: int
    fnscns: int
    ftimedat: int
    fsymptr: int
    fopthdr: int
    fflags: int
    fnsyms: int


@dataclass(frozen=True)
class SectionHeader32(_Record):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct(">8sIIIIIIHHI")
    sname: bytes
    spaddr: int
    svaddr: int
    ssize: int
    sscnptr: int
    srelptr: int
    slnnoptr: int
    snreloc: int
    snlnno: int
    sflags: int


@dataclass(frozen=True)
class SectionHeader64(_Record):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct(">8sQQQQQQIIII")
    sname: bytes
    spaddr: int
    svaddr: int
    ssize: int
    sscnptr: int
    srelptr: int
    slnnoptr: int
    snreloc: int
    snlnno: int
    sflags: int
    spad: int = 0


@dataclass(frozen=True)
class SymEnt32(_Record):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct(">8sIHHBB")
    nname: bytes
    nvalue: int
    nscnum: int
    ntype: int
    nsclass: int
    nnumaux: int


@dataclass(frozen=True)
class SymEnt64(_Record):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct(">QIHHBB")
    nvalue: int
    noffset: int
    nscnum: int
    ntype: int
    nsclass: int
    nnumaux: int


@dataclass(frozen=True)
class AuxFcn32(_Record):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct(">IIIIH")
    xexptr: int
    xfsize: int
    xlnnoptr: int
    xendndx: int
    xpad: int = 0


@dataclass(frozen=True)
class AuxFcn64(_Record):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct(">QIIBB")
    xlnnoptr: int
    xfsize: int
    xendndx: int
    xpad: int = 0
    xauxtype: int = _AUX_FCN


@dataclass(frozen=True)
class AuxCSect32(_Record):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct(">IIHBBIH")
    xscnlen: int
    xparmhash: int
    xsnhash: int
    xsmtyp: int
    xsmclas: int
    xstab: int = 0
    xsnstab: int = 0


@dataclass(frozen=True)
class AuxCSect64(_Record):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct(">IIHBBIBB")
    xscnlenlo: int
    xparmhash: int
    xsnhash: int
    xsmtyp: int
    xsmclas: int
    xscnlenhi: int
    xpad: int = 0
    xauxtype: int = _AUX_CSECT


@dataclass(frozen=True)
class LoaderHeader32(_Record):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct(">IIIIIIII")
    lversion: int
    lnsyms: int
    lnreloc: int
    listlen: int
    lnimpid: int
    limpoff: int
    lstlen: int
    lstoff: int


@dataclass(frozen=True)
class LoaderHeader64(_Record):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct(">IIIIIIQQQQ")
    lversion: int
    lnsyms: int
    lnreloc: int
    listlen: int
    lnimpid: int
    lstlen: int
    limpoff: int
    lstoff: int
    lsymoff: int
    lrldoff: int


@dataclass(frozen=True)
class LoaderSymbol32(_Record):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct(">8sIHBBII")
    lname: bytes
    lvalue: int
    lscnum: int
    lsmtype: int
    lsmclas: int
    lifile: int
    lparm: int


@dataclass(frozen=True)
class LoaderSymbol64(_Record):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct(">QIHBBII")
    lvalue: int
    loffset: int
    lscnum: int
    lsmtype: int
    lsmclas: int
    lifile: int
    lparm: int


@dataclass(frozen=True)
class Reloc32(_Record):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct(">IIBB")
    rvaddr: int
    rsymndx: int
    rsize: int
    rtype: int


@dataclass(frozen=True)
class Reloc64(_Record):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct(">QIBB")
    rvaddr: int
    rsymndx: int
    rsize: int
    rtype: int


def read_record(record_type: type[R], stream: BinaryIO) -> R:
    """Read one record of the given type from stream; raise EOFError if it is cut short."""
    size = record_type.size()
    data = stream.read(size)
    if len(data) < size:
        if not data:
            raise EOFError(f"end of data reading {record_type.__name__}")
        raise EOFError(
            f"unexpected end of data reading {record_type.__name__}: "
            f"got {len(data)} of {size} bytes"
        )
    return record_type.unpack(data)
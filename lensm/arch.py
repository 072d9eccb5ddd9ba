"""Descriptions of the target architectures a binary can be built for."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Literal

__all__ = [
    "ArchFamily",
    "Arch",
    "ARCH_386",
    "ARCH_AMD64",
    "ARCH_ARM",
    "ARCH_ARM64",
    "ARCH_LOONG64",
    "ARCH_MIPS",
    "ARCH_MIPSLE",
    "ARCH_MIPS64",
    "ARCH_MIPS64LE",
    "ARCH_PPC64",
    "ARCH_PPC64LE",
    "ARCH_RISCV64",
    "ARCH_S390X",
    "ARCH_WASM",
    "ARCHS",
    "EXEC_ARG_LENGTH_LIMIT",
    "arch_by_name",
]

# Number of bytes that can safely be passed as arguments to a started command.
EXEC_ARG_LENGTH_LIMIT = 30 << 10


class ArchFamily(enum.IntEnum):
    """A family of one or more related architectures."""

    NO_ARCH = 0
    AMD64 = 1
    ARM = 2
    ARM64 = 3
    I386 = 4
    LOONG64 = 5
    MIPS = 6
    MIPS64 = 7
    PPC64 = 8
    RISCV64 = 9
    S390X = 10
    WASM = 11


ByteOrder = Literal["little", "big"]


@dataclass(frozen=True)
class Arch:
    """An individual architecture and the properties code generation relies on."""

    name: str
    family: ArchFamily
    byte_order: ByteOrder
    ptr_size: int
    reg_size: int
    min_lc: int
    alignment: int
    can_merge_loads: bool = False
    can_jump_table: bool = False
    has_lr: bool = False
    fixed_frame_size: int = 0

    def in_family(self, *args: ArchFamily) -> bool:
        """Report whether this architecture belongs to any of the given families."""
        return self.family in args


ARCH_386 = Arch(
    name="386", family=ArchFamily.I386, byte_order="little",
    ptr_size=4, reg_size=4, min_lc=1, alignment=1,
    can_merge_loads=True, has_lr=False, fixed_frame_size=0,
)

ARCH_AMD64 = Arch(
    name="amd64", family=ArchFamily.AMD64, byte_order="little",
    ptr_size=8, reg_size=8, min_lc=1, alignment=1,
    can_merge_loads=True, can_jump_table=True, has_lr=False, fixed_frame_size=0,
)

ARCH_ARM = Arch(
    name="arm", family=ArchFamily.ARM, byte_order="little",
    ptr_size=4, reg_size=4, min_lc=4, alignment=4,
    can_merge_loads=False, has_lr=True, fixed_frame_size=4,
)

ARCH_ARM64 = Arch(
    name="arm64", family=ArchFamily.ARM64, byte_order="little",
    ptr_size=8, reg_size=8, min_lc=4, alignment=1,
    can_merge_loads=True, can_jump_table=True, has_lr=True, fixed_frame_size=8,
)

ARCH_LOONG64 = Arch(
    name="loong64", family=ArchFamily.LOONG64, byte_order="little",
    ptr_size=8, reg_size=8, min_lc=4, alignment=8,
    can_merge_loads=False, has_lr=True, fixed_frame_size=8,
)

ARCH_MIPS = Arch(
    name="mips", family=ArchFamily.MIPS, byte_order="big",
    ptr_size=4, reg_size=4, min_lc=4, alignment=4,
    can_merge_loads=False, has_lr=True, fixed_frame_size=4,
)

ARCH_MIPSLE = Arch(
    name="mipsle", family=ArchFamily.MIPS, byte_order="little",
    ptr_size=4, reg_size=4, min_lc=4, alignment=4,
    can_merge_loads=False, has_lr=True, fixed_frame_size=4,
)

ARCH_MIPS64 = Arch(
    name="mips64", family=ArchFamily.MIPS64, byte_order="big",
    ptr_size=8, reg_size=8, min_lc=4, alignment=8,
    can_merge_loads=False, has_lr=True, fixed_frame_size=8,
)

ARCH_MIPS64LE = Arch(
    name="mips64le", family=ArchFamily.MIPS64, byte_order="little",
    ptr_size=8, reg_size=8, min_lc=4, alignment=8,
    can_merge_loads=False, has_lr=True, fixed_frame_size=8,
)

# PIC code on ppc64le requires 32 bytes of stack; it is used always.
ARCH_PPC64 = Arch(
    name="ppc64", family=ArchFamily.PPC64, byte_order="big",
    ptr_size=8, reg_size=8, min_lc=4, alignment=1,
    can_merge_loads=False, has_lr=True, fixed_frame_size=4 * 8,
)

ARCH_PPC64LE = Arch(
    name="ppc64le", family=ArchFamily.PPC64, byte_order="little",
    ptr_size=8, reg_size=8, min_lc=4, alignment=1,
    can_merge_loads=True, has_lr=True, fixed_frame_size=4 * 8,
)

ARCH_RISCV64 = Arch(
    name="riscv64", family=ArchFamily.RISCV64, byte_order="little",
    ptr_size=8, reg_size=8, min_lc=4, alignment=8,
    can_merge_loads=False, has_lr=True, fixed_frame_size=8,
)

ARCH_S390X = Arch(
    name="s390x", family=ArchFamily.S390X, byte_order="big",
    ptr_size=8, reg_size=8, min_lc=2, alignment=1,
    can_merge_loads=True, has_lr=True, fixed_frame_size=8,
)

ARCH_WASM = Arch(
    name="wasm", family=ArchFamily.WASM, byte_order="little",
    ptr_size=8, reg_size=8, min_lc=1, alignment=1,
    can_merge_loads=False, has_lr=False, fixed_frame_size=0,
)

ARCHS: tuple[Arch, ...] = (
    ARCH_386,
    ARCH_AMD64,
    ARCH_ARM,
    ARCH_ARM64,
    ARCH_LOONG64,
    ARCH_MIPS,
    ARCH_MIPSLE,
    ARCH_MIPS64,
    ARCH_MIPS64LE,
    ARCH_PPC64,
    ARCH_PPC64LE,
    ARCH_RISCV64,
    ARCH_S390X,
    ARCH_WASM,
)

_BY_NAME = {arch.name: arch for arch in ARCHS}


def arch_by_name(name: str) -> Arch:
    """Return the architecture with the given name, raising KeyError if unknown."""
    try:
        return _BY_NAME[name]
    except KeyError:
        raise KeyError(f"unknown architecture {name!r}") from None
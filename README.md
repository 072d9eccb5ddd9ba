# lensm

Pure-Python building blocks for looking at compiled code next to its
source. The package has compact source positions and a table of target
architectures. It can also read AIX XCOFF object files and AIX big
archives. It needs nothing outside the standard library.

## Installation

Install from a checkout of the project:

```
pip install .
```

The tests use pytest, which comes with the `test` extra:

```
pip install ".[test]"
pytest
```

## Modules

### `lensm.arch`

- `ArchFamily` is an `IntEnum` of architecture families, such as `AMD64`, `ARM64`, `MIPS` and `PPC64`.
- `Arch` is a frozen dataclass. It holds `name`, `family`, `byte_order` (`"little"` or `"big"`), `ptr_size`, `reg_size`, `min_lc`, `alignment`, `can_merge_loads`, `can_jump_table`, `has_lr` and `fixed_frame_size`.
- The module defines one `Arch` per target: `ARCH_386`, `ARCH_AMD64`, `ARCH_ARM`, `ARCH_ARM64`, `ARCH_LOONG64`, `ARCH_MIPS`, `ARCH_MIPSLE`, `ARCH_MIPS64`, `ARCH_MIPS64LE`, `ARCH_PPC64`, `ARCH_PPC64LE`, `ARCH_RISCV64`, `ARCH_S390X` and `ARCH_WASM`. All of them are collected in `ARCHS`.
- `arch_by_name("amd64")` returns an architecture by name. It raises `KeyError` for an unknown name.
- `Arch.in_family(*families)` reports whether the architecture belongs to any of the given families.
- `EXEC_ARG_LENGTH_LIMIT` is the number of argument bytes that is considered safe to pass to a started command (30 KiB).

### `lensm.pos`

- `Lico` packs a line (20 bits), a column (8 bits), a prologue/epilogue marker (`PosXlogue`) and a statement marker (`POS_DEFAULT_STMT`, `POS_IS_STMT`, `POS_NOT_STMT`) into 32 bits. `make_lico` saturates values that are too large. `make_bogus_lico` gives the "bogus line" position.
- `Pos` is a `Lico` relative to a `PosBase`. It offers:
  - `is_known`, `before` and `after`;
  - `filename`, `rel_filename`, `rel_line`, `rel_col`, `abs_filename` and `sym_filename`;
  - `line_number` and `line_number_html`;
  - `format(show_col, show_orig)`, which produces `"file:line[:col]"`. For positions under a line directive it appends the original position in brackets.
- `new_file_base`, `new_line_pragma_base` and `new_inlining_base` build `PosBase` values. `make_pos` builds a `Pos`.

### `lensm.xpos`

- `XPos` is the compact form of a position. It stores a base index instead of the base itself.
- `XPos` has methods for comparing positions, setting the statement and prologue/epilogue markers, and moving a position to column 1. `with_bogus_line` raises `ValueError` when the position has no file.
- `PosTable` converts in both directions with `xpos(pos)` and `pos(xpos)`.
- `PosTable` keeps a table of file symbol names, read with `file_index(name)` and `file_table()`.

### `lensm.xcoff_format`

- The module holds the XCOFF constants: magics, section types, storage classes, relocation types and others.
- It defines the big-endian record layouts as frozen dataclasses, for example `FileHeader32`/`FileHeader64`, `SectionHeader32`/`SectionHeader64`, `SymEnt32`/`SymEnt64` and `Reloc32`/`Reloc64`.
- `read_record(record_type, stream)` reads one record. It raises `EOFError` when the data runs out.

### `lensm.xcoff`

`open_file(path)` and `new_file(bytes_or_stream)` parse an XCOFF file into an `XcoffFile`. `XcoffFile` has these parts:

- `sections`: a list of `Section`. `Section.data()` returns the section contents. Each section has `relocs` for text and data sections.
- `symbols`: the external, weak and hidden symbols that have csect information.
- `section(name)` looks a section up by name. Names longer than 8 bytes are also matched in their truncated form.
- `section_by_type(typ)` returns the first section of the given type.
- `csect(name)` returns the contents of a named csect.
- `imported_symbols()` and `imported_libraries()` read the loader section.
- `close()` closes the file. `XcoffFile` can also be used in a `with` block.

Two helpers read strings: `cstring` and `get_string`. Malformed input raises `XcoffError`, which is a subclass of `ValueError`.

### `lensm.xcoff_archive`

- `open_archive(path)` and `new_archive(bytes_or_stream)` read an AIX big archive into an `Archive`. The archive holds a list of `Member`.
- `Member.data()` returns a member's bytes.
- `Archive.get_file(name)` parses the first member with that name as XCOFF.
- Small (non-big) archives are rejected with `XcoffError`.

### `lensm.util`

- `in_range(value, length)` checks whether a value is a valid index for the given length.
- `ease_in_out_cubic(t)` computes a cubic ease-in/ease-out curve.
- `sorting_name(symbol)` makes a symbol ordering key: lower case, with runs of space, `*`, `(`, `)` and `.` turned into a single space.
- `ScrollAnimation` is an eased scroll driven by the time you pass in:
  - `start(now, from_, to, duration)` begins the scroll. `now` and `duration` are in seconds.
  - `update(now)` returns `(position, running)`.
  - `stop()` ends the scroll.

## Example

```python
from lensm.xcoff import open_file

with open_file("prog.o") as obj:
    text = obj.section(".text")
    for sym in obj.symbols:
        print(sym.name, hex(sym.value))
```

## What this package does not do

- It has no command-line program and no graphical viewer.
- It does not decode machine instructions or disassemble functions.
- It does not load source files next to disassembly.
- Of object-file formats it reads only XCOFF files and AIX big archives. It does not read ELF, Mach-O, PE or WebAssembly modules.
- It does not parse DWARF debug information, even when an XCOFF file contains it.
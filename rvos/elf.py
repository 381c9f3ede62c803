"""Reading and writing the ELF64 file and program headers of executables."""

import enum
import struct
from dataclasses import dataclass, field

ELF_MAGIC = 0x464C457F  # "\x7FELF" in little endian

ELF_PROG_LOAD = 1

_ELFHDR = struct.Struct("<I12sHHIQQQIHHHHHH")
_PROGHDR = struct.Struct("<IIQQQQQQ")

ELFHDR_SIZE = _ELFHDR.size
PROGHDR_SIZE = _PROGHDR.size


class ElfFormatError(ValueError):
    """Raised when bytes do not hold a valid ELF header."""


class ProgramFlags(enum.IntFlag):
    EXEC = 1
    WRITE = 2
    READ = 4


@dataclass
class ElfHeader:
    magic: int = ELF_MAGIC
    elf: bytes = field(default=bytes(12))
    type: int = 0
    machine: int = 0
    version: int = 0
    entry: int = 0
    phoff: int = 0
    shoff: int = 0
    flags: int = 0
    ehsize: int = ELFHDR_SIZE
    phentsize: int = PROGHDR_SIZE
    phnum: int = 0
    shentsize: int = 0
    shnum: int = 0
    shstrndx: int = 0

    def pack(self):
        """Encode the header as little-endian bytes."""
        return _ELFHDR.pack(
            self.magic, bytes(self.elf), self.type, self.machine, self.version,
            self.entry, self.phoff, self.shoff, self.flags, self.ehsize,
            self.phentsize, self.phnum, self.shentsize, self.shnum, self.shstrndx,
        )


@dataclass
class ProgramHeader:
    type: int = ELF_PROG_LOAD
    flags: ProgramFlags = ProgramFlags(0)
    off: int = 0
    vaddr: int = 0
    paddr: int = 0
    filesz: int = 0
    memsz: int = 0
    align: int = 0

    @property
    def is_load(self):
        return self.type == ELF_PROG_LOAD

    def pack(self):
        """Encode the program header as little-endian bytes."""
        return _PROGHDR.pack(
            self.type, int(self.flags), self.off, self.vaddr, self.paddr,
            self.filesz, self.memsz, self.align,
        )


def parse_elf_header(data):
    """Decode and validate the ELF header at the start of data."""
    if len(data) < ELFHDR_SIZE:
        raise ElfFormatError(f"ELF header needs {ELFHDR_SIZE} bytes, got {len(data)}")
    header = ElfHeader(*_ELFHDR.unpack_from(data, 0))
    if header.magic != ELF_MAGIC:
        raise ElfFormatError(f"bad ELF magic {header.magic:#x}")
    return header


def parse_program_header(data, offset):
    """Decode the program header that starts at offset in data."""
    if offset < 0 or offset + PROGHDR_SIZE > len(data):
        raise ElfFormatError(f"program header at offset {offset} runs past end of data")
    fields = list(_PROGHDR.unpack_from(data, offset))
    fields[1] = ProgramFlags(fields[1])
    return ProgramHeader(*fields)


def program_headers(data):
    """Return every program header listed by the ELF header of data."""
    header = parse_elf_header(data)
    return [
        parse_program_header(data, header.phoff + i * PROGHDR_SIZE)
        for i in range(header.phnum)
    ]
# rvos

`rvos` models parts of a small RISC-V operating system in plain Python,
with no third-party dependencies.

## Modules

- `rvos.riscv` – Sv39 paging arithmetic and the physical memory map of the
  qemu `virt` machine: `pg_round_up`, `pg_round_down`, `pa2pte`, `pte2pa`,
  `pte_flags`, `px_shift`, `px`, `make_satp`, `kstack`,
  `clint_mtimecmp`, `plic_menable`, `plic_senable`, `plic_mpriority`,
  `plic_spriority`, `plic_mclaim`, `plic_sclaim`, plus constants such as
  `PGSIZE`, `MAXVA`, `PTE_V`/`PTE_R`/`PTE_W`/`PTE_X`/`PTE_U`, `KERNBASE`,
  `PHYSTOP`, `TRAMPOLINE`, `TRAPFRAME` and the open flags `O_RDONLY`,
  `O_WRONLY`, `O_RDWR`, `O_CREATE`, `O_TRUNC`.
- `rvos.elf` – 64-bit little-endian ELF file and program headers:
  `ElfHeader`, `ProgramHeader` (each with `pack()`), `ProgramFlags`,
  `parse_elf_header`, `parse_program_header`, `program_headers`.
  Bad magic or truncated data raise `ElfFormatError`.
- `rvos.vm` – a three-level Sv39 page table over simulated physical memory.
  `PhysicalMemory(base, npages)` hands out pages with `kalloc()` (lowest
  address first, `None` when exhausted) and takes them back with `kfree()`.
  `create_pagetable(memory)` returns a `PageTable` with `walk`, `walkaddr`,
  `map_pages`, `kvmmap`, `unmap`, `load_first`, `grow`, `shrink`, `free`,
  `free_walk`, `copy_to`, `clear_user`, `copy_out`, `copy_in`,
  `copy_in_str` and `dump`. Invalid operations and unmapped user addresses
  raise `VMError`; running out of pages raises `MemoryError`.
- `rvos.mkfs` – builds a file-system disk image: `Layout` (block size,
  image size, inode count, log size, direct blocks, name length, magic),
  `Superblock`, the `ImageBuilder` context manager and `build_image`.
- `rvos.sh` – the shell's command-line parser. `parse_command` returns a
  tree of `ExecCmd`, `RedirCmd`, `PipeCmd`, `ListCmd` and `BackCmd`
  objects and raises `ShellSyntaxError` on bad input. It understands
  `|`, `;`, `&`, `( )`, `<`, `>` and `>>`, with at most 9 arguments per
  command.
- `rvos.printf` – `format_message`, `fprintf` and `printf` with the
  conversions `%d`, `%l`, `%x`, `%p`, `%s`, `%c` and `%%`; an unknown
  conversion is printed as written.
- `rvos.ulib` – `atoi`, `strcmp` and `gets`.
- `rvos.umalloc` – `Heap(limit)`, a first-fit free-list allocator over a
  simulated heap with `sbrk`, `malloc` (returns `None` when out of memory)
  and `free`.
- `rvos.grep`, `rvos.wc`, `rvos.cat`, `rvos.echo`, `rvos.ls`, `rvos.kill`,
  `rvos.ln`, `rvos.mkdir`, `rvos.rm` – the classic tools, each with a
  `main(argv=None)`; `grep.match`, `grep.grep_lines`, `wc.count` (returning
  `Counts`), `cat.cat`, `echo.echo`, `ls.fmtname` and `ls.ls` are usable on
  their own.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Examples

Page tables:

```python
from rvos.vm import PhysicalMemory, create_pagetable
from rvos.riscv import PTE_W

memory = PhysicalMemory(0x80000000, 64)
pt = create_pagetable(memory)
size = pt.grow(0, 8192, PTE_W)
pt.copy_out(100, b"hello\0")
assert pt.copy_in_str(100, 64) == b"hello"
print(pt.dump())
```

Building an image:

```python
from rvos.mkfs import build_image

used = build_image("fs.img", {"README": b"hello\n"})
```

Parsing a shell line:

```python
from rvos.sh import parse_command

cmd = parse_command("cat < in | grep x > out; echo done &\n")
```

Pattern matching with `^ . * $`:

```python
from rvos.grep import match

assert match("^a.*c$", "abbbc")
```

## Commands

Build a disk image from files. A leading `user/` and then a leading `_`
are stripped from each name; a name that still contains `/` is refused:

```
rvos-mkfs fs.img README user/_cat user/_echo
```

The tools work on the host's files:

```
rvos-echo hello world
rvos-cat notes.txt
rvos-grep '^a.*z$' words.txt
rvos-wc notes.txt
rvos-ls .
rvos-mkdir newdir
rvos-ln old new
rvos-rm old
rvos-kill 1234
```

Some behaviours to know:

- `rvos-grep` prints only lines that end in a newline.
- `rvos-ls` prints name (padded to 14 characters), type (1 directory,
  2 file, 3 device), inode number and size; a directory listing starts
  with `.` and `..` followed by the entries in sorted order.
- `rvos-mkdir` and `rvos-rm` stop at the first failure but still exit 0;
  `rvos-ln` reports a failed link and exits 0.
- `rvos-kill` sends a kill signal to each positive pid and ignores errors.

## What it does not do

There is no kernel to run: no processes, scheduler, traps, system calls,
device drivers or console. `rvos.sh` parses command lines but does not
execute them, and there is no interactive shell command. `rvos.mkfs` only
writes images; nothing in the package reads or mounts one. Page tables
and the heap live in simulated memory only.